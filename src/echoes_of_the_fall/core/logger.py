import logging
import os
from datetime import datetime
from typing import Optional

from echoes_of_the_fall.config import LOG_DIR, LOG_LEVEL

ROOT_LOGGER = "echoes"


def get_logger(name: str) -> logging.Logger:
    """Child logger under the game's root logger."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


class GameLogger:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(GameLogger, cls).__new__(cls)
            cls._instance._setup()
        return cls._instance

    def _setup(self):
        self.logger = logging.getLogger(ROOT_LOGGER)
        self.logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
        self.log_path: Optional[str] = None
        self.echo = False

    def configure(self, log_dir: str = LOG_DIR, echo: bool = False) -> str:
        """Attach a dated file handler. Safe to call more than once."""
        self.echo = echo
        if self.log_path is not None:
            return self.log_path
        os.makedirs(log_dir, exist_ok=True)
        self.log_path = os.path.join(
            log_dir, f'game_{datetime.now().strftime("%Y%m%d")}.log')
        fh = logging.FileHandler(self.log_path)
        fh.setFormatter(logging.Formatter('%(asctime)s [%(levelname)s] %(name)s: %(message)s'))
        self.logger.addHandler(fh)
        return self.log_path

    def log_event(self, category: str, message: str):
        line = f"[{category}] {message}"
        if self.echo:
            print(line)
        self.logger.info(line)
