from dataclasses import dataclass

from echoes_of_the_fall.config import MOVE_LERP_SPEED, MOVE_SNAP_DISTANCE


@dataclass
class Motion:
    """Display position easing toward an entity's grid position.

    Advanced once per external tick; never affects game rules.
    """
    current_x: float
    current_y: float
    target_x: float
    target_y: float
    speed: float = MOVE_LERP_SPEED

    @classmethod
    def at(cls, x: float, y: float) -> "Motion":
        return cls(x, y, x, y)

    @property
    def moving(self) -> bool:
        return self.current_x != self.target_x or self.current_y != self.target_y

    def set_target(self, x: float, y: float) -> None:
        self.target_x = x
        self.target_y = y

    def snap(self, x: float, y: float) -> None:
        self.current_x = self.target_x = x
        self.current_y = self.target_y = y

    def advance(self) -> bool:
        """One tick of easing. Returns True while still moving."""
        dx = self.target_x - self.current_x
        dy = self.target_y - self.current_y
        if abs(dx) < MOVE_SNAP_DISTANCE and abs(dy) < MOVE_SNAP_DISTANCE:
            self.current_x = self.target_x
            self.current_y = self.target_y
            return False
        self.current_x += dx * self.speed
        self.current_y += dy * self.speed
        return True
