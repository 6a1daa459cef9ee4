"""
Persistence: save and load game state to/from SQLite.

The save is one JSON object (the web build's localStorage shape), stored
in a key/value `metadata` table:
  - seed, turn, phase
  - units and enemies (scalar stats only)
  - globalResources, hand (card names and types), deckSize, discardSize
  - revealedTiles ("x,y" keys)

The map itself is never stored. Terrain, props and building interiors are
pure functions of the seed and coordinates, so a load reseeds the world
and re-reveals the saved keys.

Usage:
    from echoes_of_the_fall.core.persistence import save_game, load_game

    save_game(game, path="saves/autosave.db")
    if not load_game(game, path="saves/autosave.db"):
        ...  # Nothing loaded; the current game is untouched.
"""

import json
import os
import sqlite3
from typing import Any, Dict, Optional

from echoes_of_the_fall.config import DEFAULT_SAVE, SAVE_DIR, SAVE_KEY, SAVE_VERSION
from echoes_of_the_fall.entities.enemy import Enemy
from echoes_of_the_fall.entities.unit import Unit
from .logger import GameLogger, get_logger
from .state import RESOURCE_TYPES, GameState, GlobalResources, Phase

log = get_logger("persistence")

UNIT_FIELDS = ("id", "name", "x", "y", "health", "actionPoints",
               "radiationDose", "hydration", "nutrition")
ENEMY_FIELDS = ("id", "name", "x", "y", "health")
TOP_LEVEL_FIELDS = ("seed", "turn", "phase", "units", "enemies", "globalResources",
                    "hand", "deckSize", "discardSize", "revealedTiles")


class SaveError(ValueError):
    """A save payload that cannot be restored."""


def _default_path(path: Optional[str]) -> str:
    return path if path is not None else os.path.join(SAVE_DIR, DEFAULT_SAVE)


# ============================================================
# SERIALIZATION
# ============================================================

def _serialize_unit(state: GameState, unit: Unit) -> Dict:
    data = unit.to_dict()
    # Units inside a building are stored where they will reappear.
    if state.is_indoors(unit):
        data["x"], data["y"] = state.return_positions.get(unit.id, (unit.x, unit.y))
    return data


def serialize_state(state: GameState) -> Dict[str, Any]:
    """The full save payload for a game state."""
    deck = state.deck
    return {
        "version": SAVE_VERSION,
        "seed": state.seed,
        "turn": state.turn,
        "phase": state.phase.name,
        "units": [_serialize_unit(state, u) for u in state.unit_list],
        "enemies": [e.to_dict() for e in state.enemy_list],
        "globalResources": state.resources.to_dict(),
        "hand": [card.to_dict() for card in deck.hand],
        "deckSize": len(deck.draw_pile),
        "discardSize": len(deck.discard_pile),
        "revealedTiles": state.fog.revealed_keys(),
    }


def to_json(state: GameState) -> str:
    return json.dumps(serialize_state(state))


def from_json(text: str) -> Dict[str, Any]:
    try:
        data = json.loads(text)
    except (TypeError, json.JSONDecodeError) as e:
        raise SaveError(f"Save is not valid JSON: {e}") from e
    validate(data)
    return data


# ============================================================
# VALIDATION
# ============================================================

def _require(record: Any, fields, what: str) -> None:
    if not isinstance(record, dict):
        raise SaveError(f"{what} must be an object")
    missing = [f for f in fields if f not in record]
    if missing:
        raise SaveError(f"{what} is missing {', '.join(missing)}")


def _parse_phase(value: Any) -> Phase:
    for phase in Phase:
        if value in (phase.name, phase.value):
            return phase
    raise SaveError(f"Unknown phase: {value!r}")


def _parse_key(key: Any) -> None:
    try:
        x, y = str(key).split(",")
        int(x), int(y)
    except ValueError as e:
        raise SaveError(f"Bad revealed tile key: {key!r}") from e


def validate(data: Any) -> None:
    """Raise SaveError unless `data` has the full save shape."""
    from echoes_of_the_fall.engine.cards import CARD_TEMPLATES

    _require(data, TOP_LEVEL_FIELDS, "save")
    for name in ("units", "enemies", "hand", "revealedTiles"):
        if not isinstance(data[name], list):
            raise SaveError(f"{name} must be a list")
    for unit in data["units"]:
        _require(unit, UNIT_FIELDS, "unit")
    for enemy in data["enemies"]:
        _require(enemy, ENEMY_FIELDS, "enemy")
    _require(data["globalResources"], RESOURCE_TYPES, "globalResources")
    for card in data["hand"]:
        _require(card, ("name",), "hand card")
        if card["name"] not in CARD_TEMPLATES:
            raise SaveError(f"Unknown card: {card['name']!r}")
    for key in data["revealedTiles"]:
        _parse_key(key)
    _parse_phase(data["phase"])
    try:
        int(data["seed"]), int(data["turn"])
        int(data["deckSize"]), int(data["discardSize"])
    except (TypeError, ValueError) as e:
        raise SaveError(f"Bad numeric field: {e}") from e


# ============================================================
# RESTORE
# ============================================================

def restore_state(data: Dict[str, Any]) -> GameState:
    """Build a fresh GameState from a save payload. Raises SaveError."""
    validate(data)
    try:
        state = GameState(int(data["seed"]))
        state.turn = int(data["turn"])
        state.phase = _parse_phase(data["phase"])
        state.resources = GlobalResources.from_dict(data["globalResources"])

        state.fog.reveal_keys(data["revealedTiles"])

        for unit_data in data["units"]:
            state.add_unit(Unit.from_dict(unit_data))
        for enemy_data in data["enemies"]:
            state.add_enemy(Enemy.from_dict(enemy_data))
        if state.units:
            state.selected_unit_id = state.unit_list[0].id

        state.deck.init_cards()
        state.deck.restore([c["name"] for c in data["hand"]], int(data["discardSize"]))
    except (KeyError, TypeError, ValueError) as e:
        if isinstance(e, SaveError):
            raise
        raise SaveError(f"Save could not be restored: {e}") from e

    log.info("Restored turn %d (%d units, %d enemies, %d revealed tiles)",
             state.turn, len(state.units), len(state.enemies), len(state.fog.revealed))
    return state


# ============================================================
# PUBLIC API
# ============================================================

def save_game(game: Any, path: Optional[str] = None) -> str:
    """Save the game's state to SQLite.

    Args:
        game: Anything with a `state` attribute (normally a Game).
        path: Optional save file path. Defaults to saves/autosave.db.

    Returns:
        The path the save was written to.
    """
    path = _default_path(path)
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)

    # Remove old save
    if os.path.exists(path):
        os.remove(path)

    payload = to_json(game.state)
    conn = sqlite3.connect(path)
    try:
        cursor = conn.cursor()
        cursor.execute("""
            CREATE TABLE metadata (
                key TEXT PRIMARY KEY,
                value TEXT
            )
        """)
        cursor.execute("INSERT INTO metadata VALUES (?, ?)", (SAVE_KEY, payload))
        conn.commit()
    finally:
        conn.close()

    GameLogger().log_event("SAVE", f"Game saved to {path} (turn {game.state.turn}, "
                                   f"{len(game.state.units)} units)")
    game.state.events.message("Game Saved!")
    return path


def read_save(path: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """The validated payload from a save file, or None if there is none."""
    path = _default_path(path)
    if not os.path.exists(path):
        return None
    conn = sqlite3.connect(path)
    try:
        cursor = conn.cursor()
        cursor.execute("SELECT value FROM metadata WHERE key = ?", (SAVE_KEY,))
        row = cursor.fetchone()
    finally:
        conn.close()
    if not row:
        return None
    data = from_json(row[0])
    if data.get("version", SAVE_VERSION) != SAVE_VERSION:
        log.warning("Save version mismatch (save=%s, current=%s)",
                    data.get("version"), SAVE_VERSION)
    return data


def load_game(game: Any, path: Optional[str] = None) -> bool:
    """Replace the game's state with a saved one.

    Returns False, leaving the current state untouched, when there is no
    save or it cannot be restored.
    """
    try:
        data = read_save(path)
        if data is None:
            game.state.events.message("No save found")
            return False
        state = restore_state(data)
    except (SaveError, sqlite3.Error) as e:
        log.error("Error loading save %s: %s", _default_path(path), e)
        game.state.events.message("Failed to load save")
        return False

    game.attach(state)
    GameLogger().log_event("SAVE", f"Game loaded from {_default_path(path)} "
                                   f"(turn {state.turn})")
    state.events.message("Game Loaded!")
    return True


def has_save(path: Optional[str] = None) -> bool:
    """Check if a save file exists."""
    return os.path.exists(_default_path(path))


def delete_save(path: Optional[str] = None) -> None:
    """Delete a save file."""
    path = _default_path(path)
    if os.path.exists(path):
        os.remove(path)
        log.info("Deleted %s", path)
