"""
Game: the facade a front end drives.

A front end (the pygame viewer, the headless CLI, tests) never touches the
subsystems directly. It sends intents (tile clicks, context actions,
end turn, card plays) and reads back views (tiles, highlights, messages).
All intents are rejected outside the ACTIONS phase and after game over.
"""

from typing import Any, Dict, List, Optional

from echoes_of_the_fall.config import (
    DEFAULT_SEED, MAX_TURNS, OPENING_HAND, STARTING_NAMES, STARTING_POSITIONS,
)
from echoes_of_the_fall.core.events import EventType
from echoes_of_the_fall.core.logger import GameLogger
from echoes_of_the_fall.core.state import GameState, ViewMode
from echoes_of_the_fall.entities.unit import Unit
from .enemy_ai import attack_range
from .interactions import Action, InteractionSystem
from .interiors import InteriorManager
from .movement import move_unit, movement_range
from .turn import TurnManager

START_SEARCH_RADIUS = 20


class Game:
    def __init__(self, seed: int = DEFAULT_SEED, max_turns: int = MAX_TURNS):
        self.max_turns = max_turns
        self.state: GameState
        self.new_game(seed)

    def attach(self, state: GameState) -> None:
        """Point every subsystem at `state` (new game or load)."""
        self.state = state
        self.turns = TurnManager(state, self.max_turns)
        self.interiors = InteriorManager(state)
        self.interactions = InteractionSystem(state, self.interiors)
        self.turns.check_game_over()

    # ================================================================
    # SETUP
    # ================================================================

    def new_game(self, seed: Optional[int] = None) -> GameState:
        if seed is None:
            seed = self.state.seed if hasattr(self, "state") else DEFAULT_SEED
        state = GameState(seed)

        for name, (x, y) in zip(STARTING_NAMES, STARTING_POSITIONS):
            tile = self._starting_tile(state, x, y)
            state.add_unit(Unit(state.new_unit_id(), name, tile.x, tile.y))
        state.selected_unit_id = state.unit_list[0].id

        state.fog.initial_reveal(state.unit_list)
        state.deck.init_cards()
        state.deck.draw(OPENING_HAND)

        self.attach(state)
        GameLogger().log_event("GAME", f"New game, seed {seed}")
        return state

    @staticmethod
    def _starting_tile(state: GameState, x: int, y: int):
        """Nearest passable, empty, building-free tile to (x, y)."""
        for radius in range(START_SEARCH_RADIUS + 1):
            ring = [(x + dx, y + dy)
                    for dy in range(-radius, radius + 1)
                    for dx in range(-radius, radius + 1)
                    if max(abs(dx), abs(dy)) == radius]
            for tx, ty in ring:
                tile = state.world.get_ready_tile(tx, ty)
                if (tile is not None and tile.is_passable and not tile.has_building
                        and tile.occupant.is_empty):
                    return tile
        raise RuntimeError(f"No free starting tile near ({x}, {y})")

    # ================================================================
    # INTENTS
    # ================================================================

    def view_tile(self, x: int, y: int):
        return self.interactions.tile_at(x, y)

    def select_unit(self, unit_id: Optional[int]) -> bool:
        if unit_id is None:
            self.state.selected_unit_id = None
            return True
        if unit_id not in self.state.units:
            return False
        self.state.selected_unit_id = unit_id
        return True

    def tile_clicked(self, x: int, y: int, button: str = "left") -> bool:
        """Left selects a unit or moves the selected one; right deselects."""
        if not self.turns.can_act():
            return False
        if button == "right":
            return self.select_unit(None)

        tile = self.view_tile(x, y)
        if tile is None:
            return False
        if tile.occupant.is_unit:
            return self.select_unit(tile.occupant.entity_id)

        unit = self.state.selected_unit
        if unit is None or unit not in self.interactions.units_in_view():
            return False
        if (x, y) not in {(t.x, t.y) for t in movement_range(self.state, unit)}:
            return False
        return move_unit(self.state, unit, x, y)

    def action_invoked(self, action_id: str, x: int, y: int) -> bool:
        if not self.turns.can_act():
            return False
        return self.interactions.execute(action_id, x, y)

    def end_turn_requested(self) -> bool:
        return self.turns.end_turn()

    def play_card(self, index: int, target_id: Optional[int] = None) -> bool:
        if not self.turns.can_act():
            return False
        hand = self.state.deck.hand
        if not 0 <= index < len(hand):
            return False
        target = self.state.get_enemy(target_id) if target_id is not None else None
        return self.state.deck.play(self.state, hand[index], self.state.selected_unit, target)

    # ================================================================
    # QUERIES
    # ================================================================

    def context_actions(self, x: int, y: int) -> List[Action]:
        return self.interactions.available_actions(self.view_tile(x, y))

    def tile_view(self, x: int, y: int) -> Optional[Dict[str, Any]]:
        """What a renderer needs to draw one tile."""
        tile = self.view_tile(x, y)
        if tile is None:
            return None
        indoors = self.state.view_mode is ViewMode.INDOOR
        view = {
            "x": tile.x,
            "y": tile.y,
            "terrain": tile.terrain.value,
            "color": tile.terrain_def.color,
            "passable": tile.is_passable,
            "movement_cost": tile.movement_cost,
            "occupant": tile.occupant,
            "revealed": True if indoors else tile.revealed,
        }
        if indoors:
            view["furniture"] = tile.furniture.name if tile.furniture else None
            view["is_exit"] = tile.is_exit
        else:
            view["props"] = [p.name for p in tile.props]
            view["has_building"] = tile.has_building
            view["has_road"] = tile.has_road
            view["road_links"] = sorted(tile.road_links)
            view["radiation"] = tile.radiation_level
        return view

    def movement_highlights(self) -> List[Any]:
        unit = self.state.selected_unit
        if unit is None or unit not in self.interactions.units_in_view():
            return []
        return movement_range(self.state, unit)

    def attack_highlights(self) -> List[Any]:
        unit = self.state.selected_unit
        if unit is None or self.state.is_indoors(unit) or unit.action_points < 1:
            return []
        return attack_range(self.state, unit)

    def messages(self) -> List[str]:
        """Process pending events; returns the messages among them."""
        return [e.text for e in self.state.events.process(self.state.turn)
                if e.event_type == EventType.MESSAGE.value]

    # ================================================================
    # FRAME TICK
    # ================================================================

    def update(self) -> bool:
        """Advance display interpolation one step. True while anything moves."""
        moving = False
        for entity in self.state.unit_list + self.state.enemy_list:
            moving = entity.motion.advance() or moving
        return moving

    # ================================================================
    # SAVE / LOAD
    # ================================================================

    def save(self, path: Optional[str] = None) -> str:
        from echoes_of_the_fall.core.persistence import save_game
        return save_game(self, path)

    def load(self, path: Optional[str] = None) -> bool:
        from echoes_of_the_fall.core.persistence import load_game
        return load_game(self, path)
