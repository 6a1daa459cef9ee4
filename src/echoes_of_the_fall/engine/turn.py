"""
Turn Manager: the phase machine.

Phases run EVENT_DRAW -> PLAYER_HAND -> ACTIONS -> END_PHASE. Only ACTIONS
accepts player input. Ending ACTIONS runs the end phase to completion and
drops straight back into ACTIONS for the next turn:
  1. Radiation exposure and ARS drain for every unit
  2. Thirst and hunger
  3. Enemy AI
  4. A raider spawn every ENEMY_SPAWN_INTERVAL turns
  5. Card draw
  6. Modifier expiry (one-turn card buffs)
  7. AP refill
Once the game is over the machine is frozen.
"""

from typing import Any

from echoes_of_the_fall.config import CARDS_PER_TURN, ENEMY_SPAWN_INTERVAL, MAX_TURNS
from echoes_of_the_fall.core.events import Event, EventType
from echoes_of_the_fall.core.logger import GameLogger, get_logger
from echoes_of_the_fall.core.state import Phase
from .enemy_ai import spawn_enemies, update_enemies
from .radiation import apply_radiation
from .resources import consume_resources, resource_warnings

log = get_logger("turn")


class TurnManager:
    def __init__(self, state: Any, max_turns: int = MAX_TURNS):
        self.state = state
        self.max_turns = max_turns

    def can_act(self) -> bool:
        return not self.state.game_over and self.state.phase is Phase.ACTIONS

    def end_turn(self) -> bool:
        """Advance one step of the phase machine. Returns False once frozen."""
        state = self.state
        if state.game_over:
            return False

        if state.phase is Phase.EVENT_DRAW:
            state.phase = Phase.PLAYER_HAND
        elif state.phase is Phase.PLAYER_HAND:
            state.phase = Phase.ACTIONS
        elif state.phase is Phase.ACTIONS:
            state.phase = Phase.END_PHASE
            self.process_end_phase()
        elif state.phase is Phase.END_PHASE:
            self.process_end_phase()
        return True

    def process_end_phase(self) -> None:
        state = self.state
        finished = state.turn
        GameLogger().log_event("TURN", f"--- End of turn {finished} ---")

        # --- 1. Radiation ---
        for unit in state.unit_list:
            if unit.id in state.units:
                apply_radiation(state, unit)

        # --- 2. Thirst and hunger ---
        consume_resources(state)

        # --- 3. Enemies ---
        update_enemies(state)

        # --- 4. Spawns ---
        if state.turn % ENEMY_SPAWN_INTERVAL == 0 and state.units:
            spawn_enemies(state)

        # --- 5. Cards ---
        state.deck.draw(CARDS_PER_TURN)

        # --- 6. Modifiers ---
        for unit in state.unit_list:
            for expired in unit.modifiers.tick():
                log.debug("%s lost %s", unit.name, expired.name)

        # --- 7. AP ---
        for unit in state.unit_list:
            unit.reset_ap()

        state.turn += 1
        state.phase = Phase.ACTIONS
        for warning in resource_warnings(state):
            state.events.message(warning)
        state.events.emit(Event(EventType.TURN_ENDED.value,
                                data={"turn": finished, "next_turn": state.turn}))
        self.check_game_over()

    def check_game_over(self) -> bool:
        state = self.state
        if state.game_over:
            return True
        if not state.units:
            state.game_over, state.victory = True, False
            text = "All survivors have perished. Game over."
        elif state.turn > self.max_turns:
            state.game_over, state.victory = True, True
            text = f"You survived {self.max_turns} turns. Victory!"
        else:
            return False

        GameLogger().log_event("GAME", text)
        state.events.message(text)
        state.events.emit(Event(EventType.GAME_OVER.value,
                                data={"victory": state.victory, "turn": state.turn}))
        return True
