import math
from dataclasses import dataclass
from typing import Any, Optional

from echoes_of_the_fall.config import (
    BASE_DAMAGE, DAMAGE_VARIANCE, MELEE_RANGE, MISS_CHANCE,
)
from echoes_of_the_fall.core.events import Event, EventType
from echoes_of_the_fall.core.logger import GameLogger
from echoes_of_the_fall.entities.enemy import Enemy
from .pathfinding import euclidean


@dataclass
class CombatResult:
    hit: bool
    damage: int
    killed: bool
    message: str


def roll_damage(rng, base: float = BASE_DAMAGE, variance: float = DAMAGE_VARIANCE) -> int:
    """Uniform spread around `base`, rounded half up, at least 1."""
    raw = base + (rng.random() - 0.5) * 2 * variance
    return max(1, int(math.floor(raw + 0.5)))


def resolve_combat(state: Any, attacker: Any, defender: Any,
                   miss_chance: float = MISS_CHANCE,
                   variance: float = DAMAGE_VARIANCE) -> Optional[CombatResult]:
    if attacker is None or defender is None:
        return None

    if state.rng.random() < miss_chance:
        result = CombatResult(False, 0, False, f"{attacker.name} missed!")
    else:
        damage = roll_damage(state.rng, attacker.damage or BASE_DAMAGE, variance)
        message = f"{attacker.name} dealt {damage} damage to {defender.name}!"
        if isinstance(defender, Enemy):
            killed = state.damage_enemy(defender, damage)
        else:
            killed = state.damage_unit(defender, damage, cause=f"{attacker.name}'s attack")
        result = CombatResult(True, damage, killed, message)

    GameLogger().log_event("COMBAT", result.message)
    state.events.emit(Event(EventType.COMBAT.value, origin=(defender.x, defender.y),
                            data={"text": result.message, "hit": result.hit,
                                  "damage": result.damage, "killed": result.killed}))
    return result


def perform_attack(state: Any, unit: Any, target: Any) -> Optional[CombatResult]:
    """Melee attack costing 1 AP. None if out of range or out of AP."""
    if unit is None or target is None:
        return None
    if euclidean((unit.x, unit.y), (target.x, target.y)) > MELEE_RANGE:
        state.events.message("Target is out of reach")
        return None
    if not unit.spend_ap(1):
        state.events.message("Not enough AP to attack")
        return None
    return resolve_combat(state, unit, target)
