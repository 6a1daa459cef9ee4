from enum import Enum
from typing import Dict, Optional

from echoes_of_the_fall.config import (
    FLEE_HEALTH_FRACTION, RAIDER_ATTACK_RANGE, RAIDER_DAMAGE, RAIDER_HEALTH,
    RAIDER_MOVE_RANGE, RAIDER_SIGHT_RANGE,
)
from .motion import Motion
from .unit import clamp


class AIState(Enum):
    PATROL = "patrol"
    CHASE = "chase"
    ATTACK = "attack"
    FLEE = "flee"


class Enemy:
    """A hostile raider driven by a four-state machine."""

    def __init__(self, enemy_id: int, x: int, y: int, name: str = "Raider"):
        self.id = enemy_id
        self.name = name
        self.x = x
        self.y = y
        self.health: float = RAIDER_HEALTH
        self.max_health: float = RAIDER_HEALTH
        self.damage: int = RAIDER_DAMAGE
        self.move_range: int = RAIDER_MOVE_RANGE
        self.attack_range: int = RAIDER_ATTACK_RANGE
        self.sight_range: int = RAIDER_SIGHT_RANGE
        self.state: AIState = AIState.PATROL
        self.target_id: Optional[int] = None
        self.motion = Motion.at(x, y)

    def __repr__(self) -> str:
        return f"Enemy({self.id}, {self.name!r}, ({self.x}, {self.y}), {self.state.value})"

    @property
    def is_alive(self) -> bool:
        return self.health > 0

    def move_to(self, x: int, y: int) -> None:
        self.x = x
        self.y = y
        self.motion.set_target(x, y)

    def take_damage(self, amount: float) -> bool:
        """Returns True if this blow killed the enemy."""
        was_alive = self.is_alive
        self.health = clamp(self.health - max(0, amount), 0, self.max_health)
        return was_alive and not self.is_alive

    def decide_state(self, target_distance: Optional[float]) -> AIState:
        """Pick the state for this turn from the distance to the nearest unit."""
        if target_distance is None:
            self.state = AIState.PATROL
        elif self.health < self.max_health * FLEE_HEALTH_FRACTION:
            self.state = AIState.FLEE
        elif target_distance <= self.attack_range:
            self.state = AIState.ATTACK
        elif target_distance <= self.sight_range:
            self.state = AIState.CHASE
        else:
            self.state = AIState.PATROL
        return self.state

    def to_dict(self) -> Dict:
        return {"id": self.id, "name": self.name, "x": self.x, "y": self.y,
                "health": self.health, "maxHealth": self.max_health}

    @classmethod
    def from_dict(cls, data: Dict) -> "Enemy":
        enemy = cls(int(data["id"]), int(data["x"]), int(data["y"]),
                    str(data.get("name", "Raider")))
        enemy.max_health = float(data.get("maxHealth", RAIDER_HEALTH))
        enemy.health = clamp(float(data["health"]), 0, enemy.max_health)
        return enemy
