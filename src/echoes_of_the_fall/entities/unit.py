from typing import Dict

from echoes_of_the_fall.config import (
    ARS_THRESHOLDS, BASE_MOVE_RANGE, MAX_HEALTH, MAX_HYDRATION, MAX_NUTRITION,
    MAX_RADIATION, STARTING_AP, UNIT_BASE_DAMAGE,
)
from .modifiers import ModifierManager, create_modifier
from .motion import Motion


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def ars_stage_for(dose: float) -> int:
    """Number of thresholds the dose has reached."""
    stage = 0
    for threshold in ARS_THRESHOLDS:
        if dose >= threshold:
            stage += 1
    return stage


class Unit:
    """A survivor under the player's command."""

    def __init__(self, unit_id: int, name: str, x: int, y: int):
        self.id = unit_id
        self.name = name
        self.x = x
        self.y = y

        self.health: float = MAX_HEALTH
        self.max_health: float = MAX_HEALTH
        self.hydration: float = MAX_HYDRATION
        self.max_hydration: float = MAX_HYDRATION
        self.nutrition: float = MAX_NUTRITION
        self.max_nutrition: float = MAX_NUTRITION
        self.radiation_dose: float = 0
        self.max_radiation: float = MAX_RADIATION
        self.ars_stage: int = 0

        self.action_points: int = STARTING_AP
        self.max_action_points: int = STARTING_AP
        self.base_move_range: int = BASE_MOVE_RANGE
        self.damage: int = UNIT_BASE_DAMAGE

        self.modifiers = ModifierManager()
        self.motion = Motion.at(x, y)

    def __repr__(self) -> str:
        return f"Unit({self.id}, {self.name!r}, ({self.x}, {self.y}), hp={self.health})"

    @property
    def is_alive(self) -> bool:
        return self.health > 0

    @property
    def move_range(self) -> int:
        bonus = self.modifiers.get_bonus("move_range_bonus")
        return max(1, int(self.base_move_range + bonus))

    # ------------------------------------------------------------------
    # Movement and AP
    # ------------------------------------------------------------------

    def move_to(self, x: int, y: int, ap_cost: int = 0) -> None:
        self.x = x
        self.y = y
        self.spend_ap(ap_cost)
        self.motion.set_target(x, y)

    def place(self, x: int, y: int) -> None:
        """Teleport without animation or AP cost."""
        self.x = x
        self.y = y
        self.motion.snap(x, y)

    def spend_ap(self, amount: int) -> bool:
        if amount > self.action_points:
            return False
        self.action_points = int(clamp(self.action_points - amount, 0, self.max_action_points))
        return True

    def restore_ap(self, amount: int) -> None:
        self.action_points = int(clamp(self.action_points + amount, 0, self.max_action_points))

    def reset_ap(self) -> None:
        self.action_points = self.max_action_points

    # ------------------------------------------------------------------
    # Health and survival stats
    # ------------------------------------------------------------------

    def take_damage(self, amount: float) -> bool:
        """Returns True if this blow killed the unit."""
        was_alive = self.is_alive
        self.health = clamp(self.health - max(0, amount), 0, self.max_health)
        return was_alive and not self.is_alive

    def heal(self, amount: float) -> float:
        before = self.health
        self.health = clamp(self.health + max(0, amount), 0, self.max_health)
        return self.health - before

    def adjust_hydration(self, delta: float) -> None:
        self.hydration = clamp(self.hydration + delta, 0, self.max_hydration)

    def adjust_nutrition(self, delta: float) -> None:
        self.nutrition = clamp(self.nutrition + delta, 0, self.max_nutrition)

    # ------------------------------------------------------------------
    # Radiation
    # ------------------------------------------------------------------

    def add_radiation(self, amount: float) -> int:
        """Absorb a dose; returns the resulting ARS stage."""
        self.radiation_dose = clamp(self.radiation_dose + max(0, amount), 0, self.max_radiation)
        return self._update_ars_stage()

    def cure_radiation(self, amount: float) -> int:
        self.radiation_dose = clamp(self.radiation_dose - max(0, amount), 0, self.max_radiation)
        return self._update_ars_stage()

    def _update_ars_stage(self) -> int:
        stage = ars_stage_for(self.radiation_dose)
        if stage != self.ars_stage:
            self.modifiers.remove("Radiation Sickness")
            if stage > 0:
                self.modifiers.add(create_modifier("radiation_sickness", stage))
        self.ars_stage = stage
        return stage

    def suffer_ars(self) -> None:
        """Max-AP loss for one end phase spent at stage 3 or worse.

        Lost max AP is permanent; curing the dose does not give it back.
        """
        if self.ars_stage >= 4:
            self.max_action_points = 1
        elif self.ars_stage == 3:
            self.max_action_points = max(1, self.max_action_points - 1)
        self.action_points = min(self.action_points, self.max_action_points)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "health": self.health,
            "actionPoints": self.action_points,
            "radiationDose": self.radiation_dose,
            "hydration": self.hydration,
            "nutrition": self.nutrition,
            "maxActionPoints": self.max_action_points,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Unit":
        unit = cls(int(data["id"]), str(data["name"]), int(data["x"]), int(data["y"]))
        unit.max_action_points = int(data.get("maxActionPoints", STARTING_AP))
        unit.health = clamp(float(data["health"]), 0, unit.max_health)
        unit.hydration = clamp(float(data["hydration"]), 0, unit.max_hydration)
        unit.nutrition = clamp(float(data["nutrition"]), 0, unit.max_nutrition)
        unit.radiation_dose = clamp(float(data["radiationDose"]), 0, unit.max_radiation)
        unit._update_ars_stage()
        unit.action_points = int(clamp(int(data["actionPoints"]), 0, unit.max_action_points))
        return unit
