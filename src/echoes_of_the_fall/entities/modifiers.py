"""
Modifiers: temporary and standing effects on a unit.

A modifier lasts a number of turns (or indefinitely) and may adjust
stats. The turn state machine ticks every unit's modifiers once per end
phase, so a one-turn modifier such as Sprint is gone by the next turn.

Additive stats end in `_bonus` and are summed across modifiers.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

ARS_DESCRIPTIONS = {
    0: "Healthy",
    1: "Mild ARS: nausea, fatigue",
    2: "Moderate ARS: weakness, hair loss",
    3: "Severe ARS: hemorrhaging, infections",
    4: "Critical ARS: organ failure imminent",
}


@dataclass
class Modifier:
    """A temporary modifier on a unit."""
    name: str
    description: str
    duration_turns: int                 # -1 = until removed
    remaining_turns: int = -1
    stat_modifiers: Dict[str, float] = field(default_factory=dict)
    # Keys: "move_range_bonus"
    tags: List[str] = field(default_factory=list)
    stackable: bool = False
    source: str = "unknown"

    def __post_init__(self) -> None:
        if self.remaining_turns == -1:
            self.remaining_turns = self.duration_turns

    def is_expired(self) -> bool:
        return self.duration_turns > 0 and self.remaining_turns <= 0

    def tick(self) -> None:
        if self.duration_turns > 0:
            self.remaining_turns -= 1

    def to_dict(self) -> Dict:
        return {"name": self.name, "remaining_turns": self.remaining_turns,
                "stat_modifiers": dict(self.stat_modifiers), "source": self.source}


# ============================================================
# Templates
# ============================================================

def create_modifier(name: str, value: float = 0.0, **kwargs) -> Optional[Modifier]:
    """Factory for the game's modifiers."""
    if name == "sprint":
        modifier = Modifier(
            "Sprint", f"+{value:g} movement until end of turn.",
            duration_turns=1,
            stat_modifiers={"move_range_bonus": value},
            tags=["card", "positive"],
            stackable=True,
            source="card",
        )
    elif name == "radiation_sickness":
        stage = int(value)
        modifier = Modifier(
            "Radiation Sickness", ARS_DESCRIPTIONS.get(stage, ARS_DESCRIPTIONS[4]),
            duration_turns=-1,
            tags=["radiation", "negative", f"stage_{stage}"],
            source="radiation",
        )
    else:
        return None

    for key, val in kwargs.items():
        if hasattr(modifier, key):
            setattr(modifier, key, val)
    return modifier


class ModifierManager:
    """Active modifiers on one unit."""

    def __init__(self) -> None:
        self.active: List[Modifier] = []

    def add(self, modifier: Modifier) -> None:
        """Non-stackable modifiers replace one of the same name."""
        if not modifier.stackable:
            self.active = [m for m in self.active if m.name != modifier.name]
        self.active.append(modifier)

    def remove(self, name: str) -> None:
        self.active = [m for m in self.active if m.name != name]

    def tick(self) -> List[Modifier]:
        """Advance one turn; returns the modifiers that expired."""
        for modifier in self.active:
            modifier.tick()
        expired = [m for m in self.active if m.is_expired()]
        self.active = [m for m in self.active if not m.is_expired()]
        return expired

    def get_bonus(self, stat: str) -> float:
        return sum(m.stat_modifiers.get(stat, 0.0) for m in self.active)

    def has(self, name: str) -> bool:
        return any(m.name == name for m in self.active)

    def get_summary(self) -> str:
        if not self.active:
            return "No effects."
        parts = []
        for m in self.active:
            if m.duration_turns > 0:
                parts.append(f"{m.name} ({m.remaining_turns} turn(s) left)")
            else:
                parts.append(f"{m.name}: {m.description}")
        return ", ".join(parts)
