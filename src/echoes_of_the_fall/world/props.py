"""
Prop catalog: decorative and interactive objects scattered on the map.

Definitions are shared and immutable; a Prop is one placed instance,
stored on its anchor tile. Multi-tile props cover a footprint centered
on the anchor.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

from .terrain import TerrainType


@dataclass(frozen=True)
class PropDef:
    name: str
    color: Tuple[int, int, int]
    width: int = 1
    depth: int = 1
    is_building: bool = False


@dataclass(frozen=True)
class PropEntry:
    """One weighted row of a terrain's prop table."""
    prop: str
    chance: float


@dataclass
class Prop:
    name: str
    x: int                              # Anchor tile
    y: int
    width: int = 1
    depth: int = 1
    is_building: bool = False

    def to_dict(self) -> Dict:
        return {"name": self.name, "x": self.x, "y": self.y,
                "width": self.width, "depth": self.depth}


PROP_CATALOG: Dict[str, PropDef] = {
    "Dead Tree":       PropDef("Dead Tree", (61, 43, 31)),
    "Dead Bush":       PropDef("Dead Bush", (92, 74, 42)),
    "Rock":            PropDef("Rock", (102, 102, 102)),
    "Debris":          PropDef("Debris", (85, 68, 51)),
    "Car Wreck":       PropDef("Car Wreck", (139, 69, 19)),
    "Toxic Barrel":    PropDef("Toxic Barrel", (68, 170, 0)),
    "Ruined House":    PropDef("Ruined House", (110, 94, 80), 2, 2, True),
    "Abandoned Shop":  PropDef("Abandoned Shop", (120, 100, 72), 2, 2, True),
    "Gas Station":     PropDef("Gas Station", (160, 60, 50), 3, 2, True),
    "Warehouse":       PropDef("Warehouse", (96, 96, 110), 3, 2, True),
    "Office Building": PropDef("Office Building", (130, 130, 150), 3, 2, True),
}

TERRAIN_PROPS: Dict[TerrainType, List[PropEntry]] = {
    TerrainType.GRASS: [
        PropEntry("Dead Tree", 0.2),
        PropEntry("Dead Bush", 0.15),
        PropEntry("Rock", 0.05),
    ],
    TerrainType.DIRT: [
        PropEntry("Rock", 0.12),
        PropEntry("Dead Bush", 0.08),
        PropEntry("Debris", 0.05),
    ],
    TerrainType.MUD: [
        PropEntry("Rock", 0.08),
    ],
    TerrainType.SAND: [
        PropEntry("Rock", 0.1),
        PropEntry("Dead Bush", 0.05),
    ],
    TerrainType.PAVEMENT: [
        PropEntry("Car Wreck", 0.06),
        PropEntry("Debris", 0.08),
    ],
    TerrainType.CONCRETE: [
        PropEntry("Ruined House", 0.15),
        PropEntry("Abandoned Shop", 0.05),
        PropEntry("Gas Station", 0.04),
        PropEntry("Warehouse", 0.02),
        PropEntry("Office Building", 0.02),
        PropEntry("Debris", 0.1),
    ],
    TerrainType.TOXIC: [
        PropEntry("Toxic Barrel", 0.25),
        PropEntry("Debris", 0.1),
        PropEntry("Rock", 0.08),
    ],
    TerrainType.RUBBLE: [
        PropEntry("Debris", 0.3),
        PropEntry("Rock", 0.15),
    ],
    TerrainType.WATER: [],
}


def create_prop(name: str, x: int, y: int) -> Prop:
    definition = PROP_CATALOG[name]
    return Prop(name, x, y, definition.width, definition.depth, definition.is_building)
