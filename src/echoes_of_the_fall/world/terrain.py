"""
Terrain catalog and classifier.

Terrain definitions are immutable; tiles carry a TerrainType and look the
numbers up here.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple


class TerrainType(Enum):
    GRASS = "grass"
    DIRT = "dirt"
    MUD = "mud"
    SAND = "sand"
    PAVEMENT = "pavement"
    CONCRETE = "concrete"
    TOXIC = "toxic"
    WATER = "water"
    RUBBLE = "rubble"


@dataclass(frozen=True)
class TerrainDef:
    name: str
    color: Tuple[int, int, int]
    move_cost: float
    passable: bool
    base_radiation: float = 0.0


TERRAIN_CATALOG: Dict[TerrainType, TerrainDef] = {
    TerrainType.GRASS:    TerrainDef("Grass",    (74, 103, 65),  1.0, True),
    TerrainType.DIRT:     TerrainDef("Dirt",     (107, 83, 68),  1.0, True),
    TerrainType.MUD:      TerrainDef("Mud",      (77, 61, 46),   1.5, True),
    TerrainType.SAND:     TerrainDef("Sand",     (194, 178, 128), 1.2, True),
    TerrainType.PAVEMENT: TerrainDef("Pavement", (85, 85, 85),   0.8, True),
    TerrainType.CONCRETE: TerrainDef("Concrete", (128, 128, 128), 0.8, True),
    TerrainType.TOXIC:    TerrainDef("Toxic",    (68, 255, 68),  1.5, True, 0.5),
    TerrainType.WATER:    TerrainDef("Water",    (42, 74, 106),  3.0, False),
    TerrainType.RUBBLE:   TerrainDef("Rubble",   (90, 74, 58),   2.0, True),
}

# Cheapest step anywhere outdoors; scales the A* heuristic.
MIN_MOVE_COST: float = min(t.move_cost for t in TERRAIN_CATALOG.values() if t.passable)


def terrain_def(terrain: TerrainType) -> TerrainDef:
    return TERRAIN_CATALOG[terrain]


def classify_terrain(elevation: float, moisture: float, radiation: float) -> TerrainType:
    """First matching rule wins."""
    if radiation > 0.2:
        return TerrainType.TOXIC
    if elevation < 0.15 and moisture > 0.6:
        return TerrainType.WATER
    if elevation < 0.25 and moisture > 0.45:
        return TerrainType.MUD
    if moisture < 0.25 and elevation < 0.35:
        return TerrainType.SAND
    if 0.35 < moisture < 0.6:
        return TerrainType.GRASS
    return TerrainType.DIRT
