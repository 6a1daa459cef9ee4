from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set, Tuple

from .terrain import TerrainDef, TerrainType, terrain_def


class OccupantKind(Enum):
    EMPTY = "empty"
    UNIT = "unit"
    ENEMY = "enemy"


@dataclass(frozen=True)
class Occupant:
    """What stands on a tile, resolved through the game's entity tables."""
    kind: OccupantKind = OccupantKind.EMPTY
    entity_id: Optional[int] = None

    @classmethod
    def unit(cls, unit_id: int) -> "Occupant":
        return cls(OccupantKind.UNIT, unit_id)

    @classmethod
    def enemy(cls, enemy_id: int) -> "Occupant":
        return cls(OccupantKind.ENEMY, enemy_id)

    @property
    def is_empty(self) -> bool:
        return self.kind is OccupantKind.EMPTY

    @property
    def is_unit(self) -> bool:
        return self.kind is OccupantKind.UNIT

    @property
    def is_enemy(self) -> bool:
        return self.kind is OccupantKind.ENEMY


EMPTY = Occupant()


@dataclass
class Tile:
    x: int
    y: int
    elevation: float
    moisture: float
    radiation_level: float
    terrain: TerrainType
    revealed: bool = False
    has_building: bool = False
    has_road: bool = False
    road_links: Set[str] = field(default_factory=set)     # Subset of N, S, E, W
    building_anchor: Optional[Tuple[int, int]] = None
    occupant: Occupant = EMPTY
    props: List[object] = field(default_factory=list)     # world.props.Prop
    times_searched: int = 0
    times_salvaged: int = 0

    @property
    def terrain_def(self) -> TerrainDef:
        return terrain_def(self.terrain)

    @property
    def is_passable(self) -> bool:
        return self.terrain_def.passable

    @property
    def movement_cost(self) -> float:
        return self.terrain_def.move_cost

    @property
    def key(self) -> str:
        return f"{self.x},{self.y}"

    def set_terrain(self, terrain: TerrainType) -> None:
        """Override the classified terrain; radiation follows the new type."""
        self.terrain = terrain
        self.radiation_level = terrain_def(terrain).base_radiation

    def has_prop(self, name: str) -> bool:
        return any(p.name == name for p in self.props)

    def remove_prop(self, name: str) -> bool:
        for i, prop in enumerate(self.props):
            if prop.name == name:
                del self.props[i]
                return True
        return False
