"""
Building interiors: catalogs and instance state.

Catalog entries (interior terrain, furniture types, room types, building
templates, loot tables) are immutable and shared. InteriorTile, Room,
Door and Furniture hold the per-building state that changes during play
(locked, searched, opened).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .rng import spatial_hash
from .tile import EMPTY, Occupant


# ============================================================
# Catalogs
# ============================================================

class InteriorTerrain(Enum):
    FLOOR = "floor"
    WALL = "wall"
    DOOR_OPEN = "door_open"
    DOOR_CLOSED = "door_closed"
    DOOR_LOCKED = "door_locked"
    WINDOW = "window"
    EXIT = "exit"


@dataclass(frozen=True)
class InteriorTerrainDef:
    name: str
    color: Tuple[int, int, int]
    move_cost: float
    passable: bool


INTERIOR_TERRAIN: Dict[InteriorTerrain, InteriorTerrainDef] = {
    InteriorTerrain.FLOOR:       InteriorTerrainDef("Floor", (92, 82, 72), 1.0, True),
    InteriorTerrain.WALL:        InteriorTerrainDef("Wall", (58, 52, 48), 999.0, False),
    InteriorTerrain.DOOR_OPEN:   InteriorTerrainDef("Open Door", (110, 80, 50), 1.0, True),
    InteriorTerrain.DOOR_CLOSED: InteriorTerrainDef("Closed Door", (90, 60, 30), 1.0, True),
    InteriorTerrain.DOOR_LOCKED: InteriorTerrainDef("Locked Door", (70, 40, 20), 999.0, False),
    InteriorTerrain.WINDOW:      InteriorTerrainDef("Window", (130, 170, 200), 999.0, False),
    InteriorTerrain.EXIT:        InteriorTerrainDef("Exit", (60, 140, 60), 1.0, True),
}

DOOR_TERRAIN = (InteriorTerrain.DOOR_OPEN, InteriorTerrain.DOOR_CLOSED,
                InteriorTerrain.DOOR_LOCKED)


@dataclass(frozen=True)
class FurnitureType:
    key: str
    name: str
    color: Tuple[int, int, int]
    loot_table: Optional[str] = None
    searchable: bool = True
    locked: bool = False                 # Default state before placement
    can_lock: bool = False


FURNITURE_TYPES: Dict[str, FurnitureType] = {
    "CABINET":   FurnitureType("CABINET", "Cabinet", (139, 90, 43), "household"),
    "DESK":      FurnitureType("DESK", "Desk", (160, 110, 60), "household"),
    "BED":       FurnitureType("BED", "Bed", (120, 80, 80), "household"),
    "SHELF":     FurnitureType("SHELF", "Shelf", (150, 120, 80), "household"),
    "COUNTER":   FurnitureType("COUNTER", "Counter", (170, 170, 170), "household"),
    "STOVE":     FurnitureType("STOVE", "Stove", (60, 60, 60), "household"),
    "FRIDGE":    FurnitureType("FRIDGE", "Fridge", (220, 220, 220), "food"),
    "LOCKER":    FurnitureType("LOCKER", "Locker", (90, 110, 130), "valuable", can_lock=True),
    "SAFE":      FurnitureType("SAFE", "Safe", (50, 50, 60), "valuable", locked=True, can_lock=True),
    "WORKBENCH": FurnitureType("WORKBENCH", "Workbench", (120, 90, 50), "valuable"),
    "TABLE":     FurnitureType("TABLE", "Table", (140, 100, 60), searchable=False),
    "CHAIR":     FurnitureType("CHAIR", "Chair", (130, 90, 50), searchable=False),
    "TOILET":    FurnitureType("TOILET", "Toilet", (230, 230, 230), searchable=False),
    "SINK":      FurnitureType("SINK", "Sink", (200, 200, 210), searchable=False),
    "BATHTUB":   FurnitureType("BATHTUB", "Bathtub", (210, 210, 220), searchable=False),
}


@dataclass(frozen=True)
class RoomType:
    key: str
    name: str
    furniture: Tuple[str, ...]
    min_furniture: int
    max_furniture: int


ROOM_TYPES: Dict[str, RoomType] = {
    "LIVING_ROOM": RoomType("LIVING_ROOM", "Living Room", ("CABINET", "SHELF", "TABLE", "CHAIR"), 1, 3),
    "BEDROOM":     RoomType("BEDROOM", "Bedroom", ("BED", "DESK", "CABINET", "SHELF"), 1, 3),
    "KITCHEN":     RoomType("KITCHEN", "Kitchen", ("FRIDGE", "COUNTER", "STOVE", "TABLE"), 2, 4),
    "BATHROOM":    RoomType("BATHROOM", "Bathroom", ("TOILET", "SINK", "CABINET"), 2, 3),
    "STORAGE":     RoomType("STORAGE", "Storage", ("SHELF", "LOCKER", "CABINET"), 1, 3),
    "OFFICE":      RoomType("OFFICE", "Office", ("DESK", "CHAIR", "CABINET", "SAFE"), 2, 4),
    "GARAGE":      RoomType("GARAGE", "Garage", ("WORKBENCH", "SHELF", "LOCKER"), 1, 3),
}


@dataclass(frozen=True)
class BuildingTemplate:
    width: int
    height: int
    rooms: Tuple[str, ...]
    min_rooms: int
    max_rooms: int


BUILDING_INTERIORS: Dict[str, BuildingTemplate] = {
    "Ruined House":    BuildingTemplate(8, 8, ("LIVING_ROOM", "BEDROOM", "KITCHEN", "BATHROOM"), 3, 4),
    "Gas Station":     BuildingTemplate(10, 6, ("OFFICE", "STORAGE", "STORAGE"), 2, 3),
    "Abandoned Shop":  BuildingTemplate(8, 6, ("STORAGE", "OFFICE"), 1, 2),
    "Office Building": BuildingTemplate(10, 10, ("OFFICE", "OFFICE", "OFFICE", "BATHROOM", "STORAGE"), 3, 5),
    "Warehouse":       BuildingTemplate(12, 8, ("STORAGE", "STORAGE", "STORAGE", "OFFICE"), 2, 4),
    "default":         BuildingTemplate(6, 6, ("LIVING_ROOM", "STORAGE"), 1, 2),
}


@dataclass(frozen=True)
class LootBand:
    """Cumulative band: the first band whose `chance` exceeds the roll wins."""
    resource: Optional[str]
    amount: Tuple[int, int]
    chance: float


LOOT_TABLES: Dict[str, Tuple[LootBand, ...]] = {
    "household": (
        LootBand("scrap", (1, 3), 0.5),
        LootBand("food", (1, 1), 0.7),
        LootBand(None, (0, 0), 1.0),
    ),
    "food": (
        LootBand("food", (1, 2), 0.6),
        LootBand("water", (1, 1), 0.8),
        LootBand(None, (0, 0), 1.0),
    ),
    "valuable": (
        LootBand("scrap", (5, 10), 0.4),
        LootBand("medicine", (2, 3), 0.7),
        LootBand(None, (0, 0), 1.0),
    ),
}


def building_template(building_type: str) -> BuildingTemplate:
    return BUILDING_INTERIORS.get(building_type, BUILDING_INTERIORS["default"])


def interior_seed(world_x: int, world_y: int, global_seed: int) -> int:
    return spatial_hash(world_x, world_y, global_seed)


# ============================================================
# Instance state
# ============================================================

@dataclass
class Furniture:
    x: int
    y: int
    type_key: str
    locked: bool = False
    searched: bool = False

    @property
    def kind(self) -> FurnitureType:
        return FURNITURE_TYPES[self.type_key]

    @property
    def name(self) -> str:
        return self.kind.name

    def to_dict(self) -> Dict:
        return {"x": self.x, "y": self.y, "type": self.type_key,
                "locked": self.locked, "searched": self.searched}

    @classmethod
    def from_dict(cls, data: Dict) -> "Furniture":
        return cls(data["x"], data["y"], data["type"],
                   data.get("locked", False), data.get("searched", False))


@dataclass
class Door:
    x: int
    y: int
    locked: bool = False
    connects: Tuple[int, int] = (-1, -1)   # Room ids

    def to_dict(self) -> Dict:
        return {"x": self.x, "y": self.y, "locked": self.locked,
                "connects": list(self.connects)}

    @classmethod
    def from_dict(cls, data: Dict) -> "Door":
        return cls(data["x"], data["y"], data.get("locked", False),
                   tuple(data.get("connects", (-1, -1))))


@dataclass
class Room:
    x: int
    y: int
    width: int
    height: int
    room_id: int = 0
    room_type: Optional[str] = None
    split_wall: Optional[Tuple[str, int]] = None   # ("vertical" | "horizontal", position)
    splittable: bool = True

    @property
    def center_x(self) -> int:
        return self.x + self.width // 2

    @property
    def center_y(self) -> int:
        return self.y + self.height // 2

    @property
    def area(self) -> int:
        return self.width * self.height

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.x + self.width and self.y <= y < self.y + self.height

    def to_dict(self) -> Dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height,
                "id": self.room_id, "type": self.room_type}

    @classmethod
    def from_dict(cls, data: Dict) -> "Room":
        return cls(data["x"], data["y"], data["width"], data["height"],
                   data.get("id", 0), data.get("type"))


@dataclass
class InteriorTile:
    x: int
    y: int
    terrain: InteriorTerrain = InteriorTerrain.FLOOR
    room_id: Optional[int] = None
    furniture: Optional[Furniture] = None
    is_exit: bool = False
    occupant: Occupant = EMPTY

    @property
    def terrain_def(self) -> InteriorTerrainDef:
        return INTERIOR_TERRAIN[self.terrain]

    @property
    def is_passable(self) -> bool:
        return self.terrain_def.passable and self.furniture is None

    @property
    def movement_cost(self) -> float:
        return self.terrain_def.move_cost

    @property
    def is_door(self) -> bool:
        return self.terrain in DOOR_TERRAIN

    def unlock(self) -> bool:
        if self.terrain is InteriorTerrain.DOOR_LOCKED:
            self.terrain = InteriorTerrain.DOOR_CLOSED
            return True
        if self.furniture is not None and self.furniture.locked:
            self.furniture.locked = False
            return True
        return False

    def toggle_door(self) -> bool:
        if self.terrain is InteriorTerrain.DOOR_CLOSED:
            self.terrain = InteriorTerrain.DOOR_OPEN
        elif self.terrain is InteriorTerrain.DOOR_OPEN:
            self.terrain = InteriorTerrain.DOOR_CLOSED
        else:
            return False
        return True

    def break_door(self) -> bool:
        if self.terrain is not InteriorTerrain.DOOR_LOCKED:
            return False
        self.terrain = InteriorTerrain.DOOR_OPEN
        return True

    # Outdoor tiles carry these; interiors have no contamination or props.
    radiation_level = 0.0
    props = ()


@dataclass
class BuildingInterior:
    world_x: int
    world_y: int
    building_type: str
    global_seed: int
    width: int
    height: int
    tiles: List[List[InteriorTile]] = field(default_factory=list)   # [y][x]
    rooms: List[Room] = field(default_factory=list)
    doors: List[Door] = field(default_factory=list)
    furniture: List[Furniture] = field(default_factory=list)
    windows: List[Tuple[int, int]] = field(default_factory=list)
    entry_x: int = 0
    entry_y: int = 0
    forced_connections: List[int] = field(default_factory=list)  # Room ids linked without a door

    min_step_cost = 1.0

    @property
    def seed(self) -> int:
        return interior_seed(self.world_x, self.world_y, self.global_seed)

    @property
    def cache_key(self) -> str:
        return f"{self.world_x},{self.world_y}"

    def get_tile(self, x: int, y: int) -> Optional[InteriorTile]:
        if 0 <= x < self.width and 0 <= y < self.height:
            return self.tiles[y][x]
        return None

    path_tile = get_tile

    def iter_tiles(self):
        for row in self.tiles:
            yield from row

    @property
    def entry_tile(self) -> InteriorTile:
        return self.tiles[self.entry_y][self.entry_x]

    def exit_tiles(self) -> List[InteriorTile]:
        return [t for t in self.iter_tiles() if t.is_exit]

    def door_at(self, x: int, y: int) -> Optional[Door]:
        for door in self.doors:
            if door.x == x and door.y == y:
                return door
        return None

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict:
        return {
            "worldX": self.world_x,
            "worldY": self.world_y,
            "buildingType": self.building_type,
            "globalSeed": self.global_seed,
            "width": self.width,
            "height": self.height,
            "tiles": [[t.terrain.value for t in row] for row in self.tiles],
            "roomIds": [[t.room_id for t in row] for row in self.tiles],
            "rooms": [r.to_dict() for r in self.rooms],
            "doors": [d.to_dict() for d in self.doors],
            "furniture": [f.to_dict() for f in self.furniture],
            "windows": [list(w) for w in self.windows],
            "entry": [self.entry_x, self.entry_y],
            "forcedConnections": list(self.forced_connections),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "BuildingInterior":
        interior = cls(
            world_x=data["worldX"],
            world_y=data["worldY"],
            building_type=data["buildingType"],
            global_seed=data["globalSeed"],
            width=data["width"],
            height=data["height"],
        )
        room_ids = data.get("roomIds")
        for y, row in enumerate(data["tiles"]):
            interior.tiles.append([
                InteriorTile(x, y, InteriorTerrain(value),
                             room_id=room_ids[y][x] if room_ids else None)
                for x, value in enumerate(row)
            ])
        interior.rooms = [Room.from_dict(r) for r in data.get("rooms", [])]
        interior.doors = [Door.from_dict(d) for d in data.get("doors", [])]
        interior.furniture = [Furniture.from_dict(f) for f in data.get("furniture", [])]
        for item in interior.furniture:
            interior.tiles[item.y][item.x].furniture = item
        interior.windows = [tuple(w) for w in data.get("windows", [])]
        interior.entry_x, interior.entry_y = data["entry"]
        interior.forced_connections = list(data.get("forcedConnections", []))
        for tile in interior.iter_tiles():
            tile.is_exit = tile.terrain is InteriorTerrain.EXIT
        return interior
