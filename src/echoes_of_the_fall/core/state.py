"""
GameState: the single owned aggregate every system works on.

There is no module-level game state. A Game owns one GameState and
passes it to each subsystem; `reset()` hands back a fresh instance.
Units and enemies live in id-keyed tables here; tiles only hold an
Occupant tag pointing back into these tables.
"""

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from echoes_of_the_fall.config import ENEMY_SCRAP_DROP, STARTING_RESOURCES
from echoes_of_the_fall.entities.enemy import Enemy
from echoes_of_the_fall.entities.unit import Unit
from echoes_of_the_fall.world.map import ChunkStore
from echoes_of_the_fall.world.tile import EMPTY, Occupant
from .events import Event, EventBus, EventType
from .logger import get_logger

log = get_logger("state")

RESOURCE_TYPES = ("scrap", "medicine", "food", "water")


class Phase(Enum):
    EVENT_DRAW = "event_draw"
    PLAYER_HAND = "player_hand"
    ACTIONS = "actions"
    END_PHASE = "end_phase"


class ViewMode(Enum):
    OUTDOOR = "outdoor"
    INDOOR = "indoor"


@dataclass
class GlobalResources:
    scrap: int = 0
    medicine: int = 0
    food: int = 0
    water: int = 0

    @classmethod
    def starting(cls) -> "GlobalResources":
        return cls(**STARTING_RESOURCES)

    def get(self, kind: str) -> int:
        if kind not in RESOURCE_TYPES:
            raise KeyError(f"Unknown resource: {kind}")
        return getattr(self, kind)

    def add(self, kind: str, amount: int) -> int:
        """Add (or with a negative amount, remove) stock; never below zero."""
        value = max(0, self.get(kind) + amount)
        setattr(self, kind, value)
        return value

    def spend(self, kind: str, amount: int = 1) -> bool:
        if self.get(kind) < amount:
            return False
        self.add(kind, -amount)
        return True

    def to_dict(self) -> Dict[str, int]:
        return {kind: getattr(self, kind) for kind in RESOURCE_TYPES}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GlobalResources":
        return cls(**{kind: max(0, int(data.get(kind, 0))) for kind in RESOURCE_TYPES})


@dataclass
class BuildingVisit:
    """The building the indoor view is showing."""
    anchor: Tuple[int, int]
    building_type: str


class GameState:
    def __init__(self, seed: int):
        from echoes_of_the_fall.engine.cards import Deck
        from echoes_of_the_fall.engine.fog_of_war import FogOfWar

        self.seed = int(seed)
        self.turn = 1
        self.phase = Phase.ACTIONS
        self.game_over = False
        self.victory = False

        self.world = ChunkStore(self.seed)
        self.fog = FogOfWar(self.world)
        self.rng = random.Random(self.seed)
        self.events = EventBus()

        self.units: Dict[int, Unit] = {}
        self.enemies: Dict[int, Enemy] = {}
        self._next_unit_id = 1
        self._next_enemy_id = 1
        self.selected_unit_id: Optional[int] = None

        self.deck = Deck(self.rng)
        self.resources = GlobalResources.starting()

        self.view_mode = ViewMode.OUTDOOR
        self.current_interior = None               # world.interior.BuildingInterior
        self.current_building: Optional[BuildingVisit] = None
        self.interior_cache: Dict[str, Any] = {}   # "x,y" -> BuildingInterior
        self.units_indoors: Dict[int, str] = {}    # unit id -> interior cache key
        self.return_positions: Dict[int, Tuple[int, int]] = {}

    def reset(self, seed: Optional[int] = None) -> "GameState":
        """A brand new state; this one is left untouched."""
        return GameState(self.seed if seed is None else seed)

    # ------------------------------------------------------------------
    # Entity tables
    # ------------------------------------------------------------------

    @property
    def unit_list(self) -> List[Unit]:
        return list(self.units.values())

    @property
    def enemy_list(self) -> List[Enemy]:
        return list(self.enemies.values())

    @property
    def selected_unit(self) -> Optional[Unit]:
        if self.selected_unit_id is None:
            return None
        return self.units.get(self.selected_unit_id)

    def get_unit(self, unit_id: int) -> Optional[Unit]:
        return self.units.get(unit_id)

    def get_enemy(self, enemy_id: int) -> Optional[Enemy]:
        return self.enemies.get(enemy_id)

    def resolve(self, occupant: Occupant) -> Optional[Union[Unit, Enemy]]:
        if occupant.is_unit:
            return self.units.get(occupant.entity_id)
        if occupant.is_enemy:
            return self.enemies.get(occupant.entity_id)
        return None

    def new_unit_id(self) -> int:
        uid = self._next_unit_id
        self._next_unit_id += 1
        return uid

    def new_enemy_id(self) -> int:
        eid = self._next_enemy_id
        self._next_enemy_id += 1
        return eid

    def is_indoors(self, unit: Unit) -> bool:
        return unit.id in self.units_indoors

    def grid_for(self, unit: Unit):
        """The grid a unit currently stands on."""
        if self.is_indoors(unit):
            return self.interior_cache[self.units_indoors[unit.id]]
        return self.world

    def tile_of(self, entity) -> Any:
        if isinstance(entity, Unit) and self.is_indoors(entity):
            return self.grid_for(entity).get_tile(entity.x, entity.y)
        return self.world.get_ready_tile(entity.x, entity.y)

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------

    def add_unit(self, unit: Unit) -> Unit:
        self.units[unit.id] = unit
        self._next_unit_id = max(self._next_unit_id, unit.id + 1)
        tile = self.tile_of(unit)
        if tile is not None:
            tile.occupant = Occupant.unit(unit.id)
        return unit

    def add_enemy(self, enemy: Enemy) -> Enemy:
        self.enemies[enemy.id] = enemy
        self._next_enemy_id = max(self._next_enemy_id, enemy.id + 1)
        tile = self.world.get_ready_tile(enemy.x, enemy.y)
        if tile is not None:
            tile.occupant = Occupant.enemy(enemy.id)
        return enemy

    def vacate(self, entity) -> None:
        tile = self.tile_of(entity)
        if tile is not None and self.resolve(tile.occupant) is entity:
            tile.occupant = EMPTY

    def relocate(self, entity, tile) -> None:
        """Move an entity's occupancy tag to `tile` (same grid)."""
        self.vacate(entity)
        if isinstance(entity, Unit):
            tile.occupant = Occupant.unit(entity.id)
        else:
            tile.occupant = Occupant.enemy(entity.id)

    # ------------------------------------------------------------------
    # Damage and death
    # ------------------------------------------------------------------

    def damage_unit(self, unit: Unit, amount: float, cause: str = "") -> bool:
        """Apply damage; removes the unit if it dies. Returns True on death."""
        if not unit.take_damage(amount):
            return False
        self.remove_unit(unit)
        self.events.message(f"{unit.name} has died{' from ' + cause if cause else ''}!")
        self.events.emit(Event(EventType.UNIT_DIED.value, origin=(unit.x, unit.y),
                               data={"unit_id": unit.id, "name": unit.name}))
        return True

    def damage_enemy(self, enemy: Enemy, amount: float) -> bool:
        """Apply damage; a killed enemy drops scrap. Returns True on death."""
        if not enemy.take_damage(amount):
            return False
        self.remove_enemy(enemy)
        scrap = self.rng.randint(*ENEMY_SCRAP_DROP)
        self.resources.add("scrap", scrap)
        self.events.message(f"{enemy.name} defeated! Found {scrap} scrap.")
        self.events.emit(Event(EventType.ENEMY_DIED.value, origin=(enemy.x, enemy.y),
                               data={"enemy_id": enemy.id, "scrap": scrap}))
        return True

    def remove_unit(self, unit: Unit) -> None:
        self.vacate(unit)
        self.units.pop(unit.id, None)
        self.units_indoors.pop(unit.id, None)
        self.return_positions.pop(unit.id, None)
        if self.selected_unit_id == unit.id:
            self.selected_unit_id = None
        if self.view_mode is ViewMode.INDOOR and not self.units_indoors:
            self.show_outdoors()
        log.info("Unit %s removed", unit.name)

    def remove_enemy(self, enemy: Enemy) -> None:
        self.vacate(enemy)
        self.enemies.pop(enemy.id, None)

    # ------------------------------------------------------------------
    # View mode
    # ------------------------------------------------------------------

    def show_interior(self, interior, building_type: str) -> None:
        self.view_mode = ViewMode.INDOOR
        self.current_interior = interior
        self.current_building = BuildingVisit((interior.world_x, interior.world_y),
                                              building_type)

    def show_outdoors(self) -> None:
        self.view_mode = ViewMode.OUTDOOR
        self.current_interior = None
        self.current_building = None
