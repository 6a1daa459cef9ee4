"""
Indoor/outdoor mode switching.

A building's interior is generated on first entry and cached under its
anchor key, so re-entering (or regenerating after a load) yields the same
layout. Only one interior is active at a time: while any unit is inside a
building, other buildings cannot be entered.
"""

from typing import Any, List, Optional, Tuple

from echoes_of_the_fall.core.events import Event, EventType
from echoes_of_the_fall.core.logger import GameLogger, get_logger
from echoes_of_the_fall.world.interior import BuildingInterior
from echoes_of_the_fall.world.interior_generator import generate_interior
from echoes_of_the_fall.world.tile import Occupant

log = get_logger("interiors")

# Order matters: the first free tile wins.
EXIT_OFFSETS = (
    (0, 1),    # S
    (0, -1),   # N
    (1, 0),    # E
    (-1, 0),   # W
    (1, 1),    # SE
    (-1, 1),   # SW
    (1, -1),   # NE
    (-1, -1),  # NW
)

BUILDING_KEYWORDS = (
    ("House", "Ruined House"),
    ("Gas Station", "Gas Station"),
    ("Shop", "Abandoned Shop"),
    ("Office", "Office Building"),
    ("Warehouse", "Warehouse"),
)


def building_type_for(tile: Any) -> str:
    """Interior template name from the building prop on an anchor tile."""
    for prop in getattr(tile, "props", ()):
        for keyword, building_type in BUILDING_KEYWORDS:
            if keyword in prop.name:
                return building_type
    return "Ruined House"


class InteriorManager:
    def __init__(self, state: Any):
        self.state = state

    def get_interior(self, anchor: Tuple[int, int]) -> BuildingInterior:
        """Cached interior for the building anchored at `anchor`."""
        state = self.state
        key = f"{anchor[0]},{anchor[1]}"
        interior = state.interior_cache.get(key)
        if interior is None:
            anchor_tile = state.world.get_ready_tile(*anchor)
            interior = generate_interior(anchor[0], anchor[1],
                                         building_type_for(anchor_tile), state.seed)
            state.interior_cache[key] = interior
            log.info("Generated %s interior at %s", interior.building_type, key)
        return interior

    def _occupied_interior_key(self) -> Optional[str]:
        for key in self.state.units_indoors.values():
            return key
        return None

    # ------------------------------------------------------------------
    # Entry
    # ------------------------------------------------------------------

    def enter_building(self, unit: Any, tile: Any) -> bool:
        state = self.state
        if unit is None or tile is None or not getattr(tile, "has_building", False):
            state.events.message("There is no building here")
            return False
        if state.is_indoors(unit):
            state.events.message(f"{unit.name} is already inside")
            return False
        if unit.action_points < 1:
            state.events.message("Not enough AP to enter building!")
            return False

        anchor = tile.building_anchor or (tile.x, tile.y)
        occupied = self._occupied_interior_key()
        if occupied is not None and occupied != f"{anchor[0]},{anchor[1]}":
            state.events.message("Another building is already occupied")
            return False

        interior = self.get_interior(anchor)
        spot = self._free_indoor_tile(interior)
        if spot is None:
            state.events.message("No room inside")
            return False

        unit.spend_ap(1)
        state.vacate(unit)
        state.return_positions[unit.id] = (unit.x, unit.y)
        state.units_indoors[unit.id] = interior.cache_key
        unit.place(spot.x, spot.y)
        spot.occupant = Occupant.unit(unit.id)
        state.show_interior(interior, interior.building_type)

        GameLogger().log_event("BUILDING", f"{unit.name} entered {interior.building_type} "
                                           f"at {interior.cache_key}")
        state.events.message(f"Entered {interior.building_type}")
        state.events.emit(Event(EventType.BUILDING_ENTERED.value, origin=anchor,
                                data={"unit_id": unit.id,
                                      "building_type": interior.building_type}))
        return True

    @staticmethod
    def _free_indoor_tile(interior: BuildingInterior):
        """The entry tile, or the nearest free passable tile to it."""
        entry = interior.entry_tile
        if entry.is_passable and entry.occupant.is_empty:
            return entry
        candidates = [t for t in interior.iter_tiles()
                      if t.is_passable and t.occupant.is_empty]
        if not candidates:
            return None
        return min(candidates, key=lambda t: (max(abs(t.x - entry.x), abs(t.y - entry.y)),
                                              t.y, t.x))

    # ------------------------------------------------------------------
    # Exit
    # ------------------------------------------------------------------

    def exit_building(self, unit: Any, tile: Any = None, via_window: bool = False) -> bool:
        state = self.state
        if unit is None or not state.is_indoors(unit):
            state.events.message("No unit inside to leave")
            return False
        if unit.action_points < 1:
            state.events.message("Not enough AP to exit building!")
            return False

        interior = state.grid_for(unit)
        anchor = (interior.world_x, interior.world_y)
        fallback = state.return_positions.get(unit.id, anchor)

        unit.spend_ap(1)
        state.vacate(unit)
        del state.units_indoors[unit.id]
        state.return_positions.pop(unit.id, None)

        x, y = self.find_exit_position(anchor, fallback)
        unit.place(x, y)
        outdoor = state.world.get_ready_tile(x, y)
        if outdoor is not None:
            outdoor.occupant = Occupant.unit(unit.id)
        state.fog.reveal_for_unit(unit)

        if not state.units_indoors:
            state.show_outdoors()

        how = "through a window" if via_window else "the building"
        GameLogger().log_event("BUILDING", f"{unit.name} left {interior.cache_key} to ({x}, {y})")
        state.events.message(f"Exited {how}")
        state.events.emit(Event(EventType.BUILDING_EXITED.value, origin=(x, y),
                                data={"unit_id": unit.id, "via_window": via_window}))
        return True

    def find_exit_position(self, anchor: Tuple[int, int],
                           fallback: Tuple[int, int]) -> Tuple[int, int]:
        """First free outdoor tile around the anchor, checked S, N, E, W then diagonals."""
        for dx, dy in EXIT_OFFSETS:
            tile = self.state.world.get_ready_tile(anchor[0] + dx, anchor[1] + dy)
            if (tile is not None and tile.is_passable and not tile.has_building
                    and tile.occupant.is_empty):
                return tile.x, tile.y
        return fallback

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def units_inside(self) -> List[Any]:
        state = self.state
        return [state.units[uid] for uid in state.units_indoors if uid in state.units]
