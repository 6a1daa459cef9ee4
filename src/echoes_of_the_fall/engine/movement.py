from typing import Any, List

from echoes_of_the_fall.core.events import Event, EventType
from .pathfinding import Pathfinder
from .radiation import movement_dose


def movement_range(state: Any, unit: Any) -> List[Any]:
    return Pathfinder.movement_range(state.grid_for(unit), unit)


def move_unit(state: Any, unit: Any, x: int, y: int) -> bool:
    """Walk a unit to (x, y) on its current grid, paying AP and exposure."""
    grid = state.grid_for(unit)
    target = grid.path_tile(x, y)
    if target is None or not target.is_passable:
        state.events.message("Can't move there")
        return False
    if not target.occupant.is_empty:
        state.events.message("That tile is occupied")
        return False

    path = Pathfinder.find_path(grid, (unit.x, unit.y), (x, y),
                                blocked=lambda tile: tile.occupant.is_enemy)
    if path is None or len(path) < 2:
        state.events.message("No path to that tile")
        return False

    ap_cost = Pathfinder.ap_cost(Pathfinder.path_cost(path), unit.move_range)
    # AP is paid before any exposure along the path.
    if not unit.spend_ap(ap_cost):
        state.events.message(f"Not enough AP (need {ap_cost})")
        return False

    outdoors = not state.is_indoors(unit)
    if outdoors:
        for tile in path[1:]:
            if tile.radiation_level > 0:
                unit.add_radiation(movement_dose(tile))

    state.relocate(unit, target)
    unit.move_to(x, y)
    if outdoors:
        state.fog.reveal_for_unit(unit)
    state.events.emit(Event(EventType.UNIT_MOVED.value, origin=(x, y),
                            data={"unit_id": unit.id, "ap_cost": ap_cost}))
    return True
