"""
Interior Generator: BSP room layout for building interiors.

Pipeline, in order (each step consumes the same xorshift stream, so the
order is part of the layout):
  1. Perimeter walls around a floor.
  2. Split the largest qualifying room along its longer axis until the
     template's room count is reached or nothing can be split.
  3. Carve the recorded split lines as single-width walls.
  4. Connect rooms with doors, growing outward from room 0.
  5. Front exit on the bottom wall, back exit on the top wall.
  6. Wall-hugging furniture, never next to doors or exits.
  7. One to three windows on the side and top walls.
"""

from collections import deque
from typing import List, Optional, Set, Tuple

from echoes_of_the_fall.config import LOCKED_DOOR_CHANCE, LOCKED_FURNITURE_CHANCE
from echoes_of_the_fall.core.logger import get_logger
from .interior import (
    BuildingInterior, Door, Furniture, FURNITURE_TYPES, InteriorTerrain,
    InteriorTile, ROOM_TYPES, Room, building_template, interior_seed,
)
from .rng import XorShiftRng

log = get_logger("interior")

MIN_SPLIT_SIZE = 5
SPLIT_MARGIN = 2
CARDINAL = ((-1, 0), (1, 0), (0, -1), (0, 1))


def generate_interior(world_x: int, world_y: int, building_type: str,
                      global_seed: int) -> BuildingInterior:
    """Build the interior for the building anchored at (world_x, world_y)."""
    template = building_template(building_type)
    interior = BuildingInterior(
        world_x=world_x,
        world_y=world_y,
        building_type=building_type,
        global_seed=global_seed,
        width=template.width,
        height=template.height,
    )
    rng = XorShiftRng(interior_seed(world_x, world_y, global_seed))

    _init_grid(interior)
    walls = _generate_rooms(interior, rng)
    _add_internal_walls(interior, walls)
    _connect_rooms(interior, rng)
    _place_exits(interior)
    _place_furniture(interior, rng)
    _place_windows(interior, rng)

    log.debug("Interior %s at (%d, %d): %d rooms, %d doors, %d furniture",
              building_type, world_x, world_y, len(interior.rooms),
              len(interior.doors), len(interior.furniture))
    return interior


# ============================================================
# Grid and rooms
# ============================================================

def _init_grid(interior: BuildingInterior) -> None:
    interior.tiles = []
    for y in range(interior.height):
        row = []
        for x in range(interior.width):
            perimeter = (x == 0 or y == 0 or x == interior.width - 1
                         or y == interior.height - 1)
            terrain = InteriorTerrain.WALL if perimeter else InteriorTerrain.FLOOR
            row.append(InteriorTile(x, y, terrain))
        interior.tiles.append(row)


def _generate_rooms(interior: BuildingInterior,
                    rng: XorShiftRng) -> List[Tuple[str, int, int, int]]:
    """Split rooms; returns the wall lines as (axis, pos, start, end)."""
    template = building_template(interior.building_type)
    target = rng.next_int(template.min_rooms, template.max_rooms)

    rooms = [Room(1, 1, interior.width - 2, interior.height - 2)]
    room_types = rng.shuffle(list(template.rooms))
    walls = []

    while len(rooms) < target:
        largest = None
        for room in rooms:
            if (room.splittable and room.width >= MIN_SPLIT_SIZE
                    and room.height >= MIN_SPLIT_SIZE
                    and (largest is None or room.area > largest.area)):
                largest = room
        if largest is None:
            break

        if largest.width > largest.height:
            vertical = True
        elif largest.width < largest.height:
            vertical = False
        else:
            vertical = rng.next_bool()

        origin = largest.x if vertical else largest.y
        extent = largest.width if vertical else largest.height
        low = origin + SPLIT_MARGIN
        high = origin + extent - SPLIT_MARGIN - 1
        if high <= low:
            largest.splittable = False
            continue
        pos = rng.next_int(low, high)

        rooms.remove(largest)
        if vertical:
            first = Room(largest.x, largest.y, pos - largest.x, largest.height)
            second = Room(pos + 1, largest.y, largest.x + largest.width - pos - 1, largest.height)
            first.split_wall = ("vertical", pos)
            walls.append(("vertical", pos, largest.y, largest.y + largest.height))
        else:
            first = Room(largest.x, largest.y, largest.width, pos - largest.y)
            second = Room(largest.x, pos + 1, largest.width, largest.y + largest.height - pos - 1)
            first.split_wall = ("horizontal", pos)
            walls.append(("horizontal", pos, largest.x, largest.x + largest.width))
        rooms.extend((first, second))

    for i, room in enumerate(rooms):
        room.room_id = i
        room.room_type = room_types[i % len(room_types)]
        for y in range(room.y, room.y + room.height):
            for x in range(room.x, room.x + room.width):
                interior.tiles[y][x].room_id = i
    interior.rooms = rooms
    return walls


def _add_internal_walls(interior: BuildingInterior,
                        walls: List[Tuple[str, int, int, int]]) -> None:
    for axis, pos, start, end in walls:
        for i in range(start, end):
            tile = interior.get_tile(pos, i) if axis == "vertical" else interior.get_tile(i, pos)
            if tile is not None:
                tile.terrain = InteriorTerrain.WALL
                tile.room_id = None


# ============================================================
# Doors
# ============================================================

def _connect_rooms(interior: BuildingInterior, rng: XorShiftRng) -> None:
    rooms = interior.rooms
    if len(rooms) <= 1:
        return

    connected = [0]
    unconnected = list(range(1, len(rooms)))

    while unconnected:
        placed = False
        for a in connected:
            for b in unconnected:
                pos = find_door_position(interior, rooms[a], rooms[b])
                if pos is None:
                    continue
                locked = rng.next_bool(LOCKED_DOOR_CHANCE)
                tile = interior.tiles[pos[1]][pos[0]]
                tile.terrain = InteriorTerrain.DOOR_LOCKED if locked else InteriorTerrain.DOOR_CLOSED
                interior.doors.append(Door(pos[0], pos[1], locked, (a, b)))
                connected.append(b)
                unconnected.remove(b)
                placed = True
                break
            if placed:
                break

        if not placed:
            # No shared wall with any connected room: accept it doorless.
            forced = unconnected.pop(0)
            connected.append(forced)
            interior.forced_connections.append(forced)
            log.debug("Room %d of %s force-connected", forced, interior.building_type)


def find_door_position(interior: BuildingInterior, room1: Room,
                       room2: Room) -> Optional[Tuple[int, int]]:
    """Wall tile on the rooms' shared boundary nearest the midpoint of their centers."""
    candidates = []
    for first, second in ((room1, room2), (room2, room1)):
        # first left of second
        gap = second.x - (first.x + first.width)
        if 0 <= gap <= 1:
            wall_x = first.x + first.width
            start = max(room1.y, room2.y) + 1
            end = min(room1.y + room1.height, room2.y + room2.height) - 1
            for y in range(start, end):
                tile = interior.get_tile(wall_x, y)
                if tile is not None and tile.terrain is InteriorTerrain.WALL:
                    candidates.append((wall_x, y))
        # first above second
        gap = second.y - (first.y + first.height)
        if 0 <= gap <= 1:
            wall_y = first.y + first.height
            start = max(room1.x, room2.x) + 1
            end = min(room1.x + room1.width, room2.x + room2.width) - 1
            for x in range(start, end):
                tile = interior.get_tile(x, wall_y)
                if tile is not None and tile.terrain is InteriorTerrain.WALL:
                    candidates.append((x, wall_y))

    if not candidates:
        return None

    mid_x = (room1.center_x + room2.center_x) / 2
    mid_y = (room1.center_y + room2.center_y) / 2
    candidates.sort(key=lambda p: abs(p[0] - mid_x) + abs(p[1] - mid_y))
    return candidates[0]


# ============================================================
# Exits
# ============================================================

def _place_exits(interior: BuildingInterior) -> None:
    bottom = interior.height - 1
    entry_x = interior.width // 2

    for offset in range(interior.width):
        found = None
        for x in (entry_x + offset, entry_x - offset):
            if 0 < x < interior.width - 1 and \
                    interior.tiles[bottom - 1][x].terrain is InteriorTerrain.FLOOR:
                found = x
                break
        if found is not None:
            entry_x = found
            break

    exit_tile = interior.tiles[bottom][entry_x]
    exit_tile.terrain = InteriorTerrain.EXIT
    exit_tile.is_exit = True
    interior.entry_x = entry_x
    interior.entry_y = bottom - 1

    for x in range(1, interior.width - 1):
        if interior.tiles[1][x].terrain is InteriorTerrain.FLOOR and \
                interior.tiles[0][x].terrain is InteriorTerrain.WALL:
            interior.tiles[0][x].terrain = InteriorTerrain.EXIT
            interior.tiles[0][x].is_exit = True
            break


# ============================================================
# Furniture
# ============================================================

def count_adjacent_walls(interior: BuildingInterior, x: int, y: int) -> int:
    """Cardinal neighbours that are walls; off-grid counts as wall."""
    count = 0
    for dx, dy in CARDINAL:
        tile = interior.get_tile(x + dx, y + dy)
        if tile is None or tile.terrain is InteriorTerrain.WALL:
            count += 1
    return count


def _near_opening(interior: BuildingInterior, x: int, y: int) -> bool:
    for door in interior.doors:
        if abs(door.x - x) <= 1 and abs(door.y - y) <= 1:
            return True
    for tile in interior.exit_tiles():
        if abs(tile.x - x) <= 1 and abs(tile.y - y) <= 1:
            return True
    return False


def _room_stays_connected(interior: BuildingInterior, room: Room,
                          blocked: Tuple[int, int]) -> bool:
    """Would the room's open floor remain one region with `blocked` furnished?"""
    open_tiles: Set[Tuple[int, int]] = set()
    for y in range(room.y, room.y + room.height):
        for x in range(room.x, room.x + room.width):
            tile = interior.tiles[y][x]
            if (x, y) != blocked and tile.terrain is InteriorTerrain.FLOOR \
                    and tile.furniture is None:
                open_tiles.add((x, y))
    if not open_tiles:
        return False

    start = next(iter(open_tiles))
    seen = {start}
    queue = deque([start])
    while queue:
        x, y = queue.popleft()
        for dx, dy in CARDINAL:
            nxt = (x + dx, y + dy)
            if nxt in open_tiles and nxt not in seen:
                seen.add(nxt)
                queue.append(nxt)
    return len(seen) == len(open_tiles)


def _place_furniture(interior: BuildingInterior, rng: XorShiftRng) -> None:
    for room in interior.rooms:
        room_type = ROOM_TYPES.get(room.room_type)
        if room_type is None:
            continue

        count = rng.next_int(room_type.min_furniture, room_type.max_furniture)
        choices = rng.shuffle(list(room_type.furniture))

        candidates = []
        for y in range(room.y, room.y + room.height):
            for x in range(room.x, room.x + room.width):
                tile = interior.tiles[y][x]
                if tile.terrain is not InteriorTerrain.FLOOR or tile.is_exit:
                    continue
                if _near_opening(interior, x, y):
                    continue
                candidates.append((count_adjacent_walls(interior, x, y), x, y))
        candidates.sort(key=lambda c: -c[0])

        placed = 0
        for _, x, y in candidates:
            if placed >= count:
                break
            if not _room_stays_connected(interior, room, (x, y)):
                continue
            kind = FURNITURE_TYPES[choices[placed % len(choices)]]
            locked = kind.locked
            if kind.can_lock:
                locked = rng.next_bool(LOCKED_FURNITURE_CHANCE)
            item = Furniture(x, y, kind.key, locked=locked)
            interior.tiles[y][x].furniture = item
            interior.furniture.append(item)
            placed += 1


# ============================================================
# Windows
# ============================================================

def _place_windows(interior: BuildingInterior, rng: XorShiftRng) -> None:
    count = rng.next_int(1, 3)
    w, h = interior.width, interior.height
    candidates = []

    def consider(x, y, inner_x, inner_y):
        tile = interior.tiles[y][x]
        inner = interior.tiles[inner_y][inner_x]
        if tile.terrain is InteriorTerrain.WALL and not tile.is_exit \
                and inner.terrain is InteriorTerrain.FLOOR:
            candidates.append((x, y))

    for y in range(2, h - 2):
        consider(0, y, 1, y)
    for y in range(2, h - 2):
        consider(w - 1, y, w - 2, y)
    for x in range(2, w - 2):
        consider(x, 0, x, 1)

    rng.shuffle(candidates)
    for x, y in candidates[:count]:
        interior.tiles[y][x].terrain = InteriorTerrain.WINDOW
        interior.windows.append((x, y))
