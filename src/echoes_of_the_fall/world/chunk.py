from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from echoes_of_the_fall.config import CHUNK_SIZE, MAX_COORD
from .tile import Tile


def world_to_chunk(x: int, y: int) -> Tuple[int, int]:
    return x // CHUNK_SIZE, y // CHUNK_SIZE


def local_coords(x: int, y: int) -> Tuple[int, int]:
    """Position inside the owning chunk; correct for negative coordinates."""
    return x % CHUNK_SIZE, y % CHUNK_SIZE


def is_valid_coord(x: int, y: int) -> bool:
    return -MAX_COORD <= x < MAX_COORD and -MAX_COORD <= y < MAX_COORD


def footprint_bounds(x: int, y: int, width: int, depth: int) -> Tuple[int, int, int, int]:
    """(start_x, start_y, end_x, end_y) of a footprint centered on its anchor."""
    start_x = x - (width - 1) // 2
    start_y = y - (depth - 1) // 2
    return start_x, start_y, start_x + width - 1, start_y + depth - 1


def fits_in_chunk(x: int, y: int, width: int, depth: int) -> bool:
    """True when the whole footprint lies in the anchor's chunk."""
    sx, sy, ex, ey = footprint_bounds(x, y, width, depth)
    return world_to_chunk(sx, sy) == world_to_chunk(ex, ey) == world_to_chunk(x, y)


@dataclass
class Chunk:
    cx: int
    cy: int
    generated: bool = False
    rendered: bool = False
    tiles: Dict[Tuple[int, int], Tile] = field(default_factory=dict)
    buildings: List[Tuple[int, int]] = field(default_factory=list)   # Anchors
    occupied: Set[Tuple[int, int]] = field(default_factory=set)      # Large-prop footprints

    @property
    def min_x(self) -> int:
        return self.cx * CHUNK_SIZE

    @property
    def min_y(self) -> int:
        return self.cy * CHUNK_SIZE

    def contains(self, x: int, y: int) -> bool:
        return world_to_chunk(x, y) == (self.cx, self.cy)

    def get_tile(self, x: int, y: int) -> Optional[Tile]:
        """Tile by world coordinates, None if outside this chunk."""
        if not self.contains(x, y):
            return None
        return self.tiles.get(local_coords(x, y))

    def get_local(self, lx: int, ly: int) -> Optional[Tile]:
        return self.tiles.get((lx, ly))

    def iter_tiles(self):
        """Row-major, so generation consumes random numbers in a fixed order."""
        for ly in range(CHUNK_SIZE):
            for lx in range(CHUNK_SIZE):
                tile = self.tiles.get((lx, ly))
                if tile is not None:
                    yield tile
