"""
Chunk Store: the lazily materialized, effectively infinite outdoor map.

No tile exists until something asks for it. Asking for a tile generates
its chunk's terrain; asking for a ready tile also runs the urban, prop
and road pass for that chunk.
"""

from typing import Dict, Iterator, List, Optional, Tuple

from echoes_of_the_fall.config import (
    CHUNK_SIZE, ELEVATION_SCALE, MOISTURE_SCALE, MOISTURE_OFFSET,
    RADIATION_SCALE, RADIATION_CUTOFF,
)
from echoes_of_the_fall.core.logger import get_logger
from .chunk import Chunk, is_valid_coord, local_coords, world_to_chunk
from .noise_field import NoiseField
from .terrain import MIN_MOVE_COST, classify_terrain
from .tile import Tile

log = get_logger("map")

NEIGHBOR_OFFSETS = (
    (-1, -1), (0, -1), (1, -1),
    (-1, 0),           (1, 0),
    (-1, 1),  (0, 1),  (1, 1),
)


class ChunkStore:
    def __init__(self, seed: int):
        self.seed = seed
        self.noise = NoiseField(seed)
        self.chunks: Dict[Tuple[int, int], Chunk] = {}
        # Outdoor terrain never costs less than this per step.
        self.min_step_cost = MIN_MOVE_COST

    # ------------------------------------------------------------------
    # Chunks
    # ------------------------------------------------------------------

    def get_or_create_chunk(self, cx: int, cy: int) -> Chunk:
        chunk = self.chunks.get((cx, cy))
        if chunk is None:
            chunk = Chunk(cx, cy)
            self.chunks[(cx, cy)] = chunk
        return chunk

    def sample(self, x: int, y: int) -> Tuple[float, float, float]:
        """(elevation, moisture, radiation) for a world coordinate."""
        elevation = (self.noise.fbm(x * ELEVATION_SCALE, y * ELEVATION_SCALE, 4) + 1) / 2
        moisture = (self.noise.fbm(x * MOISTURE_SCALE + MOISTURE_OFFSET,
                                   y * MOISTURE_SCALE + MOISTURE_OFFSET, 3) + 1) / 2
        rad_noise = self.noise.noise2d(x * RADIATION_SCALE, y * RADIATION_SCALE)
        radiation = 0.0
        if rad_noise > RADIATION_CUTOFF:
            radiation = (rad_noise - RADIATION_CUTOFF) / (1.0 - RADIATION_CUTOFF)
        return elevation, moisture, radiation

    def generate_chunk(self, chunk: Chunk) -> Chunk:
        """Compute terrain for every tile of the chunk. No-op once generated."""
        if chunk.generated:
            return chunk
        for ly in range(CHUNK_SIZE):
            for lx in range(CHUNK_SIZE):
                x = chunk.min_x + lx
                y = chunk.min_y + ly
                elevation, moisture, radiation = self.sample(x, y)
                chunk.tiles[(lx, ly)] = Tile(
                    x=x, y=y,
                    elevation=elevation,
                    moisture=moisture,
                    radiation_level=radiation,
                    terrain=classify_terrain(elevation, moisture, radiation),
                )
        chunk.generated = True
        return chunk

    def ensure_chunk_ready(self, cx: int, cy: int) -> Chunk:
        """Generate terrain and run the urban/prop/road pass exactly once."""
        from .generator import WorldGenerator

        chunk = self.generate_chunk(self.get_or_create_chunk(cx, cy))
        if not chunk.rendered:
            WorldGenerator.populate_chunk(chunk, self.seed)
            log.debug("Chunk (%d, %d) populated: %d buildings",
                      cx, cy, len(chunk.buildings))
        return chunk

    # ------------------------------------------------------------------
    # Tiles
    # ------------------------------------------------------------------

    def get_tile(self, x: int, y: int) -> Optional[Tile]:
        """Tile at world coordinates, generating its chunk on demand."""
        if not is_valid_coord(x, y):
            return None
        cx, cy = world_to_chunk(x, y)
        chunk = self.generate_chunk(self.get_or_create_chunk(cx, cy))
        return chunk.tiles.get(local_coords(x, y))

    def get_ready_tile(self, x: int, y: int) -> Optional[Tile]:
        """Tile with its chunk's props and roads in place."""
        if not is_valid_coord(x, y):
            return None
        chunk = self.ensure_chunk_ready(*world_to_chunk(x, y))
        return chunk.tiles.get(local_coords(x, y))

    def peek_tile(self, x: int, y: int) -> Optional[Tile]:
        """Tile only if it already exists; never generates."""
        chunk = self.chunks.get(world_to_chunk(x, y))
        if chunk is None:
            return None
        return chunk.tiles.get(local_coords(x, y))

    def neighbors(self, x: int, y: int) -> List[Tile]:
        """Ready tiles in the 8 surrounding positions."""
        result = []
        for dx, dy in NEIGHBOR_OFFSETS:
            tile = self.get_ready_tile(x + dx, y + dy)
            if tile is not None:
                result.append(tile)
        return result

    def chunks_in_box(self, min_x: int, min_y: int,
                      max_x: int, max_y: int) -> Iterator[Tuple[int, int]]:
        cx0, cy0 = world_to_chunk(min_x, min_y)
        cx1, cy1 = world_to_chunk(max_x, max_y)
        for cy in range(cy0, cy1 + 1):
            for cx in range(cx0, cx1 + 1):
                yield cx, cy

    def iter_tiles(self) -> Iterator[Tile]:
        for chunk in self.chunks.values():
            yield from chunk.iter_tiles()

    def path_tile(self, x: int, y: int) -> Optional[Tile]:
        """Grid protocol used by the Pathfinder."""
        return self.get_ready_tile(x, y)
