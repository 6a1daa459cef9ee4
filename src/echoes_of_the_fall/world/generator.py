from typing import Dict, List, Optional, Tuple

from echoes_of_the_fall.config import (
    CHUNK_SIZE, URBAN_ATTEMPTS, URBAN_MARGIN, PAVEMENT_CHANCE, ROAD_CONNECTIONS,
)
from echoes_of_the_fall.engine.pathfinding import astar, manhattan
from .chunk import Chunk, fits_in_chunk, footprint_bounds
from .props import PROP_CATALOG, TERRAIN_PROPS, create_prop
from .rng import ChunkRng
from .terrain import TerrainType
from .tile import Tile

BLOCKING_TERRAIN = (TerrainType.WATER, TerrainType.TOXIC)
CARDINAL = ((0, -1, "N"), (0, 1, "S"), (1, 0, "E"), (-1, 0, "W"))


class WorldGenerator:
    """Per-chunk urban, prop and road placement."""

    @staticmethod
    def populate_chunk(chunk: Chunk, seed: int) -> Chunk:
        if chunk.rendered:
            return chunk
        rng = ChunkRng(chunk.cx, chunk.cy, seed)
        WorldGenerator.generate_urban_zones(chunk, rng)
        for tile in chunk.iter_tiles():
            WorldGenerator.place_prop(chunk, tile, rng)
        WorldGenerator.generate_roads(chunk)
        chunk.rendered = True
        return chunk

    # ------------------------------------------------------------------
    # Urban zones
    # ------------------------------------------------------------------

    @staticmethod
    def generate_urban_zones(chunk: Chunk, rng: ChunkRng) -> List[Tuple[int, int]]:
        centers = []
        span = CHUNK_SIZE - 2 * URBAN_MARGIN
        for _ in range(URBAN_ATTEMPTS):
            lx = URBAN_MARGIN + int(rng.next() * span)
            ly = URBAN_MARGIN + int(rng.next() * span)
            size = 2 + int(rng.next() * 2)
            center = chunk.get_local(lx, ly)
            if center is None or center.terrain in BLOCKING_TERRAIN:
                continue
            centers.append((center.x, center.y))
            WorldGenerator._convert_zone(chunk, center.x, center.y, size, rng)
        return centers

    @staticmethod
    def _convert_zone(chunk: Chunk, cx: int, cy: int, size: int, rng: ChunkRng) -> None:
        for dy in range(-size, size + 1):
            for dx in range(-size, size + 1):
                dist = abs(dx) + abs(dy)
                if dist > size:
                    continue
                tile = chunk.get_tile(cx + dx, cy + dy)
                if tile is None or tile.terrain in BLOCKING_TERRAIN:
                    continue
                if dist <= 1:
                    tile.set_terrain(TerrainType.CONCRETE)
                elif rng.next() < PAVEMENT_CHANCE:
                    tile.set_terrain(TerrainType.PAVEMENT)
                else:
                    tile.set_terrain(TerrainType.RUBBLE)

    # ------------------------------------------------------------------
    # Props
    # ------------------------------------------------------------------

    @staticmethod
    def place_prop(chunk: Chunk, tile: Tile, rng: ChunkRng) -> Optional[str]:
        """Roll the tile's prop table; at most one prop lands per tile."""
        if (tile.x, tile.y) in chunk.occupied:
            return None
        for entry in TERRAIN_PROPS.get(tile.terrain, []):
            if rng.next() >= entry.chance:
                continue
            definition = PROP_CATALOG[entry.prop]
            if definition.width > 1 or definition.depth > 1:
                if not WorldGenerator._reserve_footprint(chunk, tile, definition.width,
                                                         definition.depth):
                    continue
            prop = create_prop(entry.prop, tile.x, tile.y)
            tile.props.append(prop)
            if prop.is_building:
                tile.has_building = True
                tile.building_anchor = (tile.x, tile.y)
                chunk.buildings.append((tile.x, tile.y))
            return prop.name
        return None

    @staticmethod
    def _reserve_footprint(chunk: Chunk, anchor: Tile, width: int, depth: int) -> bool:
        if not fits_in_chunk(anchor.x, anchor.y, width, depth):
            return False
        sx, sy, ex, ey = footprint_bounds(anchor.x, anchor.y, width, depth)
        covered = []
        for y in range(sy, ey + 1):
            for x in range(sx, ex + 1):
                tile = chunk.get_tile(x, y)
                if (tile is None or (x, y) in chunk.occupied or tile.has_building
                        or not tile.is_passable):
                    return False
                covered.append(tile)
        for tile in covered:
            chunk.occupied.add((tile.x, tile.y))
            tile.has_building = True
            tile.building_anchor = (anchor.x, anchor.y)
        return True

    # ------------------------------------------------------------------
    # Roads
    # ------------------------------------------------------------------

    @staticmethod
    def generate_roads(chunk: Chunk) -> int:
        """Link each building to its nearest neighbours. Returns road tiles laid."""
        buildings = chunk.buildings
        if len(buildings) < 2:
            return 0

        pairs = []
        seen = set()
        for building in buildings:
            others = sorted((b for b in buildings if b != building),
                            key=lambda b: manhattan(building, b))
            for other in others[:ROAD_CONNECTIONS]:
                key = tuple(sorted((building, other)))
                if key not in seen:
                    seen.add(key)
                    pairs.append(key)

        laid = 0
        for start, goal in pairs:
            path = WorldGenerator.find_road_path(chunk, start, goal)
            if path:
                laid += WorldGenerator._lay_road(chunk, [start] + path)
        return laid

    @staticmethod
    def find_road_path(chunk: Chunk, start: Tuple[int, int],
                       goal: Tuple[int, int]) -> Optional[List[Tuple[int, int]]]:
        """Cardinal A* inside the chunk; path excludes start, includes goal."""
        def neighbors(node):
            for dx, dy, _ in CARDINAL:
                nxt = (node[0] + dx, node[1] + dy)
                tile = chunk.get_tile(*nxt)
                if tile is None:
                    continue
                if tile.has_building and nxt != goal:
                    continue
                yield nxt, 1.0

        result = astar(start, goal, neighbors, lambda node: manhattan(node, goal))
        if result is None:
            return None
        path, _ = result
        return path[1:]

    @staticmethod
    def _lay_road(chunk: Chunk, path: List[Tuple[int, int]]) -> int:
        laid = 0
        for i, (x, y) in enumerate(path):
            tile = chunk.get_tile(x, y)
            if tile is None or tile.has_building:
                continue
            links = set()
            for other in (path[i - 1] if i > 0 else None,
                          path[i + 1] if i + 1 < len(path) else None):
                if other is not None:
                    links.add(road_direction((x, y), other))
            if tile.terrain not in BLOCKING_TERRAIN:
                tile.set_terrain(TerrainType.PAVEMENT)
            tile.has_road = True
            tile.road_links |= links
            laid += 1
        return laid


def road_direction(src: Tuple[int, int], dst: Tuple[int, int]) -> str:
    dx = dst[0] - src[0]
    dy = dst[1] - src[1]
    for cx, cy, name in CARDINAL:
        if (cx, cy) == (dx, dy):
            return name
    raise ValueError(f"Road step {src} -> {dst} is not cardinal")
