"""
Fog of War: which outdoor tiles the party has seen.

Revealing is monotonic. Once a tile is seen it stays seen, and the set
of revealed keys is all a save file needs to restore the fog.
"""

from typing import Iterable, List, Set

from echoes_of_the_fall.config import REVEAL_RADIUS
from echoes_of_the_fall.core.logger import get_logger

log = get_logger("fog")


class FogOfWar:
    def __init__(self, world):
        self.world = world
        self.revealed: Set[str] = set()
        self.visible_tiles: List = []        # Reveal order, for renderers

    def reveal_around(self, x: int, y: int, radius: int = REVEAL_RADIUS) -> List:
        """Reveal every tile within Euclidean `radius`; returns the newly revealed."""
        for cx, cy in self.world.chunks_in_box(x - radius, y - radius,
                                               x + radius, y + radius):
            self.world.ensure_chunk_ready(cx, cy)

        newly = []
        r2 = radius * radius
        for dy in range(-radius, radius + 1):
            for dx in range(-radius, radius + 1):
                if dx * dx + dy * dy > r2:
                    continue
                tile = self.world.get_ready_tile(x + dx, y + dy)
                if tile is None or tile.key in self.revealed:
                    continue
                self.revealed.add(tile.key)
                tile.revealed = True
                self.visible_tiles.append(tile)
                newly.append(tile)
        return newly

    def reveal_for_unit(self, unit) -> List:
        return self.reveal_around(unit.x, unit.y, REVEAL_RADIUS)

    def initial_reveal(self, units: Iterable) -> int:
        total = 0
        for unit in units:
            total += len(self.reveal_for_unit(unit))
        log.info("Initial reveal: %d tiles", total)
        return total

    def reveal_keys(self, keys: Iterable[str]) -> int:
        """Re-reveal saved "x,y" keys one tile at a time."""
        count = 0
        for key in keys:
            x, y = (int(part) for part in key.split(","))
            count += len(self.reveal_around(x, y, 0))
        return count

    def is_revealed(self, x: int, y: int) -> bool:
        return f"{x},{y}" in self.revealed

    def revealed_keys(self) -> List[str]:
        return sorted(self.revealed)
