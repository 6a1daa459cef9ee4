"""
Seeded random streams for procedural generation.

Generation never touches the global `random` module: every chunk and
every building interior builds its own stream from its coordinates and
the game seed, so the same inputs always yield the same layout no matter
in which order chunks or buildings are visited.
"""

from typing import List, Sequence, TypeVar

T = TypeVar("T")

MASK32 = 0xFFFFFFFF

# Spatial hash primes (Teschner et al.)
HASH_PRIME_X = 73856093
HASH_PRIME_Y = 19349663
HASH_PRIME_SEED = 83492791


def spatial_hash(x: int, y: int, seed: int) -> int:
    """32-bit hash of a world position and the game seed."""
    return ((x * HASH_PRIME_X) ^ (y * HASH_PRIME_Y) ^ seed) & MASK32


class ChunkRng:
    """Linear-congruential stream used for per-chunk prop and road placement."""

    MULTIPLIER = 1664525
    INCREMENT = 1013904223

    def __init__(self, cx: int, cy: int, seed: int):
        self.state = spatial_hash(cx, cy, (seed * HASH_PRIME_SEED) & MASK32)

    def next(self) -> float:
        """Uniform float in [0, 1)."""
        self.state = (self.MULTIPLIER * self.state + self.INCREMENT) & MASK32
        return self.state / 4294967296.0

    def next_int(self, low: int, high: int) -> int:
        """Uniform integer in [low, high]."""
        return low + int(self.next() * (high - low + 1))


class XorShiftRng:
    """Xorshift32 stream used by the interior generator."""

    FALLBACK_SEED = 0x9E3779B9        # xorshift never leaves zero

    def __init__(self, seed: int):
        self.seed = (seed & MASK32) or self.FALLBACK_SEED

    def next(self) -> float:
        """Uniform float in [0, 1)."""
        x = self.seed
        x = (x ^ (x << 13)) & MASK32
        x ^= x >> 17
        x = (x ^ (x << 5)) & MASK32
        self.seed = x
        return x / 4294967296.0

    def next_int(self, low: int, high: int) -> int:
        """Uniform integer in [low, high]."""
        return int(self.next() * (high - low + 1)) + low

    def next_bool(self, probability: float = 0.5) -> bool:
        return self.next() < probability

    def shuffle(self, items: List[T]) -> List[T]:
        """Fisher-Yates in place; returns the same list."""
        for i in range(len(items) - 1, 0, -1):
            j = int(self.next() * (i + 1))
            items[i], items[j] = items[j], items[i]
        return items

    def pick(self, items: Sequence[T]) -> T:
        return items[int(self.next() * len(items))]
