"""
NoiseField: seeded 2D gradient noise and fractal Brownian motion.

Terrain is never stored. Every tile is recomputed from (seed, x, y), so
a save file only needs the seed to rebuild the map.
"""

import math
import random

import noise

SQRT2 = math.sqrt(2.0)
PERMUTATION_SIZE = 256                 # pnoise2 lattice period


class NoiseField:
    def __init__(self, seed: int = 0):
        self.init(seed)

    def init(self, seed: int) -> None:
        """Reset permutation state for a new seed."""
        self.seed = int(seed)
        # The noise library exposes 256 permutation bases; the remaining
        # seed bits pick a fractional lattice offset.
        offsets = random.Random(self.seed)
        self._base = self.seed % PERMUTATION_SIZE
        self._offset_x = offsets.uniform(0.0, PERMUTATION_SIZE)
        self._offset_y = offsets.uniform(0.0, PERMUTATION_SIZE)

    def noise2d(self, x: float, y: float) -> float:
        """Single-octave noise in [-1, 1]."""
        value = noise.pnoise2(x + self._offset_x, y + self._offset_y,
                              base=self._base)
        # 2D Perlin peaks at sqrt(0.5); stretch to the full range.
        return max(-1.0, min(1.0, value * SQRT2))

    def fbm(self, x: float, y: float, octaves: int = 4) -> float:
        """Fractal sum with doubling frequency and halving amplitude, in [-1, 1]."""
        total = 0.0
        amplitude = 1.0
        frequency = 1.0
        norm = 0.0
        for _ in range(octaves):
            total += self.noise2d(x * frequency, y * frequency) * amplitude
            norm += amplitude
            amplitude *= 0.5
            frequency *= 2.0
        return total / norm if norm else 0.0
