"""Explicit random source threaded through every generator.

All stochastic behaviour of the engine reduces to two primitives: a
uniform draw in [0, 1) and a Gaussian built from two uniforms with the
Box-Muller transform.  Uniforms come from a ``numpy.random.Generator``
in fixed-size blocks, so a given seed always yields the same stream.
"""

import math
from typing import List, Optional, Sequence, TypeVar

import numpy as np

from src.simulation_engine.config import GAUSSIAN_UNIFORM_FLOOR, RANDOM_BLOCK_SIZE

T = TypeVar("T")


class RandomSource:
    """Seeded uniform and Gaussian draws.

    Args:
        seed: Integer seed for a reproducible stream, or ``None`` to draw
            fresh OS entropy.
    """

    def __init__(self, seed: Optional[int] = None, block_size: int = RANDOM_BLOCK_SIZE):
        self.seed = seed
        self._generator = np.random.default_rng(seed)
        self._block_size = block_size
        self._block: List[float] = []
        self._index = 0

    def uniform(self) -> float:
        """Uniform draw in [0, 1)."""
        if self._index >= len(self._block):
            self._block = self._generator.random(self._block_size).tolist()
            self._index = 0
        value = self._block[self._index]
        self._index += 1
        return value

    def gaussian(self, mean: float = 0.0, std: float = 1.0) -> float:
        u1 = max(GAUSSIAN_UNIFORM_FLOOR, self.uniform())
        u2 = max(GAUSSIAN_UNIFORM_FLOOR, self.uniform())
        z = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
        return mean + z * std

    def chance(self, probability: float) -> bool:
        return self.uniform() < probability

    def randint(self, low: int, high: int) -> int:
        """Uniform integer in ``[low, high]`` inclusive."""
        if high <= low:
            return low
        return math.floor(self.uniform() * (high - low + 1)) + low

    def choice(self, values: Sequence[T]) -> Optional[T]:
        if not values:
            return None
        return values[self.randint(0, len(values) - 1)]

    def sample(self, values: Sequence[T], count: int) -> List[T]:
        """Up to *count* distinct items via a Fisher-Yates shuffle."""
        pool = list(values or [])
        for i in range(len(pool) - 1, 0, -1):
            j = self.randint(0, i)
            pool[i], pool[j] = pool[j], pool[i]
        return pool[: max(0, min(count, len(pool)))]
