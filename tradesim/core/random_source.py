"""Injectable random source for the simulation engines.

Every stochastic draw in the engines goes through one RandomSource so a
seeded run replays the exact same feed.
"""
from typing import List, Optional, Sequence, TypeVar

import numpy as np

T = TypeVar('T')

HEX_CHARS = '0123456789abcdef'


class RandomSource:
    """Thin wrapper over numpy's Generator with the draws the engines use."""

    def __init__(self, seed: Optional[int] = None, generator: Optional[np.random.Generator] = None):
        self.seed = seed
        self._rng = generator if generator is not None else np.random.default_rng(seed)

    def random(self) -> float:
        """Uniform float in [0, 1)."""
        return float(self._rng.random())

    def uniform(self, low: float, high: float) -> float:
        """Uniform float in [low, high)."""
        return low + self.random() * (high - low)

    def integer(self, low: int, high: int) -> int:
        """Uniform integer in [low, high], both ends inclusive."""
        return int(self._rng.integers(low, high + 1))

    def chance(self, probability: float) -> bool:
        return self.random() < probability

    def choice(self, items: Sequence[T]) -> T:
        if len(items) == 0:
            raise ValueError("Cannot choose from an empty sequence")
        return items[int(self._rng.integers(len(items)))]

    def sample(self, items: Sequence[T], k: int) -> List[T]:
        """k distinct items in random order."""
        order = self._rng.permutation(len(items))[:k]
        return [items[i] for i in order]

    def hex_string(self, length: int) -> str:
        return ''.join(HEX_CHARS[i] for i in self._rng.integers(0, 16, size=length))

    def __repr__(self) -> str:
        return f"RandomSource(seed={self.seed})"
