"""Random number sources used by the market feeders."""

from __future__ import annotations

import abc
import itertools
import random
from collections.abc import Iterable


class RandomSource(abc.ABC):
    """Source of uniformly distributed numbers."""

    @abc.abstractmethod
    def uniform_real(self, low: float, high: float) -> float:
        """Return a float in [low, high)."""

    @abc.abstractmethod
    def uniform_int(self, low: int, high: int) -> int:
        """Return an integer in [low, high]."""


class MockRNG(RandomSource):
    """Replays a fixed list of values in a loop, ignoring the requested range."""

    def __init__(self, values: Iterable[float]) -> None:
        stored = tuple(float(v) for v in values)
        self._values = itertools.cycle(stored) if stored else None

    def _next_value(self) -> float:
        if self._values is None:
            return 0.0
        return next(self._values)

    def uniform_real(self, low: float, high: float) -> float:
        return self._next_value()

    def uniform_int(self, low: int, high: int) -> int:
        return int(self._next_value())


class RealRNG(RandomSource):
    """Pseudo-random source; seeded for reproducibility, otherwise from OS entropy."""

    def __init__(self, seed: int | None = None) -> None:
        self._engine = random.Random(seed)

    def uniform_real(self, low: float, high: float) -> float:
        if low > high:
            raise ValueError(f"empty range [{low}, {high})")
        return low + (high - low) * self._engine.random()

    def uniform_int(self, low: int, high: int) -> int:
        if low > high:
            raise ValueError(f"empty range [{low}, {high}]")
        return self._engine.randint(low, high)