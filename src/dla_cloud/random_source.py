"""
Random sources consumed by the aggregation engine.

The engine never touches global random state. It asks its source for two
things only: a uniformly distributed unit direction and a uniform
probability draw in [0, 1).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from . import vectors


class RandomSource(ABC):
    """Randomness capability injected into an AggregationEngine."""

    @abstractmethod
    def direction(self, dim: int) -> np.ndarray:
        """Return a unit vector of length ``dim``."""

    @abstractmethod
    def probability(self) -> float:
        """Return a uniform draw in [0, 1)."""


class NumpyRandomSource(RandomSource):
    """
    Default source backed by ``numpy.random.Generator``.

    Directions are drawn by rejection sampling inside the unit ball and then
    normalised. Passing the same ``seed`` reproduces the same cluster.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self.seed = seed
        self.rng = np.random.default_rng(seed)

    def direction(self, dim: int) -> np.ndarray:
        return vectors.random_direction(self.rng, dim)

    def probability(self) -> float:
        return float(self.rng.random())


def make_random_source(source: RandomSource | int | None = None) -> RandomSource:
    """Accept an existing source, an integer seed or None (fresh entropy)."""
    if isinstance(source, RandomSource):
        return source
    if source is None or isinstance(source, (int, np.integer)):
        return NumpyRandomSource(None if source is None else int(source))
    raise TypeError(f"Cannot build a random source from {type(source).__name__}")


__all__ = ["RandomSource", "NumpyRandomSource", "make_random_source"]
