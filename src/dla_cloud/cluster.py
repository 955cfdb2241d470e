"""
Cluster state owned by an AggregationEngine.

Points, parent labels and join-attempt counters are parallel arrays indexed
by point id. Ids are insertion indices: they are handed out once and never
reused. The spatial index mirrors the same point set with the same ids.
"""

from __future__ import annotations

import numpy as np

from . import vectors
from .errors import EmptyClusterError
from .spatial_index import KDTreeIndex, SpatialIndex


class Cluster:
    def __init__(self, dim: int, index: SpatialIndex | None = None, capacity: int = 256) -> None:
        self.dim = vectors.check_dim(dim)
        if index is None:
            index = KDTreeIndex(self.dim)
        elif len(index) != 0:
            raise ValueError("Cluster needs an empty spatial index")
        self.index = index

        self._points = np.empty((capacity, self.dim), dtype=np.float64)
        self._parents = np.empty(capacity, dtype=np.int64)
        self._join_attempts = np.zeros(capacity, dtype=np.int64)
        self._size = 0
        self.bounding_radius = 0.0

    def __len__(self) -> int:
        return self._size

    def _reserve(self, needed: int) -> None:
        capacity = self._points.shape[0]
        if needed <= capacity:
            return
        while capacity < needed:
            capacity *= 2
        points = np.empty((capacity, self.dim), dtype=np.float64)
        points[: self._size] = self._points[: self._size]
        parents = np.empty(capacity, dtype=np.int64)
        parents[: self._size] = self._parents[: self._size]
        attempts = np.zeros(capacity, dtype=np.int64)
        attempts[: self._size] = self._join_attempts[: self._size]
        self._points, self._parents, self._join_attempts = points, parents, attempts

    def append(self, position: np.ndarray, parent: int, attraction_distance: float) -> int:
        """
        Store a new point and return its id.

        The bounding radius grows to cover the point plus the capture margin.
        """
        ident = self._size
        self._reserve(ident + 1)
        self.index.insert(position, ident)
        self._points[ident] = position
        self._parents[ident] = parent
        self._join_attempts[ident] = 0
        self._size += 1
        self.bounding_radius = max(
            self.bounding_radius, vectors.length(position) + attraction_distance
        )
        return ident

    def nearest(self, position: np.ndarray) -> int:
        if self._size == 0:
            raise EmptyClusterError()
        return self.index.nearest(position)

    def position(self, ident: int) -> np.ndarray:
        return self._points[ident]

    def record_attempt(self, ident: int) -> int:
        """Bump the join-attempt counter of ``ident`` and return the new count."""
        self._join_attempts[ident] += 1
        return int(self._join_attempts[ident])

    @property
    def positions(self) -> np.ndarray:
        view = self._points[: self._size]
        view.flags.writeable = False
        return view

    @property
    def parents(self) -> np.ndarray:
        return self._parents[: self._size].copy()

    @property
    def join_attempts(self) -> np.ndarray:
        return self._join_attempts[: self._size].copy()
