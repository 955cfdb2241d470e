"""
Spatial indexes answering nearest-point queries over a growing point set.

The engine only relies on the ``SpatialIndex`` interface: insert a point with
an id, find the id of the nearest stored point, and iterate the stored
points in insertion order.

``KDTreeIndex`` keeps a ``scipy.spatial.cKDTree`` over the bulk of the points
and a short insertion buffer that is scanned directly. cKDTree is static, so
the tree is rebuilt once the buffer outgrows a fraction of the tree.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator, Tuple

import numpy as np
from numba import njit
from scipy.spatial import cKDTree

from .errors import EmptyClusterError

DEFAULT_MIN_BUFFER = 64
DEFAULT_MAX_BUFFER = 1024
DEFAULT_REBUILD_FRACTION = 0.1


@njit(cache=True)
def nearest_in_range(points, start, stop, query):
    """
    Linear scan of ``points[start:stop]`` for the row closest to ``query``.

    Returns:
        (row, squared distance); row is -1 when the range is empty.
    """
    best = -1
    best_d2 = np.inf
    dim = points.shape[1]
    for i in range(start, stop):
        d2 = 0.0
        for k in range(dim):
            diff = points[i, k] - query[k]
            d2 += diff * diff
        if d2 < best_d2:
            best_d2 = d2
            best = i
    return best, best_d2


class SpatialIndex(ABC):
    """Insert / nearest / iterate capability over identified points."""

    @abstractmethod
    def insert(self, point: np.ndarray, ident: int) -> None:
        ...

    @abstractmethod
    def nearest(self, point: np.ndarray) -> int:
        """Id of the stored point closest to ``point``."""

    @abstractmethod
    def iterate(self) -> Iterator[Tuple[np.ndarray, int]]:
        """Yield ``(point, id)`` pairs in insertion order."""

    @abstractmethod
    def __len__(self) -> int:
        ...


class _PointStore:
    """Growable (capacity, dim) point array with a parallel id array."""

    def __init__(self, dim: int, capacity: int = 256) -> None:
        self.dim = dim
        self.points = np.empty((capacity, dim), dtype=np.float64)
        self.ids = np.empty(capacity, dtype=np.int64)
        self.size = 0

    def append(self, point: np.ndarray, ident: int) -> None:
        if self.size == self.points.shape[0]:
            capacity = 2 * self.points.shape[0]
            points = np.empty((capacity, self.dim), dtype=np.float64)
            points[: self.size] = self.points[: self.size]
            ids = np.empty(capacity, dtype=np.int64)
            ids[: self.size] = self.ids[: self.size]
            self.points, self.ids = points, ids
        self.points[self.size] = point
        self.ids[self.size] = ident
        self.size += 1

    def iterate(self) -> Iterator[Tuple[np.ndarray, int]]:
        for row in range(self.size):
            yield self.points[row].copy(), int(self.ids[row])


class BruteForceIndex(SpatialIndex):
    """Scans every point on each query. Exact and simple; O(N) per query."""

    def __init__(self, dim: int) -> None:
        self.dim = dim
        self._store = _PointStore(dim)

    def insert(self, point: np.ndarray, ident: int) -> None:
        self._store.append(np.asarray(point, dtype=np.float64), ident)

    def nearest(self, point: np.ndarray) -> int:
        if self._store.size == 0:
            raise EmptyClusterError()
        query = np.asarray(point, dtype=np.float64)
        row, _ = nearest_in_range(self._store.points, 0, self._store.size, query)
        return int(self._store.ids[row])

    def iterate(self) -> Iterator[Tuple[np.ndarray, int]]:
        return self._store.iterate()

    def __len__(self) -> int:
        return self._store.size


class KDTreeIndex(SpatialIndex):
    """
    cKDTree over settled points plus a linearly scanned insertion buffer.

    Args:
        dim: Point dimension (2 or 3).
        min_buffer: Buffer size that always fits before a rebuild.
        max_buffer: Buffer size that always triggers a rebuild.
        rebuild_fraction: Between the two bounds, rebuild once the buffer
            holds this fraction of the tree size.
    """

    def __init__(
        self,
        dim: int,
        min_buffer: int = DEFAULT_MIN_BUFFER,
        max_buffer: int = DEFAULT_MAX_BUFFER,
        rebuild_fraction: float = DEFAULT_REBUILD_FRACTION,
    ) -> None:
        self.dim = dim
        self.min_buffer = min_buffer
        self.max_buffer = max_buffer
        self.rebuild_fraction = rebuild_fraction
        self._store = _PointStore(dim)
        self._tree: cKDTree | None = None
        self._tree_size = 0
        self.rebuilds = 0

    def _buffer_limit(self) -> int:
        scaled = int(self.rebuild_fraction * self._tree_size)
        return min(self.max_buffer, max(self.min_buffer, scaled))

    def _rebuild(self) -> None:
        self._tree_size = self._store.size
        self._tree = cKDTree(self._store.points[: self._tree_size].copy())
        self.rebuilds += 1

    def insert(self, point: np.ndarray, ident: int) -> None:
        self._store.append(np.asarray(point, dtype=np.float64), ident)
        if self._store.size - self._tree_size > self._buffer_limit():
            self._rebuild()

    def nearest(self, point: np.ndarray) -> int:
        if self._store.size == 0:
            raise EmptyClusterError()
        query = np.asarray(point, dtype=np.float64)

        best_row = -1
        best_d2 = np.inf
        if self._tree is not None:
            dist, row = self._tree.query(query)
            best_row, best_d2 = int(row), float(dist) * float(dist)

        row, d2 = nearest_in_range(self._store.points, self._tree_size, self._store.size, query)
        # ties go to the older point
        if row >= 0 and d2 < best_d2:
            best_row = row

        return int(self._store.ids[best_row])

    def iterate(self) -> Iterator[Tuple[np.ndarray, int]]:
        return self._store.iterate()

    def __len__(self) -> int:
        return self._store.size


__all__ = [
    "SpatialIndex",
    "KDTreeIndex",
    "BruteForceIndex",
    "nearest_in_range",
]
