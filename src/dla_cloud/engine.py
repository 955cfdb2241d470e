"""
Diffusion-limited aggregation engine producing ordered point clouds.

A walker is released on the cluster's bounding sphere and random walks until
it comes within the attraction distance of its nearest anchored point. The
contact is then accepted or rejected in two gates:

- stubbornness: the parent must have been contacted at least this many times
  (counted over all walkers, not just the current one);
- stickiness: probability of accepting once stubbornness is satisfied.

A rejected walker is pushed back just outside capture range and keeps
walking. An accepted walker is snapped to ``particle_spacing`` from its parent
and becomes a new anchored point. Steps are as long as the gap to the
cluster allows, never shorter than ``min_move_distance``, and a walker
straying past twice the bounding radius is respawned on the bounding sphere.
"""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass, replace

import numpy as np

from . import vectors
from .cluster import Cluster
from .errors import EmptyClusterError
from .random_source import RandomSource, make_random_source
from .spatial_index import SpatialIndex

###############################################################################
# Constants
###############################################################################

DEFAULT_PARTICLE_SPACING = 1.0
DEFAULT_ATTRACTION_DISTANCE = 3.0
DEFAULT_MIN_MOVE_DISTANCE = 1.0
DEFAULT_STUBBORNNESS = 0
DEFAULT_STICKINESS = 1.0

# walkers further than this multiple of the bounding radius are respawned
RESET_RADIUS_FACTOR = 2.0


@dataclass
class AggregationParams:
    """
    Growth knobs. None of them are range checked: stickiness <= 0 never joins,
    stickiness >= 1 always joins once stubbornness is met, and non-positive
    distances give degenerate walks.
    """

    particle_spacing: float = DEFAULT_PARTICLE_SPACING
    attraction_distance: float = DEFAULT_ATTRACTION_DISTANCE
    min_move_distance: float = DEFAULT_MIN_MOVE_DISTANCE
    stubbornness: int = DEFAULT_STUBBORNNESS
    stickiness: float = DEFAULT_STICKINESS


@dataclass
class GrowthStats:
    """Bookkeeping for one or more add_particle calls."""

    steps: int = 0
    contacts: int = 0
    rejections: int = 0
    resets: int = 0

    def __iadd__(self, other: "GrowthStats") -> "GrowthStats":
        self.steps += other.steps
        self.contacts += other.contacts
        self.rejections += other.rejections
        self.resets += other.resets
        return self


class AggregationEngine:
    """
    Dimension-generic DLA growth engine.

    Args:
        dim: 2 for a flat cloud, 3 for a volumetric one.
        params: Initial growth knobs; defaults when None.
        random_source: A RandomSource, an integer seed, or None for fresh
            entropy.
        index: Empty SpatialIndex to mirror the cluster; a KDTreeIndex when
            None.
        verbose: Print progress from grow().
    """

    def __init__(
        self,
        dim: int = 2,
        params: AggregationParams | dict | None = None,
        random_source: RandomSource | int | None = None,
        index: SpatialIndex | None = None,
        verbose: bool = False,
    ) -> None:
        if params is None:
            params = AggregationParams()
        elif isinstance(params, dict):
            params = AggregationParams(**params)
        # own copy; setters must not leak into a caller-held params object
        self._params = replace(params)
        self.random = make_random_source(random_source)
        self.cluster = Cluster(dim, index=index)
        self.verbose = verbose
        self.last_stats = GrowthStats()
        self.total_stats = GrowthStats()

    @classmethod
    def flat(cls, **kwargs) -> "AggregationEngine":
        return cls(dim=2, **kwargs)

    @classmethod
    def convex(cls, **kwargs) -> "AggregationEngine":
        return cls(dim=3, **kwargs)

    # ------------------------------------------------------------------
    # configuration
    # ------------------------------------------------------------------

    @property
    def params(self) -> AggregationParams:
        return self._params

    def set_particle_spacing(self, value: float) -> None:
        self._params.particle_spacing = value

    def set_attraction_distance(self, value: float) -> None:
        self._params.attraction_distance = value

    def set_min_move_distance(self, value: float) -> None:
        self._params.min_move_distance = value

    def set_stubbornness(self, value: int) -> None:
        self._params.stubbornness = value

    def set_stickiness(self, value: float) -> None:
        self._params.stickiness = value

    # ------------------------------------------------------------------
    # state accessors
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.cluster)

    @property
    def dim(self) -> int:
        return self.cluster.dim

    @property
    def bounding_radius(self) -> float:
        return self.cluster.bounding_radius

    @property
    def positions(self) -> np.ndarray:
        """Read-only (N, dim) view of the anchored points in id order."""
        return self.cluster.positions

    @property
    def parents(self) -> np.ndarray:
        return self.cluster.parents

    @property
    def join_attempts(self) -> np.ndarray:
        return self.cluster.join_attempts

    # ------------------------------------------------------------------
    # walk primitives
    # ------------------------------------------------------------------

    def random_starting_position(self) -> np.ndarray:
        return self.random.direction(self.dim) * self.cluster.bounding_radius

    def should_reset(self, p: np.ndarray) -> bool:
        return vectors.length(p) > self.cluster.bounding_radius * RESET_RADIUS_FACTOR

    def should_join(self, parent: int) -> bool:
        attempts = self.cluster.record_attempt(parent)
        if attempts < self._params.stubbornness:
            return False
        return self.random.probability() <= self._params.stickiness

    def _toward(self, parent: int, p: np.ndarray, d: float) -> np.ndarray:
        origin = self.cluster.position(parent)
        if np.array_equal(origin, p):
            # a walker sitting on its parent has no direction to move along
            return origin + self.random.direction(self.dim) * d
        return vectors.lerp(origin, p, d)

    def place_particle(self, p: np.ndarray, parent: int) -> np.ndarray:
        return self._toward(parent, p, self._params.particle_spacing)

    def motion_vector(self) -> np.ndarray:
        return self.random.direction(self.dim)

    # ------------------------------------------------------------------
    # operations
    # ------------------------------------------------------------------

    def add(self, position, parent: int) -> int:
        """
        Anchor ``position`` without any walk or acceptance checks.

        This is how clusters are seeded. ``parent`` is only kept as export
        metadata. Returns the new point id.
        """
        p = vectors.as_vector(position, self.dim)
        return self.cluster.append(p, int(parent), self._params.attraction_distance)

    def nearest(self, position) -> int:
        """Id of the anchored point nearest to ``position``; raises EmptyClusterError when empty."""
        return self.cluster.nearest(vectors.as_vector(position, self.dim))

    def add_particle(self) -> int:
        """
        Walk one particle until it joins the cluster and return its id.

        There is no step limit: the call returns only once a join happens.
        """
        # fail before touching the random source
        if len(self.cluster) == 0:
            raise EmptyClusterError()

        params = self._params
        stats = GrowthStats()
        p = self.random_starting_position()

        try:
            while True:
                parent = self.cluster.nearest(p)
                d = vectors.distance(p, self.cluster.position(parent))

                if d < params.attraction_distance:
                    stats.contacts += 1
                    if not self.should_join(parent):
                        # push particle just outside capture range
                        stats.rejections += 1
                        p = self._toward(
                            parent, p, params.attraction_distance + params.min_move_distance
                        )
                        continue

                    p = self.place_particle(p, parent)
                    return self.add(p, parent)

                m = max(params.min_move_distance, d - params.attraction_distance)
                p = p + self.motion_vector() * m
                stats.steps += 1

                if self.should_reset(p):
                    stats.resets += 1
                    p = self.random_starting_position()
        finally:
            self.last_stats = stats
            self.total_stats += stats

    def grow(self, num_particles: int) -> None:
        """Add ``num_particles`` particles, reporting progress when verbose."""
        t_start = time.perf_counter()
        report_every = max(1, num_particles // 10)
        for i in range(1, num_particles + 1):
            self.add_particle()
            if self.verbose and i % report_every == 0:
                elapsed = time.perf_counter() - t_start
                rate = i / elapsed if elapsed > 0 else 0.0
                print(f"[dla] {i}/{num_particles} particles, "
                      f"{rate:.0f} particles/s, R={self.bounding_radius:.1f}")

        if self.verbose:
            elapsed = time.perf_counter() - t_start
            rate = num_particles / elapsed if elapsed > 0 else 0.0
            print(f"Growth completed: {num_particles} particles in {elapsed:.2f}s "
                  f"({rate:.0f} particles/s), {self.total_stats.rejections} rejections")

    def describe(self) -> dict:
        """Parameters and counters suitable for result metadata."""
        meta = {"dim": self.dim, "num": len(self), "bounding_radius": self.bounding_radius}
        meta.update(asdict(self._params))
        meta.update({f"total_{k}": v for k, v in asdict(self.total_stats).items()})
        return meta


__all__ = [
    "AggregationParams",
    "AggregationEngine",
    "GrowthStats",
    "DEFAULT_PARTICLE_SPACING",
    "DEFAULT_ATTRACTION_DISTANCE",
    "DEFAULT_MIN_MOVE_DISTANCE",
    "DEFAULT_STUBBORNNESS",
    "DEFAULT_STICKINESS",
]
