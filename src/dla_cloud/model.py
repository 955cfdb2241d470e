from __future__ import annotations

import time
from dataclasses import dataclass, fields

from . import utils
from .engine import AggregationEngine, AggregationParams
from .export import to_cluster_result
from .seeds import apply_layout


@dataclass
class RunParams:
    """Configuration for a complete growth run."""

    num_particles: int = 1000
    dim: int = 2
    seed: int | None = None
    layout: str = "origin"
    particle_spacing: float = 1.0
    attraction_distance: float = 3.0
    min_move_distance: float = 1.0
    stubbornness: int = 0
    stickiness: float = 1.0
    verbose: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "RunParams":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown run parameters: {', '.join(unknown)}")
        return cls(**data)

    def aggregation_params(self) -> AggregationParams:
        return AggregationParams(
            particle_spacing=float(self.particle_spacing),
            attraction_distance=float(self.attraction_distance),
            min_move_distance=float(self.min_move_distance),
            stubbornness=int(self.stubbornness),
            stickiness=float(self.stickiness),
        )


def build_engine(params: RunParams) -> AggregationEngine:
    """Seeded engine ready for growth."""
    engine = AggregationEngine(
        dim=params.dim,
        params=params.aggregation_params(),
        random_source=params.seed,
        verbose=params.verbose,
    )
    apply_layout(engine, params.layout)
    return engine


def run_model(params: RunParams | dict | None = None) -> utils.ClusterResult:
    """
    Seed and grow a cloud, returning a ClusterResult with parents and metadata.
    """
    if params is None:
        params = RunParams()
    elif isinstance(params, dict):
        params = RunParams.from_dict(params)

    t_start = time.perf_counter()
    engine = build_engine(params)
    engine.grow(int(params.num_particles))
    elapsed = time.perf_counter() - t_start

    return to_cluster_result(
        engine,
        meta={
            "model": "dla_cloud",
            "layout": params.layout,
            "seed": params.seed,
            "grown": int(params.num_particles),
            "time_elapsed": elapsed,
        },
    )


__all__ = ["RunParams", "build_engine", "run_model"]
