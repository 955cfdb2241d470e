"""
DLA Cloud - diffusion-limited aggregation point clouds

This package grows fractal clusters by releasing particles on the cluster's
bounding sphere and random walking them until they stick:
- AggregationEngine: dimension-generic (2-D / 3-D) growth engine
- KDTreeIndex / BruteForceIndex: spatial indexes behind nearest-point queries
- run_model: seed, grow and package a cloud from a RunParams
"""

from .engine import AggregationEngine, AggregationParams, GrowthStats
from .errors import EmptyClusterError
from .model import RunParams, build_engine, run_model
from .random_source import NumpyRandomSource, RandomSource
from .spatial_index import BruteForceIndex, KDTreeIndex, SpatialIndex
from . import analysis, export, seeds, utils

__all__ = [
    # Engine
    "AggregationEngine",
    "AggregationParams",
    "GrowthStats",
    "EmptyClusterError",
    # Runs
    "RunParams",
    "build_engine",
    "run_model",
    # Capabilities
    "RandomSource",
    "NumpyRandomSource",
    "SpatialIndex",
    "KDTreeIndex",
    "BruteForceIndex",
    # Modules
    "analysis",
    "export",
    "seeds",
    "utils",
]
