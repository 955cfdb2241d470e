"""
Vector helpers shared by the 2-D and 3-D engines.

Vectors are plain float64 numpy arrays of length 2 or 3; addition,
subtraction and scaling are the numpy operators. The helpers below add the
few operations the walk needs on top of that.
"""

from __future__ import annotations

import math

import numpy as np

DIMENSIONS = (2, 3)


def check_dim(dim: int) -> int:
    dim = int(dim)
    if dim not in DIMENSIONS:
        raise ValueError(f"dim must be 2 or 3, got {dim}")
    return dim


def as_vector(values, dim: int) -> np.ndarray:
    """Copy ``values`` into a float64 vector of length ``dim``."""
    vec = np.array(values, dtype=np.float64).reshape(-1)
    if vec.shape[0] != dim:
        raise ValueError(f"Expected a vector of length {dim}, got {vec.shape[0]}")
    return vec


def length(v: np.ndarray) -> float:
    return math.sqrt(float(np.dot(v, v)))


def distance(a: np.ndarray, b: np.ndarray) -> float:
    d = a - b
    return math.sqrt(float(np.dot(d, d)))


def normalized(v: np.ndarray) -> np.ndarray:
    """Unit vector along ``v``. A zero vector has no direction and is returned unchanged."""
    n = length(v)
    if n == 0.0:
        return v.copy()
    return v / n


def lerp(a: np.ndarray, b: np.ndarray, d: float) -> np.ndarray:
    """
    Point at distance ``d`` from ``a`` in the direction of ``b``.

    Unlike a fractional interpolation, ``d`` is an absolute distance; this is
    how joining particles are snapped to a fixed spacing from their parent.
    """
    return a + normalized(b - a) * d


def random_in_unit_sphere(rng: np.random.Generator, dim: int) -> np.ndarray:
    """
    Uniform sample from the open unit ball by rejection sampling.
    """
    while True:
        p = rng.uniform(-1.0, 1.0, size=dim)
        if float(np.dot(p, p)) < 1.0:
            return p


def random_direction(rng: np.random.Generator, dim: int) -> np.ndarray:
    """Uniformly distributed unit vector."""
    while True:
        p = random_in_unit_sphere(rng, dim)
        n = length(p)
        # the origin itself has no direction; draw again
        if n > 0.0:
            return p / n


__all__ = [
    "DIMENSIONS",
    "check_dim",
    "as_vector",
    "length",
    "distance",
    "normalized",
    "lerp",
    "random_in_unit_sphere",
    "random_direction",
]
