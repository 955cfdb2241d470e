"""
Fractal analysis of grown clouds.

Two estimates of the fractal dimension D:
1. Scaling relation over the growth history, R_g(n) ~ n^(1/D)
2. Sandbox (mass-radius) relation around a centre, M(<R) ~ R^D
"""
from __future__ import annotations

import numpy as np
from scipy.stats import linregress

MIN_POINTS = 100


def validate_positions(positions) -> np.ndarray:
    """
    Return finite positions as an (N, dim) float array.

    Raises:
        ValueError: If the array has the wrong shape or too few finite rows
    """
    if positions is None:
        raise ValueError("positions is None. Cannot perform analysis.")

    pos = np.asarray(positions, dtype=np.float64)
    if pos.ndim != 2 or pos.shape[1] not in (2, 3):
        raise ValueError(f"Expected positions of shape (N, 2) or (N, 3), got {pos.shape}")

    pos = pos[np.isfinite(pos).all(axis=1)]
    if len(pos) < MIN_POINTS:
        raise ValueError(
            f"Too few valid particles ({len(pos)}) for reliable fractal analysis. "
            f"Need at least {MIN_POINTS} particles."
        )
    return pos


def radius_of_gyration(positions) -> float:
    pos = np.asarray(positions, dtype=np.float64)
    centred = pos - pos.mean(axis=0)
    return float(np.sqrt(np.mean(np.sum(centred**2, axis=1))))


def running_radius_of_gyration(positions) -> np.ndarray:
    """
    R_g of every prefix of ``positions`` (growth order) via cumulative sums.
    """
    pos = np.asarray(positions, dtype=np.float64)
    ns = np.arange(1, len(pos) + 1, dtype=np.float64)[:, None]
    cm = np.cumsum(pos, axis=0) / ns
    mean_sq = np.cumsum(np.sum(pos**2, axis=1)) / ns[:, 0]
    rg_sq = mean_sq - np.sum(cm**2, axis=1)
    # clamp rounding noise
    return np.sqrt(np.maximum(0.0, rg_sq))


def scaling_dimension(positions) -> tuple[float, float]:
    """
    Fractal dimension from the growth history.

    Returns:
        (D, r_squared) of the log-log fit log R_g = (1/D) log n + C
    """
    pos = validate_positions(positions)
    n_particles = len(pos)
    rg = running_radius_of_gyration(pos)
    ns = np.arange(1, n_particles + 1, dtype=np.float64)

    # fit over 1% .. 100% of N
    start_idx = max(1, int(n_particles * 0.01))
    fit_rg = rg[start_idx:]
    fit_ns = ns[start_idx:]
    valid = fit_rg > 0
    fit_rg = fit_rg[valid]
    fit_ns = fit_ns[valid]
    if len(fit_rg) < 10:
        raise ValueError("Too few valid points for scaling analysis after filtering.")

    fit = linregress(np.log(fit_ns), np.log(fit_rg))
    return 1.0 / fit.slope, fit.rvalue**2


def sandbox_dimension(positions, center=None, r_min: float = 2.0) -> tuple[float, float]:
    """
    Fractal dimension from the mass inside growing radii around ``center``
    (the first point when None).

    Returns:
        (D, r_squared) of the log-log fit log M = D log R + C
    """
    pos = validate_positions(positions)
    if center is None:
        center = pos[0]
    distances = np.linalg.norm(pos - np.asarray(center, dtype=np.float64), axis=1)
    max_distance = float(distances.max())
    if max_distance <= r_min:
        raise ValueError(
            f"Maximum particle distance ({max_distance:.2f}) is too small. "
            f"Need at least {r_min} for sandbox analysis."
        )

    n_radii = min(100, max(50, len(pos) // 10))
    radii = np.logspace(np.log10(r_min), np.log10(max_distance), n_radii)
    masses = np.searchsorted(np.sort(distances), radii, side="right")

    valid = masses > 0
    radii = radii[valid]
    masses = masses[valid]
    if len(radii) < 10:
        raise ValueError("Too few valid points for sandbox analysis after filtering.")

    fit = linregress(np.log(radii), np.log(masses))
    return fit.slope, fit.rvalue**2


__all__ = [
    "validate_positions",
    "radius_of_gyration",
    "running_radius_of_gyration",
    "scaling_dimension",
    "sandbox_dimension",
]
