# src/dla_cloud/render.py
"""
Raster rendering of point clouds.

Points are projected orthographically onto the xy-plane and painted as discs
by a numba kernel. Each point carries a shade value in [0, 1] (growth order
or height); where discs overlap the larger value wins, so newer or higher
points are drawn on top.
"""
from __future__ import annotations

import os

import matplotlib.colors as mcolors
import matplotlib.pyplot as plt
import numpy as np
from numba import njit, prange

from . import utils
from .engine import AggregationEngine
from .export import to_points3d

SHADES = ("age", "depth")


@njit(cache=True)
def _paint(grid, row, col, value):
    current = grid[row, col]
    if np.isnan(current) or value > current:
        grid[row, col] = value


@njit(parallel=True, cache=True)
def paint_discs(cols, rows, shades, grid, radius_px):
    """
    Paint one disc per point onto ``grid`` in place.

    Args:
        cols, rows: Point centres in pixel units
        shades: Per-point value in [0, 1]; larger values overwrite smaller
        grid: (H, W) float array initialised to NaN
        radius_px: Disc radius in pixels

    A pixel is covered when its centre lies within ``radius_px`` of the point.
    The pixel holding the point is always covered, so a disc smaller than a
    pixel still shows up as a single dot.
    """
    H, W = grid.shape
    reach = int(np.ceil(radius_px))
    r_sq = radius_px * radius_px

    for i in prange(len(cols)):
        c0 = int(np.floor(cols[i]))
        r0 = int(np.floor(rows[i]))
        for row in range(max(0, r0 - reach), min(H, r0 + reach + 1)):
            dy = row + 0.5 - rows[i]
            for col in range(max(0, c0 - reach), min(W, c0 + reach + 1)):
                dx = col + 0.5 - cols[i]
                if (row == r0 and col == c0) or dx * dx + dy * dy <= r_sq:
                    _paint(grid, row, col, shades[i])


def _points_from(source) -> np.ndarray:
    if isinstance(source, AggregationEngine):
        return to_points3d(source.positions)
    if isinstance(source, utils.ClusterResult):
        if source.positions is None:
            raise ValueError("ClusterResult has no positions to render")
        return to_points3d(source.positions)
    return to_points3d(source)


def shade_values(points: np.ndarray, shade: str = "age") -> np.ndarray:
    """Per-point shade in [0, 1]: growth order for "age", normalised z for "depth"."""
    n = points.shape[0]
    if shade == "age":
        return np.linspace(0.0, 1.0, n, dtype=np.float64)
    if shade == "depth":
        z = points[:, 2]
        span = float(z.max() - z.min()) if n else 0.0
        if span == 0.0:
            return np.ones(n, dtype=np.float64)
        return (z - z.min()) / span
    raise ValueError(f"Unknown shade {shade!r} (choose from {SHADES})")


def rasterize(points: np.ndarray, res: int = 1024, radius: float = 0.5, shade: str = "age") -> np.ndarray:
    """
    Project ``points`` onto a square (res, res) grid of shade values; empty
    pixels are NaN.
    """
    points = to_points3d(points)
    finite = np.isfinite(points).all(axis=1)
    points = points[finite]
    grid = np.full((res, res), np.nan, dtype=np.float64)
    if points.shape[0] == 0:
        return grid

    x = np.ascontiguousarray(points[:, 0])
    y = np.ascontiguousarray(points[:, 1])
    shades = shade_values(points, shade)

    x_min, x_max = x.min() - radius, x.max() + radius
    y_min, y_max = y.min() - radius, y.max() + radius
    max_dim = max(x_max - x_min, y_max - y_min)

    # fit to width with 5% padding, centred
    padding_factor = 1.05
    scale = res / (max_dim * padding_factor)
    pad_x = (x_min + x_max) / 2.0 - (max_dim * padding_factor) / 2.0
    pad_y = (y_min + y_max) / 2.0 - (max_dim * padding_factor) / 2.0

    cols = (x - pad_x) * scale
    rows = (y - pad_y) * scale
    paint_discs(cols, rows, shades, grid, radius * scale)
    return grid


def render(
    source,
    output: str | None = None,
    title: str | None = None,
    cmap: str = "magma",
    shade: str = "age",
    res: int = 1024,
    radius: float = 0.5,
    dpi: int = 300,
    verbose: bool = False,
) -> np.ndarray:
    """
    Render an engine, ClusterResult or (N, 2|3) array and optionally save it.

    Returns the rasterised grid.
    """
    points = _points_from(source)
    res = max(64, min(int(res), 16384))
    grid = rasterize(points, res=res, radius=radius, shade=shade)

    if verbose:
        occupied = int(np.sum(~np.isnan(grid)))
        print(f"Rasterized {points.shape[0]:,} particles onto {res}x{res} grid "
              f"({100.0 * occupied / grid.size:.2f}% fill)")

    fig, ax = plt.subplots(figsize=(6, 6))
    bg_color = "white"
    fig.patch.set_facecolor(bg_color)
    ax.set_facecolor(bg_color)

    if cmap.lower() == "black":
        colormap = mcolors.ListedColormap(["black"])
    else:
        colormap = cmap
    ax.imshow(grid, interpolation="nearest", origin="lower", cmap=colormap, vmin=0.0, vmax=1.0)
    ax.set_aspect("equal")
    ax.axis("off")
    if title:
        ax.set_title(title, pad=10)

    if output:
        os.makedirs(os.path.dirname(output) or ".", exist_ok=True)
        fig.savefig(output, dpi=dpi, bbox_inches="tight", pad_inches=0.1, facecolor=bg_color)
        if verbose:
            print(f"Saved figure to {output}")

    plt.close(fig)
    return grid


__all__ = ["render", "rasterize", "shade_values", "paint_discs", "SHADES"]
