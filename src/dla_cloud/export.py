"""
Tabular export of grown point clouds.

Rows are ``(id, parent, x, y, z)`` in id order; flat clouds get ``z = 0``.
CSV files carry the header ``index,parent,x,y,z`` and coordinates rounded to
``decimals`` digits (4 by default).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List, Tuple

import numpy as np

from . import utils
from .engine import AggregationEngine

Row = Tuple[int, int, float, float, float]

CSV_HEADER = "index,parent,x,y,z"
DEFAULT_DECIMALS = 4


def to_points3d(positions) -> np.ndarray:
    """(N, 3) float array; 2-D positions are padded with z = 0."""
    if isinstance(positions, AggregationEngine):
        positions = positions.positions
    pos = np.asarray(positions, dtype=np.float64)
    if pos.ndim != 2 or pos.shape[1] not in (2, 3):
        raise ValueError(f"Expected positions of shape (N, 2) or (N, 3), got {pos.shape}")
    if pos.shape[1] == 3:
        return pos.copy()
    out = np.zeros((pos.shape[0], 3), dtype=np.float64)
    out[:, :2] = pos
    return out


def export_rows(engine: AggregationEngine) -> List[Row]:
    points = to_points3d(engine.positions)
    parents = engine.parents
    return [
        (i, int(parents[i]), float(x), float(y), float(z))
        for i, (x, y, z) in enumerate(points)
    ]


def to_cluster_result(engine: AggregationEngine, meta: dict | None = None) -> utils.ClusterResult:
    info = engine.describe()
    info.update(meta or {})
    return utils.ClusterResult(
        positions=np.array(engine.positions, dtype=np.float64),
        parents=engine.parents,
        meta=info,
    )


def _rows_from(source) -> np.ndarray:
    if isinstance(source, AggregationEngine):
        points = to_points3d(source.positions)
        parents = source.parents
    elif isinstance(source, utils.ClusterResult):
        points = to_points3d(source.positions)
        if source.parents is None:
            parents = np.arange(points.shape[0], dtype=np.int64)
        else:
            parents = np.asarray(source.parents, dtype=np.int64)
    else:
        rows = list(source)
        table = np.empty((len(rows), 5), dtype=np.float64)
        for i, row in enumerate(rows):
            table[i] = row
        return table

    table = np.empty((points.shape[0], 5), dtype=np.float64)
    table[:, 0] = np.arange(points.shape[0])
    table[:, 1] = parents
    table[:, 2:] = points
    return table


def save_csv(
    path: str | os.PathLike[str],
    source: AggregationEngine | utils.ClusterResult | Iterable[Row],
    decimals: int = DEFAULT_DECIMALS,
) -> None:
    """Write ``source`` as CSV rows; parent directories are created."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    table = _rows_from(source)
    coord_fmt = f"%.{decimals}f"
    np.savetxt(
        path,
        table,
        fmt=["%d", "%d", coord_fmt, coord_fmt, coord_fmt],
        delimiter=",",
        header=CSV_HEADER,
        comments="",
    )


def load_csv(path: str | os.PathLike[str]) -> List[Row]:
    with open(path, "r", encoding="utf-8") as fh:
        header = fh.readline().strip()
        if header != CSV_HEADER:
            raise ValueError(f"{path}: unexpected header {header!r}")
        body = fh.read()
    if not body.strip():
        return []
    table = np.loadtxt(body.splitlines(), delimiter=",", ndmin=2)
    return [
        (int(row[0]), int(row[1]), float(row[2]), float(row[3]), float(row[4]))
        for row in table
    ]


def save(path: str | os.PathLike[str], engine: AggregationEngine, meta: dict | None = None) -> None:
    """Save by suffix: ``.csv`` rows or a ``.npz`` ClusterResult."""
    suffix = Path(path).suffix.lower()
    if suffix == ".csv":
        save_csv(path, engine)
    elif suffix == ".npz":
        utils.save_cluster_result(path, to_cluster_result(engine, meta))
    else:
        raise ValueError(f"Unsupported output format: {suffix}")


def load_result(path: str | os.PathLike[str]) -> utils.ClusterResult:
    """Load a ``.csv`` or ``.npz`` cloud into a ClusterResult."""
    suffix = Path(path).suffix.lower()
    if suffix == ".npz":
        return utils.load_cluster(path)
    if suffix == ".csv":
        rows = load_csv(path)
        table = np.array(rows, dtype=np.float64).reshape(-1, 5)
        return utils.ClusterResult(
            positions=table[:, 2:],
            parents=table[:, 1].astype(np.int64),
            meta={"source": str(path)},
        )
    raise ValueError(f"Unsupported input format: {suffix}")


__all__ = [
    "CSV_HEADER",
    "Row",
    "to_points3d",
    "export_rows",
    "to_cluster_result",
    "save_csv",
    "load_csv",
    "save",
    "load_result",
]
