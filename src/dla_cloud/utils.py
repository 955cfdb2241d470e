# src/dla_cloud/utils.py
from __future__ import annotations

import json
import os
import time
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np


@dataclass
class ClusterResult:
    """Common container for grown point clouds."""

    positions: Optional[np.ndarray] = None
    parents: Optional[np.ndarray] = None
    meta: Optional[Dict[str, Any]] = None

    def ensure_meta(self) -> Dict[str, Any]:
        if self.meta is None:
            self.meta = {}
        return self.meta

    @property
    def num_points(self) -> int:
        return 0 if self.positions is None else int(self.positions.shape[0])


def now_str() -> str:
    return time.strftime("%Y%m%d-%H%M%S")


def save_cluster_result(
    path: str | os.PathLike[str], result: ClusterResult, *, overwrite: bool = True
) -> None:
    """Serialize a ClusterResult to a compressed .npz file."""
    if not overwrite and Path(path).exists():
        raise FileExistsError(f"{path} already exists")
    out_dir = Path(path).parent
    out_dir.mkdir(parents=True, exist_ok=True)
    out: Dict[str, Any] = {}
    if result.positions is not None:
        out["positions"] = np.asarray(result.positions, dtype=np.float64)
    if result.parents is not None:
        out["parents"] = np.asarray(result.parents, dtype=np.int64)

    # numpy arrays go to the top level, everything else into the meta dict
    meta = result.meta or {}
    meta_clean = {}
    for key, value in meta.items():
        if isinstance(value, np.ndarray):
            out[key] = value
        else:
            meta_clean[key] = value
    out["meta"] = np.array(meta_clean, dtype=object)

    np.savez_compressed(path, **out)


def load_cluster(path: str | os.PathLike[str]) -> ClusterResult:
    """
    Load a cluster .npz into a ClusterResult.
    """
    with np.load(path, allow_pickle=True) as data:
        positions = data["positions"].astype(np.float64) if "positions" in data else None
        parents = data["parents"].astype(np.int64) if "parents" in data else None
        meta: Dict[str, Any] = {}
        if "meta" in data:
            meta_raw = data["meta"]
            try:
                meta = dict(meta_raw.item())
            except (ValueError, TypeError):
                meta = {}
        for key in data.files:
            if key not in {"positions", "parents", "meta"} and key not in meta:
                meta[key] = data[key]

    return ClusterResult(positions=positions, parents=parents, meta=meta)


def load_params(path: str | os.PathLike[str]) -> Dict[str, Any]:
    """
    Load run parameters from JSON or TOML.
    """
    path = str(path)
    with open(path, "rb") as fh:
        data = fh.read()
    suffix = Path(path).suffix.lower()
    if suffix in {".json", ""}:
        return json.loads(data.decode("utf-8"))
    if suffix in {".toml", ".tml"}:
        return tomllib.loads(data.decode("utf-8"))
    raise ValueError(f"Unsupported parameter file format: {suffix}")
