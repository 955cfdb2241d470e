#!/usr/bin/env python3
"""
Fractal analysis of a saved DLA cloud.

Reports the scaling (growth history) and sandbox (mass-radius) estimates of
the fractal dimension and optionally plots both fits.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
from matplotlib import pyplot as plt

# Add src/ to path
SRC = Path(__file__).resolve().parents[1]
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from dla_cloud import analysis, export


def analyse_cloud(path: str | Path, output_path: str | Path | None = None) -> dict:
    """
    Compute both dimension estimates for the cloud stored at ``path``.
    """
    path = Path(path)
    print(f"Loading {path}...")
    result = export.load_result(path)
    pos = result.positions
    if pos is not None and pos.shape[1] == 3 and not np.any(pos[:, 2]):
        # flat clouds exported as CSV carry a zero z column
        pos = pos[:, :2]
    pos = analysis.validate_positions(pos)

    d_scaling, r2_scaling = analysis.scaling_dimension(pos)
    d_sandbox, r2_sandbox = analysis.sandbox_dimension(pos)
    summary = {
        "points": int(len(pos)),
        "dim": int(pos.shape[1]),
        "radius_of_gyration": analysis.radius_of_gyration(pos),
        "scaling_dimension": float(d_scaling),
        "scaling_r2": float(r2_scaling),
        "sandbox_dimension": float(d_sandbox),
        "sandbox_r2": float(r2_sandbox),
    }

    print(f"  Points: {summary['points']} ({summary['dim']}-D)")
    print(f"  R_g: {summary['radius_of_gyration']:.2f}")
    print(f"  D (scaling): {d_scaling:.3f}  (r^2={r2_scaling:.4f})")
    print(f"  D (sandbox): {d_sandbox:.3f}  (r^2={r2_sandbox:.4f})")

    if output_path is not None:
        rg = analysis.running_radius_of_gyration(pos)
        ns = np.arange(1, len(pos) + 1)
        fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(10, 4))
        ax1.loglog(ns[1:], rg[1:], lw=1)
        ax1.set_xlabel("n")
        ax1.set_ylabel("R_g(n)")
        ax1.set_title(f"Scaling: D={d_scaling:.3f}")

        distances = np.sort(np.linalg.norm(pos - pos[0], axis=1))
        ax2.loglog(distances[1:], np.arange(2, len(distances) + 1), lw=1)
        ax2.set_xlabel("R")
        ax2.set_ylabel("M(<R)")
        ax2.set_title(f"Sandbox: D={d_sandbox:.3f}")

        fig.tight_layout()
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output_path, dpi=150)
        plt.close(fig)
        print(f"Saved analysis plot to {output_path}")

    return summary


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Fractal analysis of a DLA cloud")
    parser.add_argument("file", help="Path to a .csv or .npz cloud")
    parser.add_argument("--out", default=None, help="Optional path for the analysis plot")
    args = parser.parse_args(argv)
    analyse_cloud(args.file, args.out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
