"""
Seed layouts for bootstrapping a cluster before growth.

Seeds go through ``AggregationEngine.add`` and so skip every walk check;
any number of them, anywhere, is allowed.
"""

from __future__ import annotations

import math

import numpy as np

from .engine import AggregationEngine


def seed_origin(engine: AggregationEngine) -> None:
    """Single seed at the origin."""
    engine.add(np.zeros(engine.dim), 0)


def seed_pair(engine: AggregationEngine, separation: float = 60.0) -> None:
    """Two seeds on the x axis at +/- ``separation``; two clusters that grow toward each other."""
    for label, sign in enumerate((1.0, -1.0)):
        p = np.zeros(engine.dim)
        p[0] = sign * separation
        engine.add(p, label)


def seed_circle(engine: AggregationEngine, radius: float = 50.0, count: int = 100) -> None:
    """``count`` seeds evenly spaced on a circle in the xy-plane."""
    for i in range(count):
        angle = 2.0 * math.pi * i / count
        p = np.zeros(engine.dim)
        p[0] = radius * math.cos(angle)
        p[1] = radius * math.sin(angle)
        engine.add(p, i)


SEED_LAYOUTS = {
    "origin": seed_origin,
    "pair": seed_pair,
    "circle": seed_circle,
}


def apply_layout(engine: AggregationEngine, layout: str, **kwargs) -> None:
    try:
        seeder = SEED_LAYOUTS[layout]
    except KeyError:
        raise ValueError(
            f"Unknown seed layout: {layout!r} (choose from {sorted(SEED_LAYOUTS)})"
        ) from None
    seeder(engine, **kwargs)


__all__ = ["seed_origin", "seed_pair", "seed_circle", "SEED_LAYOUTS", "apply_layout"]
