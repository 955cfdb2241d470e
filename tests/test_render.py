import numpy as np
import pytest

from dla_cloud import AggregationEngine, utils
from dla_cloud.render import paint_discs, rasterize, render, shade_values


def test_rasterize_paints_discs_newest_on_top():
    pts = np.array([[0.0, 0.0], [0.5, 0.0], [10.0, 0.0]])
    grid = rasterize(pts, res=64, radius=0.5)
    assert grid.shape == (64, 64)
    painted = grid[~np.isnan(grid)]
    assert painted.size > 0
    assert painted.max() == pytest.approx(1.0)
    # the overlapping first point is partly hidden by the second
    assert painted.min() == pytest.approx(0.0)
    assert np.sum(painted == 0.5) > np.sum(painted == 0.0)


def test_rasterize_single_pixel_mode():
    rng = np.random.default_rng(0)
    pts = rng.uniform(-500, 500, size=(300, 3))
    grid = rasterize(pts, res=128, radius=0.5)
    assert 0 < np.sum(~np.isnan(grid)) <= 300


def test_disc_coverage_grows_smoothly_with_radius():
    cols = np.array([10.3])
    rows = np.array([7.9])
    shades = np.array([1.0])
    counts = []
    for radius_px in np.linspace(0.05, 3.0, 60):
        grid = np.full((32, 32), np.nan)
        paint_discs(cols, rows, shades, grid, radius_px)
        # the pixel holding the point is painted at every size
        assert grid[7, 10] == 1.0
        counts.append(int(np.sum(~np.isnan(grid))))
    assert counts[0] == 1
    assert all(a <= b for a, b in zip(counts, counts[1:]))
    assert counts[-1] > 20


def test_disc_painter_clips_at_grid_edges():
    grid = np.full((8, 8), np.nan)
    paint_discs(np.array([0.2, 7.9, 40.0]), np.array([0.2, 7.9, 3.0]),
                np.array([0.3, 0.6, 0.9]), grid, 2.0)
    assert grid[0, 0] == 0.3
    assert grid[7, 7] == 0.6
    assert not np.any(grid == 0.9)


def test_rasterize_empty():
    grid = rasterize(np.zeros((0, 2)), res=16)
    assert np.all(np.isnan(grid))


def test_shade_values():
    pts = np.array([[0.0, 0.0, -1.0], [0.0, 0.0, 1.0], [0.0, 0.0, 0.0]])
    assert shade_values(pts, "age").tolist() == [0.0, 0.5, 1.0]
    assert shade_values(pts, "depth").tolist() == [0.0, 1.0, 0.5]
    assert shade_values(np.zeros((2, 3)), "depth").tolist() == [1.0, 1.0]
    with pytest.raises(ValueError):
        shade_values(pts, "hue")


def test_render_engine_to_png(tmp_path):
    engine = AggregationEngine(dim=3, random_source=0)
    engine.add([0.0, 0.0, 0.0], 0)
    engine.grow(30)
    out = tmp_path / "img" / "cloud.png"
    grid = render(engine, output=str(out), shade="depth", res=128, dpi=50, title="t")
    assert out.exists()
    assert grid.shape == (128, 128)


def test_render_cluster_result_without_positions():
    with pytest.raises(ValueError):
        render(utils.ClusterResult())
