import numpy as np
import pytest

from dla_cloud import analysis, run_model


def _line(n):
    pos = np.zeros((n, 2))
    pos[:, 0] = np.arange(n)
    return pos


def test_radius_of_gyration():
    pos = np.array([[1.0, 0.0], [-1.0, 0.0], [0.0, 1.0], [0.0, -1.0]])
    assert analysis.radius_of_gyration(pos) == pytest.approx(1.0)


def test_running_radius_matches_direct():
    rng = np.random.default_rng(1)
    pos = rng.normal(size=(50, 3))
    running = analysis.running_radius_of_gyration(pos)
    assert running[0] == pytest.approx(0.0, abs=1e-6)
    for n in (2, 10, 50):
        assert running[n - 1] == pytest.approx(analysis.radius_of_gyration(pos[:n]))


def test_validate_positions():
    with pytest.raises(ValueError):
        analysis.validate_positions(None)
    with pytest.raises(ValueError):
        analysis.validate_positions(np.zeros((200, 4)))
    with pytest.raises(ValueError):
        analysis.validate_positions(_line(50))
    pos = _line(120)
    pos[3] = np.nan
    assert len(analysis.validate_positions(pos)) == 119


def test_scaling_dimension_of_a_line():
    d, r2 = analysis.scaling_dimension(_line(500))
    assert d == pytest.approx(1.0, abs=0.05)
    assert r2 > 0.99


def test_sandbox_dimension_of_a_line():
    pos = np.zeros((501, 2))
    pos[1:, 0] = np.concatenate([np.arange(1, 251), -np.arange(1, 251)])
    d, r2 = analysis.sandbox_dimension(pos)
    assert d == pytest.approx(1.0, abs=0.1)
    assert r2 > 0.95


def test_grown_cloud_is_fractal():
    result = run_model({"num_particles": 400, "dim": 2, "seed": 21})
    d, _ = analysis.scaling_dimension(result.positions)
    # sparse flat DLA sits well between a line and a filled disc
    assert 1.1 < d < 2.5
