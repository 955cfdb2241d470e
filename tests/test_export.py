import numpy as np
import pytest

from dla_cloud import AggregationEngine, utils
from dla_cloud.export import (
    CSV_HEADER,
    export_rows,
    load_csv,
    load_result,
    save,
    save_csv,
    to_cluster_result,
    to_points3d,
)


def _assert_rows_match(expected, actual, tol=0.5e-4 + 1e-12):
    assert len(expected) == len(actual)
    for e, a in zip(expected, actual):
        assert e[:2] == a[:2]
        assert np.allclose(e[2:], a[2:], atol=tol, rtol=0.0)


def _grown(dim=2, n=10, seed=0):
    engine = AggregationEngine(dim=dim, random_source=seed)
    engine.add(np.zeros(dim), 0)
    engine.grow(n)
    return engine


def test_flat_rows_have_zero_z():
    engine = _grown(n=5)
    rows = export_rows(engine)
    assert len(rows) == 6
    assert all(r[4] == 0.0 for r in rows)
    assert rows[0] == (0, 0, 0.0, 0.0, 0.0)


def test_to_points3d():
    pts = to_points3d(np.array([[1.0, 2.0]]))
    assert pts.tolist() == [[1.0, 2.0, 0.0]]
    with pytest.raises(ValueError):
        to_points3d(np.zeros((3, 4)))


def test_csv_format(tmp_path):
    engine = AggregationEngine()
    engine.add([0.0, 0.0], 0)
    engine.add([1.0, -0.123456], 0)
    path = tmp_path / "out.csv"
    save_csv(path, engine)
    lines = path.read_text().splitlines()
    assert lines[0] == CSV_HEADER
    assert lines[1] == "0,0,0.0000,0.0000,0.0000"
    assert lines[2] == "1,0,1.0000,-0.1235,0.0000"


@pytest.mark.parametrize("n", [2, 100, 10_000])
def test_csv_round_trip(tmp_path, n):
    rng = np.random.default_rng(n)
    engine = AggregationEngine(dim=3)
    positions = rng.normal(scale=50.0, size=(n, 3))
    for i, p in enumerate(positions):
        engine.add(p, int(rng.integers(0, i + 1)))

    path = tmp_path / f"cloud_{n}.csv"
    save_csv(path, engine)
    _assert_rows_match(export_rows(engine), load_csv(path))


def test_csv_round_trip_grown_cloud(tmp_path):
    engine = _grown(dim=2, n=100, seed=4)
    path = tmp_path / "grown.csv"
    save_csv(path, export_rows(engine))
    _assert_rows_match(export_rows(engine), load_csv(path))


def test_empty_csv(tmp_path):
    path = tmp_path / "empty.csv"
    save_csv(path, AggregationEngine())
    assert path.read_text().strip() == CSV_HEADER
    assert load_csv(path) == []


def test_load_csv_rejects_other_files(tmp_path):
    path = tmp_path / "other.csv"
    path.write_text("a,b\n1,2\n")
    with pytest.raises(ValueError):
        load_csv(path)


def test_save_by_suffix(tmp_path):
    engine = _grown(dim=3, n=8)
    save(tmp_path / "c.csv", engine)
    save(tmp_path / "c.npz", engine, meta={"seed": 0})
    with pytest.raises(ValueError):
        save(tmp_path / "c.txt", engine)

    from_csv = load_result(tmp_path / "c.csv")
    from_npz = load_result(tmp_path / "c.npz")
    assert np.allclose(from_csv.positions, engine.positions, atol=1e-4)
    assert np.array_equal(from_npz.positions, engine.positions)
    assert from_npz.parents.tolist() == engine.parents.tolist()
    assert from_npz.meta["seed"] == 0
    assert from_npz.meta["dim"] == 3
    with pytest.raises(ValueError):
        load_result(tmp_path / "c.txt")


def test_to_cluster_result():
    engine = _grown(n=3)
    result = to_cluster_result(engine, meta={"layout": "origin"})
    assert isinstance(result, utils.ClusterResult)
    assert result.num_points == 4
    assert result.meta["layout"] == "origin"
    assert result.meta["num"] == 4
    # a copy, not the engine's storage
    result.positions[0, 0] = 99.0
    assert engine.positions[0, 0] == 0.0
