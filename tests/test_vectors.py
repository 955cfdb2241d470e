import numpy as np
import pytest

from dla_cloud import vectors


def test_check_dim():
    assert vectors.check_dim(2) == 2
    assert vectors.check_dim(3) == 3
    for bad in (1, 4, 0):
        with pytest.raises(ValueError):
            vectors.check_dim(bad)


def test_as_vector_copies_and_checks_length():
    src = [1, 2]
    v = vectors.as_vector(src, 2)
    assert v.dtype == np.float64
    assert v.tolist() == [1.0, 2.0]
    with pytest.raises(ValueError):
        vectors.as_vector([1.0, 2.0, 3.0], 2)


def test_length_and_distance():
    assert vectors.length(np.array([3.0, 4.0])) == pytest.approx(5.0)
    assert vectors.distance(np.array([1.0, 1.0, 1.0]), np.array([1.0, 1.0, 3.0])) == pytest.approx(2.0)


def test_normalized():
    n = vectors.normalized(np.array([0.0, 0.0, 2.0]))
    assert n.tolist() == [0.0, 0.0, 1.0]
    zero = np.zeros(2)
    assert vectors.normalized(zero).tolist() == [0.0, 0.0]


def test_lerp_moves_absolute_distance():
    a = np.array([1.0, 1.0])
    b = np.array([4.0, 5.0])
    p = vectors.lerp(a, b, 2.0)
    assert vectors.distance(a, p) == pytest.approx(2.0)
    # beyond the target
    q = vectors.lerp(a, b, 10.0)
    assert vectors.distance(a, q) == pytest.approx(10.0)
    assert np.allclose((q - a) / 10.0, (b - a) / 5.0)


@pytest.mark.parametrize("dim", [2, 3])
def test_random_samples(dim):
    rng = np.random.default_rng(7)
    for _ in range(200):
        p = vectors.random_in_unit_sphere(rng, dim)
        assert p.shape == (dim,)
        assert np.dot(p, p) < 1.0
        d = vectors.random_direction(rng, dim)
        assert vectors.length(d) == pytest.approx(1.0, abs=1e-12)


def test_random_direction_is_isotropic():
    rng = np.random.default_rng(3)
    dirs = np.array([vectors.random_direction(rng, 3) for _ in range(4000)])
    # mean of uniform directions tends to zero
    assert np.all(np.abs(dirs.mean(axis=0)) < 0.05)
