import numpy as np
import pytest

from dla_cloud.random_source import NumpyRandomSource, RandomSource, make_random_source


def test_seeded_source_is_reproducible():
    a = NumpyRandomSource(123)
    b = NumpyRandomSource(123)
    for _ in range(20):
        assert np.array_equal(a.direction(3), b.direction(3))
        assert a.probability() == b.probability()


def test_draws_are_in_range():
    source = NumpyRandomSource(5)
    for _ in range(500):
        p = source.probability()
        assert 0.0 <= p < 1.0
        d = source.direction(2)
        assert np.linalg.norm(d) == pytest.approx(1.0)


def test_make_random_source():
    source = NumpyRandomSource(1)
    assert make_random_source(source) is source
    assert make_random_source(7).seed == 7
    assert make_random_source(np.int64(7)).seed == 7
    assert isinstance(make_random_source(None), RandomSource)
    with pytest.raises(TypeError):
        make_random_source("seed")
