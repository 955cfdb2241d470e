import numpy as np
import pytest

from dla_cloud.random_source import NumpyRandomSource, RandomSource


class ScriptedSource(RandomSource):
    """
    Replays scripted directions and probabilities in order, then keeps
    returning the last entry. An empty script falls back to a seeded numpy
    source.
    """

    def __init__(self, directions=(), probabilities=(), seed=0):
        self._directions = [np.array(d, dtype=np.float64) for d in directions]
        self._probabilities = [float(p) for p in probabilities]
        self._fallback = NumpyRandomSource(seed)
        self.direction_calls = 0
        self.probability_calls = 0

    @staticmethod
    def _pick(script, calls):
        return script[min(calls, len(script) - 1)]

    def direction(self, dim):
        self.direction_calls += 1
        if not self._directions:
            return self._fallback.direction(dim)
        return self._pick(self._directions, self.direction_calls - 1).copy()

    def probability(self):
        self.probability_calls += 1
        if not self._probabilities:
            return self._fallback.probability()
        return self._pick(self._probabilities, self.probability_calls - 1)


@pytest.fixture
def scripted():
    return ScriptedSource
