import numpy as np
import pytest

from dsfdr import OLSOracle


class RecordingOracle:
    """Least squares that remembers the responses of every half it fits."""

    def __init__(self):
        self.seen = []
        self._ols = OLSOracle()

    def __call__(self, X, y):
        self.seen.append(np.array(y, copy=True))
        return self._ols(X, y)


class MarkedRowsOracle:
    """Least squares that fails on any half containing every marked row."""

    def __init__(self, marked_rows):
        self.marked_rows = np.asarray(marked_rows)
        self._ols = OLSOracle()

    def __call__(self, X, y, random_state=None):
        present = [np.any(np.all(X == row, axis=1)) for row in self.marked_rows]
        if all(present):
            raise RuntimeError("marked rows landed in the same half")
        return self._ols(X, y)


@pytest.fixture
def low_dim_problem():
    """n=400, p=30 regression with 10 strong signals."""
    rng = np.random.default_rng(2024)
    n, p = 400, 30
    X = rng.standard_normal((n, p))
    signal_index = np.arange(0, 30, 3)
    beta = np.zeros(p)
    beta[signal_index] = 1.0
    y = X @ beta + rng.standard_normal(n)
    return {'X': X, 'y': y, 'signal_index': signal_index}


@pytest.fixture
def noise_problem():
    rng = np.random.default_rng(7)
    X = rng.standard_normal((200, 20))
    y = rng.standard_normal(200)
    return {'X': X, 'y': y}


@pytest.fixture
def ols():
    return OLSOracle()


@pytest.fixture
def recording_oracle():
    return RecordingOracle()


@pytest.fixture
def marked_rows_oracle(low_dim_problem):
    return MarkedRowsOracle(low_dim_problem['X'][:2])
