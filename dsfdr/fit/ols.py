"""Least-squares oracles."""

import warnings
from typing import Optional

import numpy as np
from scipy import linalg

from ..exceptions import FitFailure


def _lstsq(X: np.ndarray, y: np.ndarray, intercept: bool) -> np.ndarray:
    if intercept:
        X = X - X.mean(axis=0)
        y = y - y.mean()
    try:
        coef, _, rank, _ = linalg.lstsq(X, y)
    except (linalg.LinAlgError, ValueError) as e:
        raise FitFailure(f"Least squares failed: {e}") from e
    if rank < X.shape[1]:
        warnings.warn(
            f"Design is rank deficient (rank {rank} < {X.shape[1]} columns); "
            "using the minimum-norm least squares solution"
        )
    return coef


class OLSOracle:
    """
    Ordinary least squares on every column.

    Meant for low-dimensional designs (half size larger than p).

    Parameters
    ----------
    intercept : bool, default=True
        Whether to fit an intercept.
    """

    def __init__(self, intercept: bool = True):
        self.intercept = intercept

    def __call__(
        self,
        X: np.ndarray,
        y: np.ndarray,
        random_state: Optional[int] = None,
    ) -> np.ndarray:
        X = np.asarray(X, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64).ravel()
        return _lstsq(X, y, self.intercept)

    def __repr__(self) -> str:
        return f"OLSOracle(intercept={self.intercept})"


def ols_refit(
    X: np.ndarray,
    y: np.ndarray,
    support: np.ndarray,
    intercept: bool = True,
) -> np.ndarray:
    """
    Least squares restricted to the columns in ``support``.

    Parameters
    ----------
    X : array-like of shape (n, p)
        Design matrix of one half.
    y : array-like of shape (n,)
        Response of the same half.
    support : array-like of int
        Columns to fit; all other coefficients are zero.
    intercept : bool, default=True
        Whether to fit an intercept.

    Returns
    -------
    np.ndarray of shape (p,)
    """
    X = np.asarray(X, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64).ravel()
    support = np.asarray(support, dtype=int)
    beta = np.zeros(X.shape[1])
    if support.size == 0:
        return beta
    if support.size >= X.shape[0] - int(intercept):
        raise FitFailure(
            f"Support of size {support.size} is too large for a least squares "
            f"refit on {X.shape[0]} rows"
        )
    beta[support] = _lstsq(X[:, support], y, intercept)
    return beta
