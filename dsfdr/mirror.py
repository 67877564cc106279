"""Mirror statistics combining the coefficient estimates of two data halves."""

import numpy as np

from .exceptions import InvalidConfiguration


def _check_pair(beta1: np.ndarray, beta2: np.ndarray):
    beta1 = np.asarray(beta1, dtype=np.float64)
    beta2 = np.asarray(beta2, dtype=np.float64)
    if beta1.ndim != 1 or beta2.ndim != 1:
        raise InvalidConfiguration("Coefficient vectors must be one-dimensional")
    if beta1.shape != beta2.shape:
        raise InvalidConfiguration(
            f"Coefficient vectors differ in length: {beta1.shape[0]} vs {beta2.shape[0]}"
        )
    return beta1, beta2


def mirror_sum(beta1: np.ndarray, beta2: np.ndarray, **kwargs) -> np.ndarray:
    """
    Sign-agreement mirror statistic.

    M_j = sign(b1_j * b2_j) * (|b1_j| + |b2_j|)

    Parameters
    ----------
    beta1 : array-like of shape (p,)
        Coefficients fitted on the first half.
    beta2 : array-like of shape (p,)
        Coefficients fitted on the second half.

    Returns
    -------
    np.ndarray of shape (p,)
        Mirror statistics M.
    """
    beta1, beta2 = _check_pair(beta1, beta2)
    return np.sign(beta1 * beta2) * (np.abs(beta1) + np.abs(beta2))


def mirror_min(beta1: np.ndarray, beta2: np.ndarray, **kwargs) -> np.ndarray:
    """
    Signed minimum mirror statistic.

    M_j = 2 * sign(b1_j * b2_j) * min(|b1_j|, |b2_j|)
    """
    beta1, beta2 = _check_pair(beta1, beta2)
    return 2 * np.sign(beta1 * beta2) * np.minimum(np.abs(beta1), np.abs(beta2))


def mirror_product(beta1: np.ndarray, beta2: np.ndarray, **kwargs) -> np.ndarray:
    """Product mirror statistic, M_j = b1_j * b2_j."""
    beta1, beta2 = _check_pair(beta1, beta2)
    return beta1 * beta2


MIRRORS = {
    'sum': mirror_sum,
    'min': mirror_min,
    'product': mirror_product,
}


def mirror_statistic(
    beta1: np.ndarray,
    beta2: np.ndarray,
    kind: str = 'sum',
    **kwargs
) -> np.ndarray:
    """
    Combine two independent half fits into one statistic per variable.

    Every supported statistic is odd in each argument: flipping the sign of
    ``beta1[j]`` (or ``beta2[j]``) flips the sign of ``M[j]`` and keeps its
    magnitude. When the estimate of a null coefficient on one half is
    symmetric about zero and independent of the other half, ``M[j]`` is
    therefore symmetric about zero. A variable estimated as exactly zero on
    either half gets ``M[j] = 0``.

    Parameters
    ----------
    beta1 : array-like of shape (p,)
        Coefficients fitted on the first half.
    beta2 : array-like of shape (p,)
        Coefficients fitted on the second half.
    kind : {'sum', 'min', 'product'}, default='sum'
        Which mirror statistic to compute.

    Returns
    -------
    np.ndarray of shape (p,)
        Mirror statistics M. Large positive values indicate signal.
    """
    if kind not in MIRRORS:
        raise InvalidConfiguration(
            f"kind must be one of {tuple(MIRRORS)}, got '{kind}'"
        )
    return MIRRORS[kind](beta1, beta2)
