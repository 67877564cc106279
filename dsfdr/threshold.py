"""Data-dependent threshold search over mirror statistics."""

import numpy as np

from .exceptions import InvalidConfiguration


def estimate_fdp(M: np.ndarray, t: float, offset: int = 1) -> float:
    """
    Estimated false discovery proportion of the rule ``M_j >= t``.

    FDP_hat(t) = (offset + #{j : M_j <= -t}) / max(1, #{j : M_j >= t})

    Under a null distribution symmetric about zero, the number of mirror
    statistics below ``-t`` estimates the number of nulls above ``t``.

    Parameters
    ----------
    M : array-like of shape (p,)
        Mirror statistics.
    t : float
        Positive threshold.
    offset : {0, 1}, default=1
        Numerator offset.

    Returns
    -------
    float
    """
    M = np.asarray(M)
    numerator = offset + np.sum(M <= -t)
    denominator = max(1, np.sum(M >= t))
    return numerator / denominator


def mirror_threshold(
    M: np.ndarray,
    q: float = 0.10,
    offset: int = 1,
    **kwargs
) -> float:
    """
    Compute the selection threshold for mirror statistics.

    Candidate thresholds are the distinct positive values of ``|M|``,
    scanned in increasing order; the first one whose estimated FDP is at
    most ``q`` is returned. Zero is never a candidate, so variables with
    ``M_j = 0`` are never selected.

    Parameters
    ----------
    M : array-like of shape (p,)
        Mirror statistics.
    q : float, default=0.10
        Target false discovery rate.
    offset : {0, 1}, default=1
        The value 1 yields the conservative rule that controls the FDR
        according to the usual definition; 0 is less conservative.

    Returns
    -------
    float
        The threshold, or ``np.inf`` when no candidate qualifies (an empty
        selection).
    """
    M = np.asarray(M, dtype=np.float64)

    if offset not in [0, 1]:
        raise InvalidConfiguration("offset must be either 0 or 1")

    abs_M = np.abs(M)
    ts = np.unique(abs_M[abs_M > 0])
    if ts.size == 0:
        return np.inf

    # FDP_hat for every candidate at once: counts of M <= -t and M >= t
    neg = np.sort(-M[M < 0])
    pos = np.sort(M[M > 0])
    n_neg = neg.size - np.searchsorted(neg, ts, side='left')
    n_pos = pos.size - np.searchsorted(pos, ts, side='left')
    ratio = (offset + n_neg) / np.maximum(1, n_pos)

    ok = np.nonzero(ratio <= q)[0]
    if ok.size == 0:
        return np.inf
    return float(ts[ok[0]])


def select_by_threshold(M: np.ndarray, t: float) -> np.ndarray:
    """
    Indices with ``M_j >= t``, sorted.

    The returned array is read-only.
    """
    M = np.asarray(M)
    selected = np.sort(np.where(M >= t)[0])
    selected.setflags(write=False)
    return selected
