"""Fit oracle contract and the checks applied to every half fit."""

import inspect
import logging
from typing import Callable, Optional

import numpy as np

from ..exceptions import FitFailure

logger = logging.getLogger(__name__)

# A fit oracle maps (X_half, y_half[, random_state]) to a coefficient vector
# of length X_half.shape[1].
FitOracle = Callable[..., np.ndarray]


def accepts_random_state(oracle: FitOracle) -> bool:
    """Whether ``oracle`` can be called with a ``random_state`` keyword."""
    try:
        params = inspect.signature(oracle).parameters
    except (TypeError, ValueError):
        return False
    if 'random_state' in params:
        return True
    return any(p.kind == inspect.Parameter.VAR_KEYWORD for p in params.values())


def check_coefficients(beta, p: int, half: Optional[int] = None) -> np.ndarray:
    """
    Validate a coefficient vector returned by a fit oracle.

    Parameters
    ----------
    beta : array-like
        Oracle output.
    p : int
        Expected length.
    half : int, optional
        Half index, reported in the error.

    Returns
    -------
    np.ndarray of shape (p,)

    Raises
    ------
    FitFailure
        If ``beta`` is not numeric, has the wrong length or contains
        non-finite values.
    """
    try:
        beta = np.asarray(beta, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise FitFailure(f"Fit oracle returned non-numeric coefficients: {e}", half=half) from e
    beta = beta.ravel()
    if beta.shape[0] != p:
        raise FitFailure(
            f"Fit oracle returned {beta.shape[0]} coefficients, expected {p}",
            half=half,
        )
    if not np.all(np.isfinite(beta)):
        raise FitFailure("Fit oracle returned non-finite coefficients", half=half)
    return beta


def fit_half(
    oracle: FitOracle,
    X: np.ndarray,
    y: np.ndarray,
    random_state: Optional[int] = None,
    half: Optional[int] = None,
) -> np.ndarray:
    """
    Run ``oracle`` on one half and validate its output.

    Any exception raised by the oracle is re-raised as FitFailure.
    """
    try:
        if accepts_random_state(oracle):
            beta = oracle(X, y, random_state=random_state)
        else:
            beta = oracle(X, y)
    except FitFailure as e:
        if e.half is None:
            e.half = half
        raise
    except Exception as e:
        raise FitFailure(f"Fit oracle failed: {e}", half=half) from e
    return check_coefficients(beta, X.shape[1], half=half)
