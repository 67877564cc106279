"""Fit oracles for data splitting.

A fit oracle is any callable ``oracle(X, y, random_state=None)`` returning
one coefficient per column of ``X``. This module provides cross-validated
lasso and elastic net oracles, and least squares for low-dimensional
designs.
"""

from .base import (
    FitOracle,
    accepts_random_state,
    check_coefficients,
    fit_half,
)

from .lasso import LassoCVOracle, ElasticNetCVOracle

from .ols import OLSOracle, ols_refit

__all__ = [
    "FitOracle",
    "accepts_random_state",
    "check_coefficients",
    "fit_half",
    "LassoCVOracle",
    "ElasticNetCVOracle",
    "OLSOracle",
    "ols_refit",
]
