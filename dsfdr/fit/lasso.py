"""Cross-validated penalized regression oracles (Gaussian response)."""

import warnings
from typing import Optional

import numpy as np
from sklearn.exceptions import ConvergenceWarning
from sklearn.linear_model import ElasticNetCV, LassoCV
from sklearn.model_selection import KFold
from sklearn.preprocessing import StandardScaler

from ..exceptions import FitFailure


def _lambda_sequence(X: np.ndarray, y: np.ndarray, nlambda: int, ratio: float) -> np.ndarray:
    # Geometric grid from the smallest penalty that zeroes every coefficient
    n = X.shape[0]
    lambda_max = np.max(np.abs(X.T @ (y - y.mean()))) / n
    if lambda_max <= 0:
        lambda_max = 1.0
    k = np.arange(nlambda) / max(1, nlambda - 1)
    return lambda_max * ratio ** k


def _standardize_half(X: np.ndarray):
    scaler = StandardScaler()
    Xs = scaler.fit_transform(X)
    return Xs, scaler.scale_


class LassoCVOracle:
    """
    Lasso with a cross-validated penalty.

    Columns are standardized on the half being fitted; the returned
    coefficients are on the original scale of X.

    Parameters
    ----------
    cv : int, default=10
        Number of folds.
    nlambda : int, default=100
        Length of the penalty grid.
    lambda_ratio : float, default=1e-3
        Ratio of the smallest to the largest penalty.
    intercept : bool, default=True
        Whether to fit an intercept.
    max_iter : int, default=10000
        Coordinate descent iterations.
    strict : bool, default=False
        If True, a ConvergenceWarning from scikit-learn is a FitFailure;
        otherwise such warnings are silenced.
    n_jobs : int, default=1
        Jobs for the cross-validation loop. Kept at 1 when trials already
        run in parallel.
    """

    def __init__(
        self,
        cv: int = 10,
        nlambda: int = 100,
        lambda_ratio: float = 1e-3,
        intercept: bool = True,
        max_iter: int = 10000,
        strict: bool = False,
        n_jobs: int = 1,
    ):
        self.cv = cv
        self.nlambda = nlambda
        self.lambda_ratio = lambda_ratio
        self.intercept = intercept
        self.max_iter = max_iter
        self.strict = strict
        self.n_jobs = n_jobs

    def _model(self, alphas: np.ndarray, folds: KFold):
        return LassoCV(
            alphas=alphas,
            fit_intercept=self.intercept,
            cv=folds,
            max_iter=self.max_iter,
            n_jobs=self.n_jobs,
        )

    def __call__(
        self,
        X: np.ndarray,
        y: np.ndarray,
        random_state: Optional[int] = None,
    ) -> np.ndarray:
        X = np.asarray(X, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64).ravel()
        n = X.shape[0]

        n_folds = min(self.cv, n)
        if n_folds < 2:
            raise FitFailure(f"Too few rows ({n}) for cross-validation")

        Xs, scale = _standardize_half(X)
        alphas = _lambda_sequence(Xs, y, self.nlambda, self.lambda_ratio)
        folds = KFold(n_splits=n_folds, shuffle=True, random_state=random_state)
        model = self._model(alphas, folds)

        with warnings.catch_warnings():
            if self.strict:
                warnings.simplefilter("error", ConvergenceWarning)
            else:
                warnings.simplefilter("ignore", ConvergenceWarning)
            try:
                model.fit(Xs, y)
            except ConvergenceWarning as e:
                raise FitFailure(f"Penalized regression did not converge: {e}") from e

        return model.coef_ / scale

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(cv={self.cv}, nlambda={self.nlambda}, "
            f"strict={self.strict})"
        )


class ElasticNetCVOracle(LassoCVOracle):
    """
    Elastic net with a cross-validated penalty and fixed mixing ``l1_ratio``.

    Accepts the same parameters as LassoCVOracle.
    """

    def __init__(self, l1_ratio: float = 0.5, **kwargs):
        super().__init__(**kwargs)
        if not 0 < l1_ratio <= 1:
            raise ValueError(f"l1_ratio must lie in (0, 1], got {l1_ratio}")
        self.l1_ratio = l1_ratio

    def _model(self, alphas: np.ndarray, folds: KFold):
        # The lasso grid is scaled so that the first penalty still zeroes everything
        return ElasticNetCV(
            l1_ratio=self.l1_ratio,
            alphas=alphas / self.l1_ratio,
            fit_intercept=self.intercept,
            cv=folds,
            max_iter=self.max_iter,
            n_jobs=self.n_jobs,
        )
