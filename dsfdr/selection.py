"""Data splitting (DS) and multiple data splitting (MDS) pipelines."""

from dataclasses import dataclass, field
from functools import partial
import logging
import warnings
from typing import List, Optional, Tuple

import numpy as np

from .config import DSConfig
from .exceptions import FitFailure, InsufficientSamples, InvalidConfiguration
from .fit import FitOracle, LassoCVOracle, fit_half, ols_refit
from .mirror import mirror_statistic
from .parallel import parallel_map
from .split import MIN_SAMPLES, split_indices
from .threshold import mirror_threshold, select_by_threshold
from .utils import RandomState, seed_to_int, spawn_seeds

logger = logging.getLogger(__name__)


@dataclass
class SplitResult:
    """
    Outcome of one data splitting trial.

    Attributes
    ----------
    statistic : np.ndarray
        Mirror statistics M of shape (p,).
    threshold : float
        Selection threshold (``np.inf`` when nothing passes).
    selected : np.ndarray
        Sorted indices with ``M_j >= threshold``.
    trial : int
        Index of the trial within an MDS run (0 for a single run).
    """
    statistic: np.ndarray
    threshold: float
    selected: np.ndarray
    trial: int = 0

    def __repr__(self) -> str:
        return (
            f"SplitResult(\n"
            f"  trial={self.trial},\n"
            f"  n_selected={len(self.selected)},\n"
            f"  selected={self.selected.tolist()},\n"
            f"  threshold={self.threshold:.4f}\n"
            f")"
        )


@dataclass
class DSResult:
    """
    Result of the DS / MDS procedure on a regression problem.

    Attributes
    ----------
    DS_feature : np.ndarray
        Selection of a single split (the first trial that ran to completion).
    MDS_feature : np.ndarray
        Aggregated selection over all completed splits.
    inclusion_frequency : np.ndarray
        Fraction of completed splits selecting each variable.
    inclusion_rate : np.ndarray
        Mean over completed splits of ``1(j selected) / max(1, |selected|)``.
    q : float
        Target FDR.
    aggregation : str
        Aggregation rule that produced MDS_feature.
    num_split : int
        Number of splits requested.
    n_trials_used : int
        Number of splits that completed and entered the aggregation.
    failed_trials : list of int
        Indices of splits discarded after a fit failure.
    ds_threshold : float
        Threshold of the single split in DS_feature.
    """
    DS_feature: np.ndarray
    MDS_feature: np.ndarray
    inclusion_frequency: np.ndarray
    inclusion_rate: np.ndarray
    q: float
    aggregation: str
    num_split: int
    n_trials_used: int
    failed_trials: List[int] = field(default_factory=list)
    ds_threshold: float = np.inf

    @property
    def trial_fraction(self) -> float:
        """Fraction of the requested splits that entered the aggregation."""
        return self.n_trials_used / self.num_split

    def __repr__(self) -> str:
        p = len(self.inclusion_frequency)
        return (
            f"DSResult(\n"
            f"  n_features={p},\n"
            f"  DS_feature={self.DS_feature.tolist()},\n"
            f"  MDS_feature={self.MDS_feature.tolist()},\n"
            f"  trials_used={self.n_trials_used}/{self.num_split}\n"
            f")"
        )


def _check_data(X, y) -> Tuple[np.ndarray, np.ndarray]:
    X = np.asarray(X, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)

    if X.ndim != 2:
        raise InvalidConfiguration("X must be a 2D array")
    if y.ndim > 1:
        y = y.ravel()

    n, p = X.shape
    if p < 2:
        raise InvalidConfiguration(f"X must have at least 2 columns, got {p}")
    if len(y) != n:
        raise InvalidConfiguration(
            f"Length of y ({len(y)}) must match number of rows in X ({n})"
        )
    if not (np.all(np.isfinite(X)) and np.all(np.isfinite(y))):
        raise InvalidConfiguration("X and y must not contain NaN or infinite values")
    return X, y


def _run_split(
    X: np.ndarray,
    y: np.ndarray,
    config: DSConfig,
    fit_oracle: FitOracle,
    seed: np.random.SeedSequence,
    trial: int = 0,
) -> SplitResult:
    # One seed drives the split; two children seed the half fits
    split_seed, seed1, seed2 = seed.spawn(3)

    I1, I2 = split_indices(X.shape[0], random_state=split_seed)

    beta1 = fit_half(fit_oracle, X[I1], y[I1], random_state=seed_to_int(seed1), half=1)
    if config.refit == 'ols':
        support = np.flatnonzero(beta1)
        try:
            beta2 = ols_refit(X[I2], y[I2], support)
        except FitFailure as e:
            e.half = 2
            raise
    else:
        beta2 = fit_half(fit_oracle, X[I2], y[I2], random_state=seed_to_int(seed2), half=2)

    M = mirror_statistic(beta1, beta2, kind=config.mirror)
    t = mirror_threshold(M, q=config.q, offset=config.offset)
    selected = select_by_threshold(M, t)

    logger.debug("Trial %d: threshold %.4g, %d selected", trial, t, len(selected))
    return SplitResult(statistic=M, threshold=t, selected=selected, trial=trial)


def _trial(
    trial_seed: Tuple[int, np.random.SeedSequence],
    X: np.ndarray,
    y: np.ndarray,
    config: DSConfig,
    fit_oracle: FitOracle,
) -> Tuple[int, Optional[SplitResult], Optional[FitFailure]]:
    trial, seed = trial_seed
    try:
        return trial, _run_split(X, y, config, fit_oracle, seed, trial=trial), None
    except FitFailure as e:
        e.trial = trial
        if config.on_fit_failure == 'raise':
            raise
        return trial, None, e


def aggregate_majority(
    counts: np.ndarray,
    n_trials: int,
    inclusion_threshold: float = 0.5,
) -> np.ndarray:
    """
    Indices selected in at least ``inclusion_threshold`` of the trials.

    Parameters
    ----------
    counts : array-like of shape (p,)
        Number of trials selecting each variable.
    n_trials : int
        Number of trials summed into ``counts``.
    inclusion_threshold : float, default=0.5
        Minimum selection frequency.

    Returns
    -------
    np.ndarray
        Sorted selected indices.
    """
    frequency = np.asarray(counts, dtype=np.float64) / n_trials
    return np.sort(np.where(frequency >= inclusion_threshold)[0])


def aggregate_inclusion_rate(rates: np.ndarray, q: float = 0.10) -> np.ndarray:
    """
    Select by inclusion rates (Dai, Lin, Xing and Liu, 2022).

    Variables with a nonzero rate are ranked by increasing rate. The longest
    prefix whose rates sum to at most ``q`` is treated as null; the rest are
    selected.

    Parameters
    ----------
    rates : array-like of shape (p,)
        Inclusion rates ``mean_k 1(j in S_k) / max(1, |S_k|)``.
    q : float, default=0.10
        Target false discovery rate.

    Returns
    -------
    np.ndarray
        Sorted selected indices.
    """
    rates = np.asarray(rates, dtype=np.float64)
    candidates = np.flatnonzero(rates > 0)
    if candidates.size == 0:
        return candidates
    # Stable sort keeps ties in index order
    ranked = candidates[np.argsort(rates[candidates], kind='mergesort')]
    cumulative = np.cumsum(rates[ranked])
    n_null = int(np.searchsorted(cumulative, q, side='right'))
    return np.sort(ranked[n_null:])


def _mds(
    X: np.ndarray,
    y: np.ndarray,
    config: DSConfig,
    fit_oracle: FitOracle,
    random_state: RandomState = None,
) -> DSResult:
    """MDS on validated inputs."""
    p = X.shape[1]
    seeds = spawn_seeds(random_state, config.num_split)

    outcomes = parallel_map(
        partial(_trial, X=X, y=y, config=config, fit_oracle=fit_oracle),
        enumerate(seeds),
        n_jobs=config.n_jobs,
    )

    # Fold: commutative sums over completed trials
    counts = np.zeros(p)
    rates = np.zeros(p)
    completed = []
    failed = []
    for trial, result, error in outcomes:
        if result is None:
            failed.append(trial)
            logger.info("Dropping trial %d: %s", trial, error)
            continue
        indicator = np.zeros(p)
        indicator[result.selected] = 1.0
        counts += indicator
        rates += indicator / max(1, len(result.selected))
        completed.append(result)

    if not completed:
        raise FitFailure(f"All {config.num_split} trials failed to fit")
    if failed:
        warnings.warn(
            f"{len(failed)} of {config.num_split} splits failed and were dropped; "
            f"MDS aggregates the remaining {len(completed)}"
        )

    n_used = len(completed)
    frequency = counts / n_used
    rates = rates / n_used

    if config.aggregation == 'majority':
        mds_selected = aggregate_majority(counts, n_used, config.inclusion_threshold)
    else:
        mds_selected = aggregate_inclusion_rate(rates, config.q)
    mds_selected.setflags(write=False)

    baseline = min(completed, key=lambda r: r.trial)

    logger.info(
        "MDS over %d/%d splits: DS selected %d, MDS selected %d of %d",
        n_used, config.num_split, len(baseline.selected), len(mds_selected), p,
    )

    return DSResult(
        DS_feature=baseline.selected,
        MDS_feature=mds_selected,
        inclusion_frequency=frequency,
        inclusion_rate=rates,
        q=config.q,
        aggregation=config.aggregation,
        num_split=config.num_split,
        n_trials_used=n_used,
        failed_trials=sorted(failed),
        ds_threshold=baseline.threshold,
    )


def ds_single(
    X: np.ndarray,
    y: np.ndarray,
    q: float = 0.10,
    fit_oracle: Optional[FitOracle] = None,
    offset: int = 1,
    mirror: str = 'sum',
    refit: Optional[str] = None,
    random_state: RandomState = None,
) -> SplitResult:
    """
    Run one data splitting trial: split, fit both halves, mirror, threshold.

    Parameters
    ----------
    X : array-like of shape (n, p)
        Matrix of predictors.
    y : array-like of shape (n,)
        Response vector.
    q : float, default=0.10
        Target false discovery rate.
    fit_oracle : callable, optional
        Coefficient estimator ``oracle(X, y, random_state=None)``.
        Default: LassoCVOracle().
    offset : {0, 1}, default=1
        Numerator offset of the estimated FDP.
    mirror : {'sum', 'min', 'product'}, default='sum'
        Mirror statistic.
    refit : {None, 'ols'}, default=None
        Refit the second half by least squares on the first half's support.
    random_state : int, SeedSequence, Generator or None
        Seed of the split and of the oracle calls.

    Returns
    -------
    SplitResult

    Raises
    ------
    InvalidConfiguration
        On invalid arguments.
    InsufficientSamples
        If X has fewer than 4 rows.
    FitFailure
        If the oracle fails on either half.
    """
    config = DSConfig(q=q, num_split=1, offset=offset, mirror=mirror, refit=refit).validate()
    X, y = _check_data(X, y)
    if fit_oracle is None:
        fit_oracle = LassoCVOracle()
    seed = spawn_seeds(random_state, 1)[0]
    return _run_split(X, y, config, fit_oracle, seed)


def run_once(X: np.ndarray, y: np.ndarray, q: float = 0.10,
             fit_oracle: Optional[FitOracle] = None, **kwargs) -> np.ndarray:
    """Selected indices of a single data splitting trial. See ds_single."""
    return ds_single(X, y, q=q, fit_oracle=fit_oracle, **kwargs).selected


def mds(
    X: np.ndarray,
    y: np.ndarray,
    q: float = 0.10,
    num_split: int = 50,
    fit_oracle: Optional[FitOracle] = None,
    random_state: RandomState = None,
    **kwargs
) -> DSResult:
    """
    Run data splitting ``num_split`` times and aggregate the selections.

    Parameters
    ----------
    X : array-like of shape (n, p)
        Matrix of predictors.
    y : array-like of shape (n,)
        Response vector.
    q : float, default=0.10
        Target false discovery rate.
    num_split : int, default=50
        Number of independent random splits.
    fit_oracle : callable, optional
        Coefficient estimator. Default: LassoCVOracle().
    random_state : int, SeedSequence, Generator or None
        Seed from which every split draws an independent child seed.
    **kwargs
        Remaining DSConfig fields: offset, mirror, aggregation,
        inclusion_threshold, on_fit_failure, refit, n_jobs.

    Returns
    -------
    DSResult
    """
    try:
        config = DSConfig(q=q, num_split=num_split, **kwargs)
    except TypeError as e:
        raise InvalidConfiguration(str(e)) from e
    config.validate()
    X, y = _check_data(X, y)
    if X.shape[0] < MIN_SAMPLES:
        raise InsufficientSamples(
            f"Need at least {MIN_SAMPLES} observations to split the data, got n={X.shape[0]}"
        )
    if fit_oracle is None:
        fit_oracle = LassoCVOracle()
    return _mds(X, y, config, fit_oracle, random_state)


def DS(
    X: np.ndarray,
    y: np.ndarray,
    num_split: int = 50,
    q: float = 0.10,
    fit_oracle: Optional[FitOracle] = None,
    random_state: RandomState = None,
    **kwargs
) -> DSResult:
    """
    Variable selection with FDR control by data splitting.

    Returns both the single-split selection (``DS_feature``) and the
    multiple data splitting selection (``MDS_feature``).

    Parameters
    ----------
    X : array-like of shape (n, p)
        Matrix of predictors; p may exceed n.
    y : array-like of shape (n,)
        Response vector.
    num_split : int, default=50
        Number of random splits for MDS.
    q : float, default=0.10
        Target false discovery rate.
    fit_oracle : callable, optional
        Coefficient estimator. Default: LassoCVOracle().
    random_state : int, SeedSequence, Generator or None
        Seed for reproducibility.
    **kwargs
        Further DSConfig fields.

    Returns
    -------
    DSResult

    References
    ----------
    Dai, Lin, Xing and Liu, False discovery rate control via data
    splitting. J. Amer. Statist. Assoc. (2022).

    Examples
    --------
    >>> from dsfdr import DS, random_problem
    >>> problem = random_problem(500, 100, 20, random_state=0)
    >>> result = DS(problem['X'], problem['y'], num_split=20, q=0.1, random_state=1)
    >>> print(result.MDS_feature)
    """
    return mds(X, y, q=q, num_split=num_split, fit_oracle=fit_oracle,
               random_state=random_state, **kwargs)
