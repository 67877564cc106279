"""Run configuration for data splitting and multiple data splitting."""

from dataclasses import dataclass, replace
from typing import Optional

import numpy as np

from .exceptions import InvalidConfiguration

MIRROR_KINDS = ("sum", "min", "product")
AGGREGATIONS = ("majority", "inclusion_rate")
FAILURE_POLICIES = ("raise", "drop")
REFIT_METHODS = (None, "ols")
SYMMETRIZE_RULES = ("or", "and")


@dataclass(frozen=True)
class DSConfig:
    """
    Settings shared by every trial of one DS / MDS run.

    Attributes
    ----------
    q : float, default=0.10
        Target false discovery rate, in (0, 1).
    num_split : int, default=50
        Number of independent splits aggregated by MDS.
    offset : {0, 1}, default=1
        Numerator offset of the estimated FDP. 1 gives the conservative
        rule that controls the usual FDR.
    mirror : {'sum', 'min', 'product'}, default='sum'
        Mirror statistic used to combine the two half fits.
    aggregation : {'majority', 'inclusion_rate'}, default='majority'
        How per-split selections are folded into the MDS selection.
    inclusion_threshold : float, default=0.5
        Minimum selection frequency under ``aggregation='majority'``.
    on_fit_failure : {'raise', 'drop'}, default='raise'
        Whether a failed trial aborts the run or is discarded.
    refit : {None, 'ols'}, default=None
        With 'ols', the second half is fitted by least squares on the
        support found on the first half.
    n_jobs : int, optional
        Worker count for the trial pool (joblib semantics). None or 1 runs
        serially.
    """
    q: float = 0.10
    num_split: int = 50
    offset: int = 1
    mirror: str = "sum"
    aggregation: str = "majority"
    inclusion_threshold: float = 0.5
    on_fit_failure: str = "raise"
    refit: Optional[str] = None
    n_jobs: Optional[int] = None

    def validate(self) -> "DSConfig":
        """Check every field, raising InvalidConfiguration on the first bad one."""
        if (isinstance(self.q, bool)
                or not isinstance(self.q, (int, float, np.integer, np.floating))
                or not 0 < self.q < 1):
            raise InvalidConfiguration(f"q must lie in (0, 1), got {self.q!r}")
        if isinstance(self.num_split, bool) or not isinstance(self.num_split, (int, np.integer)):
            raise InvalidConfiguration(
                f"num_split must be an integer, got {type(self.num_split).__name__}"
            )
        if self.num_split < 1:
            raise InvalidConfiguration(f"num_split must be at least 1, got {self.num_split}")
        if self.offset not in (0, 1):
            raise InvalidConfiguration("offset must be either 0 or 1")
        if self.mirror not in MIRROR_KINDS:
            raise InvalidConfiguration(
                f"mirror must be one of {MIRROR_KINDS}, got '{self.mirror}'"
            )
        if self.aggregation not in AGGREGATIONS:
            raise InvalidConfiguration(
                f"aggregation must be one of {AGGREGATIONS}, got '{self.aggregation}'"
            )
        if not 0 < self.inclusion_threshold <= 1:
            raise InvalidConfiguration(
                f"inclusion_threshold must lie in (0, 1], got {self.inclusion_threshold!r}"
            )
        if self.on_fit_failure not in FAILURE_POLICIES:
            raise InvalidConfiguration(
                f"on_fit_failure must be one of {FAILURE_POLICIES}, "
                f"got '{self.on_fit_failure}'"
            )
        if self.refit not in REFIT_METHODS:
            raise InvalidConfiguration(f"refit must be None or 'ols', got '{self.refit}'")
        if self.n_jobs is not None and (
            not isinstance(self.n_jobs, (int, np.integer)) or self.n_jobs == 0
        ):
            raise InvalidConfiguration(f"n_jobs must be a non-zero integer, got {self.n_jobs!r}")
        return self

    def serial(self) -> "DSConfig":
        """Copy of this configuration that runs its trials in the calling worker."""
        return replace(self, n_jobs=1)
