"""Gaussian graphical model selection by nodewise data splitting."""

from dataclasses import dataclass
from functools import partial
import logging
from typing import Optional, Tuple

import numpy as np

from .config import DSConfig, SYMMETRIZE_RULES
from .exceptions import FitFailure, InsufficientSamples, InvalidConfiguration
from .fit import FitOracle, LassoCVOracle
from .parallel import parallel_map
from .selection import DSResult, _mds
from .split import MIN_SAMPLES
from .utils import RandomState, spawn_seeds

logger = logging.getLogger(__name__)


@dataclass
class DSGraphResult:
    """
    Result of DS / MDS edge selection for a Gaussian graphical model.

    Attributes
    ----------
    DS_selected_edge : np.ndarray
        Symmetric 0/1 matrix of shape (p, p) from single-split nodewise
        selections.
    MDS_selected_edge : np.ndarray
        Symmetric 0/1 matrix of shape (p, p) from MDS nodewise selections.
    DS_directed : np.ndarray
        Entry (j, i) is 1 when variable i was selected by the single split
        in the regression of node j.
    MDS_directed : np.ndarray
        Same as DS_directed for MDS.
    symmetrize : str
        Rule that turned directed selections into edges ('or' or 'and').
    q : float
        Target FDR of every nodewise regression.
    num_split : int
        Number of splits per nodewise regression.
    """
    DS_selected_edge: np.ndarray
    MDS_selected_edge: np.ndarray
    DS_directed: np.ndarray
    MDS_directed: np.ndarray
    symmetrize: str
    q: float
    num_split: int

    def __repr__(self) -> str:
        p = self.MDS_selected_edge.shape[0]
        return (
            f"DSGraphResult(\n"
            f"  n_nodes={p},\n"
            f"  DS_edges={int(np.triu(self.DS_selected_edge, 1).sum())},\n"
            f"  MDS_edges={int(np.triu(self.MDS_selected_edge, 1).sum())},\n"
            f"  symmetrize='{self.symmetrize}'\n"
            f")"
        )


def symmetrize_edges(directed: np.ndarray, rule: str = 'or') -> np.ndarray:
    """
    Turn directed nodewise selections into an undirected edge matrix.

    Parameters
    ----------
    directed : array-like of shape (p, p)
        0/1 matrix; entry (j, i) means variable i was selected when
        regressing node j on the others.
    rule : {'or', 'and'}, default='or'
        'or' keeps an edge selected in either direction, 'and' only an edge
        selected in both.

    Returns
    -------
    np.ndarray of shape (p, p)
        Symmetric 0/1 integer matrix with zero diagonal.
    """
    directed = (np.asarray(directed) != 0).astype(int)
    if rule == 'or':
        edges = np.maximum(directed, directed.T)
    elif rule == 'and':
        edges = np.minimum(directed, directed.T)
    else:
        raise InvalidConfiguration(
            f"symmetrize must be one of {SYMMETRIZE_RULES}, got '{rule}'"
        )
    np.fill_diagonal(edges, 0)
    return edges


def _node(
    node_seed: Tuple[int, np.random.SeedSequence],
    data: np.ndarray,
    config: DSConfig,
    fit_oracle: FitOracle,
) -> Tuple[int, np.ndarray, DSResult]:
    j, seed = node_seed
    others = np.delete(np.arange(data.shape[1]), j)
    try:
        result = _mds(data[:, others], data[:, j], config, fit_oracle, random_state=seed)
    except FitFailure as e:
        e.node = j
        raise
    return j, others, result


def ds_graph(
    data: np.ndarray,
    q: float = 0.10,
    num_split: int = 50,
    fit_oracle: Optional[FitOracle] = None,
    symmetrize: str = 'or',
    random_state: RandomState = None,
    **kwargs
) -> DSGraphResult:
    """
    Select the edges of a Gaussian graphical model by nodewise regression.

    Every column j is regressed on the remaining p - 1 columns with DS and
    MDS; selecting variable i in the regression of j proposes the edge
    (i, j). The p regressions are independent and run through the same
    worker pool as the splits (each node then runs its splits serially).

    Parameters
    ----------
    data : array-like of shape (n, p)
        Samples, one variable per column.
    q : float, default=0.10
        Target FDR of each nodewise regression.
    num_split : int, default=50
        Number of random splits per nodewise regression.
    fit_oracle : callable, optional
        Coefficient estimator. Default: LassoCVOracle().
    symmetrize : {'or', 'and'}, default='or'
        Rule combining the two directed selections of a pair.
    random_state : int, SeedSequence, Generator or None
        Seed; every node draws an independent child seed.
    **kwargs
        Further DSConfig fields (offset, mirror, aggregation, n_jobs, ...).

    Returns
    -------
    DSGraphResult
    """
    try:
        config = DSConfig(q=q, num_split=num_split, **kwargs)
    except TypeError as e:
        raise InvalidConfiguration(str(e)) from e
    config.validate()
    if symmetrize not in SYMMETRIZE_RULES:
        raise InvalidConfiguration(
            f"symmetrize must be one of {SYMMETRIZE_RULES}, got '{symmetrize}'"
        )

    data = np.asarray(data, dtype=np.float64)
    if data.ndim != 2:
        raise InvalidConfiguration("data must be a 2D array")
    n, p = data.shape
    if p < 2:
        raise InvalidConfiguration(f"data must have at least 2 columns, got {p}")
    if not np.all(np.isfinite(data)):
        raise InvalidConfiguration("data must not contain NaN or infinite values")
    if n < MIN_SAMPLES:
        raise InsufficientSamples(
            f"Need at least {MIN_SAMPLES} observations to split the data, got n={n}"
        )

    if fit_oracle is None:
        fit_oracle = LassoCVOracle()

    seeds = spawn_seeds(random_state, p)
    node_config = config.serial() if config.n_jobs not in (None, 1) else config

    outcomes = parallel_map(
        partial(_node, data=data, config=node_config, fit_oracle=fit_oracle),
        enumerate(seeds),
        n_jobs=config.n_jobs,
    )

    ds_directed = np.zeros((p, p), dtype=int)
    mds_directed = np.zeros((p, p), dtype=int)
    for j, others, result in outcomes:
        ds_directed[j, others[result.DS_feature]] = 1
        mds_directed[j, others[result.MDS_feature]] = 1

    ds_edges = symmetrize_edges(ds_directed, symmetrize)
    mds_edges = symmetrize_edges(mds_directed, symmetrize)

    logger.info(
        "Nodewise selection over %d nodes (%s rule): DS %d edges, MDS %d edges",
        p, symmetrize, int(np.triu(ds_edges, 1).sum()), int(np.triu(mds_edges, 1).sum()),
    )

    return DSGraphResult(
        DS_selected_edge=ds_edges,
        MDS_selected_edge=mds_edges,
        DS_directed=ds_directed,
        MDS_directed=mds_directed,
        symmetrize=symmetrize,
        q=config.q,
        num_split=config.num_split,
    )


def DS_graph(
    data: np.ndarray,
    q: float = 0.10,
    num_split: int = 50,
    **kwargs
) -> DSGraphResult:
    """
    Edge selection with FDR control for Gaussian graphical models.

    Alias of ds_graph returning ``DS_selected_edge`` and
    ``MDS_selected_edge``.
    """
    return ds_graph(data, q=q, num_split=num_split, **kwargs)
