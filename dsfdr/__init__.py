"""
Data Splitting for Controlled Variable Selection.

This package implements Data Splitting (DS) and Multiple Data Splitting
(MDS), which select variables in high-dimensional linear regression, or
edges of a Gaussian graphical model, while controlling the false discovery
rate (FDR).

The data are split into two halves and a coefficient estimate is fitted on
each. The two estimates are combined into a mirror statistic per variable
whose distribution is symmetric about zero for null variables, so the
number of large negative mirror statistics estimates the number of false
discoveries among the large positive ones. MDS repeats the split many times
and aggregates the selections, removing most of the randomness of a single
split.

References
----------
Dai, Lin, Xing and Liu, False discovery rate control via data splitting.
J. Amer. Statist. Assoc. (2022).

Examples
--------
>>> from dsfdr import DS, random_problem, fdp_power
>>> problem = random_problem(n=500, p=200, p0=20, rho=0.5, random_state=0)
>>> result = DS(problem['X'], problem['y'], num_split=20, q=0.1, random_state=1)
>>> fdp_power(result.MDS_feature, problem['signal_index'])
"""

import logging

__version__ = "0.1.0"

# Errors
from .exceptions import (
    DSError,
    InvalidConfiguration,
    InsufficientSamples,
    FitFailure,
)

# Configuration
from .config import DSConfig

# Building blocks
from .split import split_indices
from .mirror import mirror_statistic, mirror_sum, mirror_min, mirror_product
from .threshold import mirror_threshold, estimate_fdp, select_by_threshold
from .parallel import parallel_map

# Fit oracles (import submodule)
from . import fit
from .fit import LassoCVOracle, ElasticNetCVOracle, OLSOracle

# Main procedures
from .selection import (
    DS,
    ds_single,
    run_once,
    mds,
    aggregate_majority,
    aggregate_inclusion_rate,
    SplitResult,
    DSResult,
)
from .graph import DS_graph, ds_graph, symmetrize_edges, DSGraphResult

# Evaluation
from .evaluate import fdp_power, fdp_power_graph

# Utility functions
from .utils import (
    as_generator,
    spawn_seeds,
    toeplitz_covariance,
    random_problem,
    random_graph_problem,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Version
    "__version__",
    # Errors
    "DSError",
    "InvalidConfiguration",
    "InsufficientSamples",
    "FitFailure",
    # Configuration
    "DSConfig",
    # Building blocks
    "split_indices",
    "mirror_statistic",
    "mirror_sum",
    "mirror_min",
    "mirror_product",
    "mirror_threshold",
    "estimate_fdp",
    "select_by_threshold",
    "parallel_map",
    # Fit oracles
    "fit",
    "LassoCVOracle",
    "ElasticNetCVOracle",
    "OLSOracle",
    # Main procedures
    "DS",
    "ds_single",
    "run_once",
    "mds",
    "aggregate_majority",
    "aggregate_inclusion_rate",
    "SplitResult",
    "DSResult",
    "DS_graph",
    "ds_graph",
    "symmetrize_edges",
    "DSGraphResult",
    # Evaluation
    "fdp_power",
    "fdp_power_graph",
    # Utility functions
    "as_generator",
    "spawn_seeds",
    "toeplitz_covariance",
    "random_problem",
    "random_graph_problem",
]
