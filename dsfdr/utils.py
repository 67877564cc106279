"""Utility functions for data splitting: seeding, scaling and simulation."""

from typing import List, Optional, Union

import numpy as np
from scipy import linalg

RandomState = Optional[Union[int, np.random.SeedSequence, np.random.Generator]]


def as_generator(random_state: RandomState = None) -> np.random.Generator:
    """
    Build a numpy Generator from a seed-like object.

    Parameters
    ----------
    random_state : int, SeedSequence, Generator or None
        Seed material. A Generator is returned unchanged, so the caller's
        stream is consumed.

    Returns
    -------
    np.random.Generator
    """
    if isinstance(random_state, np.random.Generator):
        return random_state
    return np.random.default_rng(random_state)


def spawn_seeds(random_state: RandomState, k: int) -> List[np.random.SeedSequence]:
    """
    Derive ``k`` independent child seeds from one seed-like object.

    The children depend only on ``random_state`` and ``k``, never on the
    order in which they are later consumed. A SeedSequence passed in is
    not modified, so reusing it reproduces the same children.

    Parameters
    ----------
    random_state : int, SeedSequence, Generator or None
        Parent seed. A Generator contributes one draw of entropy.
    k : int
        Number of children.

    Returns
    -------
    list of np.random.SeedSequence
    """
    if isinstance(random_state, np.random.SeedSequence):
        # Spawn from a copy so the caller's sequence is left untouched
        parent = np.random.SeedSequence(
            random_state.entropy,
            spawn_key=random_state.spawn_key,
            pool_size=random_state.pool_size,
        )
    elif isinstance(random_state, np.random.Generator):
        parent = np.random.SeedSequence(int(random_state.integers(2 ** 63)))
    else:
        parent = np.random.SeedSequence(random_state)
    return parent.spawn(k)


def seed_to_int(seed: np.random.SeedSequence) -> int:
    """Collapse a SeedSequence to a 32-bit integer for scikit-learn's random_state."""
    return int(seed.generate_state(1, dtype=np.uint32)[0])


def toeplitz_covariance(p: int, rho: float = 0.0) -> np.ndarray:
    """
    Covariance matrix with entries ``rho ** |i - j|``.

    Parameters
    ----------
    p : int
        Dimension.
    rho : float, default=0.0
        Correlation between neighbouring variables, in (-1, 1).

    Returns
    -------
    np.ndarray of shape (p, p)
    """
    if not -1 < rho < 1:
        raise ValueError(f"rho must lie in (-1, 1), got {rho}")
    return linalg.toeplitz(rho ** np.arange(p))


def random_problem(
    n: int,
    p: int,
    p0: int,
    rho: float = 0.0,
    delta: float = 5.0,
    covariance: Optional[np.ndarray] = None,
    random_state: RandomState = None,
) -> dict:
    """
    Generate a random, sparse linear regression problem.

    Rows of X are drawn from N(0, covariance); ``p0`` coefficients at random
    positions are drawn from N(0, delta * sqrt(log(p) / n)) and the rest are
    zero; the noise is standard normal.

    Parameters
    ----------
    n : int
        Number of samples.
    p : int
        Number of features.
    p0 : int
        Number of nonzero coefficients.
    rho : float, default=0.0
        Toeplitz correlation used when ``covariance`` is not given.
    delta : float, default=5.0
        Signal strength.
    covariance : array-like of shape (p, p), optional
        Explicit covariance of the rows of X.
    random_state : int, SeedSequence, Generator or None
        Seed for reproducibility.

    Returns
    -------
    dict
        Dictionary containing:
        - 'X': Feature matrix of shape (n, p)
        - 'y': Response vector of shape (n,)
        - 'beta': True coefficients of shape (p,)
        - 'signal_index': Sorted indices of nonzero coefficients
    """
    if not 0 <= p0 <= p:
        raise ValueError(f"p0 must lie in [0, p], got p0={p0}, p={p}")
    rng = as_generator(random_state)

    if covariance is None:
        covariance = toeplitz_covariance(p, rho)
    L = linalg.cholesky(np.asarray(covariance, dtype=np.float64), lower=True)
    X = rng.standard_normal((n, p)) @ L.T

    signal_index = np.sort(rng.choice(p, p0, replace=False))
    beta = np.zeros(p)
    beta[signal_index] = rng.normal(0.0, delta * np.sqrt(np.log(p) / n), size=p0)
    y = X @ beta + rng.standard_normal(n)

    return {
        'X': X,
        'y': y,
        'beta': beta,
        'signal_index': signal_index,
    }


def random_graph_problem(
    n: int,
    p: int,
    edge_prob: float = 0.05,
    strength: float = 0.3,
    random_state: RandomState = None,
) -> dict:
    """
    Generate samples from a sparse Gaussian graphical model.

    An Erdos-Renyi graph with edge probability ``edge_prob`` sets the
    off-diagonal support of the precision matrix, with entries of magnitude
    ``strength`` and random sign. The diagonal is shifted until the
    smallest eigenvalue of the precision matrix is at least 1.

    Parameters
    ----------
    n : int
        Number of samples.
    p : int
        Number of nodes.
    edge_prob : float, default=0.05
        Probability of each undirected edge.
    strength : float, default=0.3
        Magnitude of the nonzero partial dependencies.
    random_state : int, SeedSequence, Generator or None
        Seed for reproducibility.

    Returns
    -------
    dict
        Dictionary containing:
        - 'data': Sample matrix of shape (n, p)
        - 'precision': Precision matrix of shape (p, p)
        - 'edges': Symmetric 0/1 adjacency matrix of shape (p, p)
    """
    rng = as_generator(random_state)

    upper = np.triu(rng.random((p, p)) < edge_prob, k=1)
    signs = rng.choice([-1.0, 1.0], size=(p, p))
    omega = np.where(upper, strength * signs, 0.0)
    omega = omega + omega.T

    lambda_min = np.min(linalg.eigvalsh(omega))
    omega[np.diag_indices(p)] = max(0.0, -lambda_min) + 1.0

    sigma = linalg.inv(omega)
    sigma = (sigma + sigma.T) / 2
    L = linalg.cholesky(sigma, lower=True)
    data = rng.standard_normal((n, p)) @ L.T

    edges = (omega != 0).astype(int)
    np.fill_diagonal(edges, 0)

    return {
        'data': data,
        'precision': omega,
        'edges': edges,
    }
