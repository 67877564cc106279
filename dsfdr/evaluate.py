"""False discovery proportion and power of a selection against ground truth."""

from typing import Dict, Iterable

import numpy as np

from .exceptions import InvalidConfiguration


def fdp_power(selected: Iterable[int], truth: Iterable[int]) -> Dict[str, float]:
    """
    False discovery proportion and power of a selected index set.

    fdp = |selected minus truth| / max(1, |selected|)
    power = |selected and truth| / max(1, |truth|)

    Parameters
    ----------
    selected : iterable of int
        Selected indices.
    truth : iterable of int
        Indices of the true signals.

    Returns
    -------
    dict
        Keys 'fdp' and 'power'.

    Examples
    --------
    >>> fdp_power({1, 2, 3}, {1, 2, 4})
    {'fdp': 0.3333333333333333, 'power': 0.6666666666666666}
    """
    selected = set(np.asarray(list(selected), dtype=int).tolist())
    truth = set(np.asarray(list(truth), dtype=int).tolist())
    hits = len(selected & truth)
    return {
        'fdp': (len(selected) - hits) / max(1, len(selected)),
        'power': hits / max(1, len(truth)),
    }


def fdp_power_graph(
    selected_edges: np.ndarray,
    truth_edges: np.ndarray,
) -> Dict[str, float]:
    """
    False discovery proportion and power of a selected edge matrix.

    The formulas of fdp_power are applied to the off-diagonal entries;
    nonzero entries count as edges.

    Parameters
    ----------
    selected_edges : array-like of shape (p, p)
        Selected edge indicators.
    truth_edges : array-like of shape (p, p)
        True edge indicators.

    Returns
    -------
    dict
        Keys 'fdp' and 'power'.
    """
    selected_edges = np.asarray(selected_edges) != 0
    truth_edges = np.asarray(truth_edges) != 0
    if selected_edges.ndim != 2 or selected_edges.shape[0] != selected_edges.shape[1]:
        raise InvalidConfiguration("selected_edges must be a square matrix")
    if selected_edges.shape != truth_edges.shape:
        raise InvalidConfiguration(
            f"Edge matrices differ in shape: {selected_edges.shape} vs {truth_edges.shape}"
        )

    off_diagonal = ~np.eye(selected_edges.shape[0], dtype=bool)
    selected = selected_edges & off_diagonal
    truth = truth_edges & off_diagonal

    n_selected = int(selected.sum())
    hits = int((selected & truth).sum())
    return {
        'fdp': (n_selected - hits) / max(1, n_selected),
        'power': hits / max(1, int(truth.sum())),
    }
