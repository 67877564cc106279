import numpy as np
import pytest

from dsfdr import InvalidConfiguration, fdp_power, fdp_power_graph


def test_fdp_power_example():
    result = fdp_power({1, 2, 3}, {1, 2, 4})
    assert result['fdp'] == pytest.approx(1 / 3)
    assert result['power'] == pytest.approx(2 / 3)


def test_fdp_power_empty_selection():
    assert fdp_power(set(), {1, 2}) == {'fdp': 0.0, 'power': 0.0}


def test_fdp_power_accepts_arrays():
    result = fdp_power(np.array([0, 5]), np.array([5, 6, 7, 8]))
    assert result == {'fdp': 0.5, 'power': 0.25}


def test_fdp_power_empty_truth():
    assert fdp_power([1], []) == {'fdp': 1.0, 'power': 0.0}


def test_fdp_power_graph_ignores_diagonal():
    truth = np.array([
        [0, 1, 0],
        [1, 0, 1],
        [0, 1, 0],
    ])
    selected = np.array([
        [1, 1, 1],
        [1, 1, 0],
        [1, 0, 1],
    ])
    result = fdp_power_graph(selected, truth)
    # Off-diagonal: selected {01, 10, 02, 20}; true {01, 10, 12, 21}
    assert result['fdp'] == pytest.approx(0.5)
    assert result['power'] == pytest.approx(0.5)


def test_fdp_power_graph_empty():
    assert fdp_power_graph(np.zeros((4, 4)), np.eye(4)) == {'fdp': 0.0, 'power': 0.0}


def test_fdp_power_graph_shape_mismatch():
    with pytest.raises(InvalidConfiguration):
        fdp_power_graph(np.zeros((3, 3)), np.zeros((4, 4)))
