import numpy as np
import pytest

from dsfdr import DS, LassoCVOracle, fdp_power, random_problem


@pytest.mark.slow
def test_mds_controls_fdr_with_lasso():
    q = 0.1
    oracle = LassoCVOracle(cv=5, nlambda=50)
    fdps, powers = [], []
    for rep in range(20):
        problem = random_problem(n=400, p=100, p0=20, rho=0.3, delta=8.0, random_state=rep)
        result = DS(problem['X'], problem['y'], num_split=10, q=q,
                    fit_oracle=oracle, random_state=100 + rep)
        metrics = fdp_power(result.MDS_feature, problem['signal_index'])
        fdps.append(metrics['fdp'])
        powers.append(metrics['power'])

    assert np.mean(fdps) <= q + 0.05
    assert np.mean(powers) >= 0.4


@pytest.mark.slow
def test_high_dimensional_design_runs():
    problem = random_problem(n=100, p=300, p0=5, delta=10.0, random_state=0)
    result = DS(problem['X'], problem['y'], num_split=4, q=0.2,
                fit_oracle=LassoCVOracle(cv=5, nlambda=30), random_state=0)
    assert result.inclusion_frequency.shape == (300,)
    assert result.n_trials_used == 4
