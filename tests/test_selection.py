import warnings

import numpy as np
import pytest

from dsfdr import (
    DS,
    DSConfig,
    FitFailure,
    InsufficientSamples,
    InvalidConfiguration,
    aggregate_inclusion_rate,
    aggregate_majority,
    ds_single,
    fdp_power,
    mds,
    run_once,
)


def test_single_split_finds_strong_signals(low_dim_problem, ols):
    result = ds_single(low_dim_problem['X'], low_dim_problem['y'], q=0.2,
                       fit_oracle=ols, random_state=0)
    assert result.statistic.shape == (30,)
    assert set(low_dim_problem['signal_index']) <= set(result.selected.tolist())
    assert np.all(result.statistic[result.selected] >= result.threshold)


def test_run_once_returns_indices(low_dim_problem, ols):
    selected = run_once(low_dim_problem['X'], low_dim_problem['y'], q=0.2,
                        fit_oracle=ols, random_state=0)
    np.testing.assert_array_equal(selected, np.sort(selected))


def test_halves_see_disjoint_rows(low_dim_problem, recording_oracle):
    X = low_dim_problem['X']
    y = np.arange(X.shape[0], dtype=float)
    ds_single(X, y, q=0.2, fit_oracle=recording_oracle, random_state=1)
    first, second = recording_oracle.seen
    assert len(np.intersect1d(first, second)) == 0
    np.testing.assert_array_equal(np.sort(np.concatenate([first, second])), y)


def test_ds_and_mds_recover_signals(low_dim_problem, ols):
    result = DS(low_dim_problem['X'], low_dim_problem['y'], num_split=10, q=0.2,
                fit_oracle=ols, random_state=0)
    metrics = fdp_power(result.MDS_feature, low_dim_problem['signal_index'])
    assert metrics['power'] == 1.0
    assert metrics['fdp'] <= 0.2
    assert result.n_trials_used == 10
    assert result.trial_fraction == 1.0
    assert result.failed_trials == []
    assert result.inclusion_frequency.shape == (30,)
    assert np.all((result.inclusion_frequency >= 0) & (result.inclusion_frequency <= 1))


def test_ds_is_reproducible_by_seed(low_dim_problem, ols):
    a = DS(low_dim_problem['X'], low_dim_problem['y'], num_split=8, q=0.2,
           fit_oracle=ols, random_state=42)
    b = DS(low_dim_problem['X'], low_dim_problem['y'], num_split=8, q=0.2,
           fit_oracle=ols, random_state=42)
    np.testing.assert_array_equal(a.DS_feature, b.DS_feature)
    np.testing.assert_array_equal(a.MDS_feature, b.MDS_feature)
    np.testing.assert_array_equal(a.inclusion_frequency, b.inclusion_frequency)


def test_ds_is_reproducible_by_seed_sequence(low_dim_problem, ols):
    seed = np.random.SeedSequence(42)
    a = DS(low_dim_problem['X'], low_dim_problem['y'], num_split=8, q=0.2,
           fit_oracle=ols, random_state=seed)
    b = DS(low_dim_problem['X'], low_dim_problem['y'], num_split=8, q=0.2,
           fit_oracle=ols, random_state=seed)
    np.testing.assert_array_equal(a.DS_feature, b.DS_feature)
    np.testing.assert_array_equal(a.MDS_feature, b.MDS_feature)
    np.testing.assert_array_equal(a.inclusion_frequency, b.inclusion_frequency)
    assert seed.n_children_spawned == 0


def test_parallel_trials_match_serial(low_dim_problem, ols):
    serial = DS(low_dim_problem['X'], low_dim_problem['y'], num_split=6, q=0.2,
                fit_oracle=ols, random_state=9)
    parallel = DS(low_dim_problem['X'], low_dim_problem['y'], num_split=6, q=0.2,
                  fit_oracle=ols, random_state=9, n_jobs=2)
    np.testing.assert_array_equal(serial.DS_feature, parallel.DS_feature)
    np.testing.assert_array_equal(serial.MDS_feature, parallel.MDS_feature)
    np.testing.assert_array_equal(serial.inclusion_frequency, parallel.inclusion_frequency)


def test_inputs_are_not_mutated(low_dim_problem, ols):
    X = low_dim_problem['X'].copy()
    y = low_dim_problem['y'].copy()
    DS(X, y, num_split=3, q=0.2, fit_oracle=ols, random_state=0)
    np.testing.assert_array_equal(X, low_dim_problem['X'])
    np.testing.assert_array_equal(y, low_dim_problem['y'])


def test_pure_noise_gives_empty_selection_not_error(noise_problem, ols):
    result = DS(noise_problem['X'], noise_problem['y'], num_split=5, q=0.05,
                fit_oracle=ols, random_state=3)
    assert result.MDS_feature.size == 0
    assert result.n_trials_used == 5


def test_inclusion_rate_aggregation(low_dim_problem, ols):
    result = DS(low_dim_problem['X'], low_dim_problem['y'], num_split=10, q=0.2,
                fit_oracle=ols, aggregation='inclusion_rate', random_state=0)
    metrics = fdp_power(result.MDS_feature, low_dim_problem['signal_index'])
    # The null prefix may absorb a few low-rate signals
    assert metrics['power'] >= 0.7
    assert metrics['fdp'] <= 0.2
    assert result.aggregation == 'inclusion_rate'
    assert np.all(result.inclusion_rate <= result.inclusion_frequency + 1e-12)


def test_ols_refit(low_dim_problem, ols):
    result = DS(low_dim_problem['X'], low_dim_problem['y'], num_split=5, q=0.2,
                fit_oracle=ols, refit='ols', random_state=0)
    assert set(low_dim_problem['signal_index']) <= set(result.MDS_feature.tolist())


def test_aggregate_majority():
    counts = np.array([10, 5, 4, 0])
    np.testing.assert_array_equal(aggregate_majority(counts, 10), [0, 1])
    np.testing.assert_array_equal(aggregate_majority(counts, 10, 0.9), [0])


def test_aggregate_majority_is_order_independent():
    rng = np.random.default_rng(0)
    indicators = rng.integers(0, 2, size=(20, 15))
    forward = aggregate_majority(indicators.sum(axis=0), 20)
    backward = aggregate_majority(indicators[::-1].sum(axis=0), 20)
    np.testing.assert_array_equal(forward, backward)


def test_aggregate_inclusion_rate():
    rates = np.array([0.0, 0.02, 0.03, 0.2, 0.25, 0.5])
    # 0.02 + 0.03 = 0.05 <= 0.1, adding 0.2 exceeds it
    np.testing.assert_array_equal(aggregate_inclusion_rate(rates, q=0.1), [3, 4, 5])
    assert aggregate_inclusion_rate(np.zeros(4), q=0.1).size == 0


def test_failure_raises_with_trial_index(low_dim_problem, marked_rows_oracle):
    with pytest.raises(FitFailure) as excinfo:
        DS(low_dim_problem['X'], low_dim_problem['y'], num_split=20, q=0.2,
           fit_oracle=marked_rows_oracle, random_state=0)
    assert excinfo.value.trial is not None
    assert excinfo.value.half in (1, 2)


def test_failure_drop_policy_records_fraction(low_dim_problem, marked_rows_oracle):
    with pytest.warns(UserWarning, match="failed and were dropped"):
        result = DS(low_dim_problem['X'], low_dim_problem['y'], num_split=20, q=0.2,
                    fit_oracle=marked_rows_oracle, on_fit_failure='drop',
                    random_state=0)
    assert 0 < result.n_trials_used < 20
    assert len(result.failed_trials) == 20 - result.n_trials_used
    assert result.trial_fraction == result.n_trials_used / 20
    assert set(low_dim_problem['signal_index']) <= set(result.MDS_feature.tolist())


def test_all_trials_failing_raises(low_dim_problem):
    def broken(X, y):
        raise RuntimeError("no convergence")

    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        with pytest.raises(FitFailure, match="All 3 trials failed"):
            DS(low_dim_problem['X'], low_dim_problem['y'], num_split=3,
               fit_oracle=broken, on_fit_failure='drop', random_state=0)


@pytest.mark.parametrize("bad_output", [
    lambda X: np.zeros(X.shape[1] - 1),
    lambda X: np.full(X.shape[1], np.nan),
    lambda X: None,
])
def test_invalid_coefficients_are_fit_failures(low_dim_problem, bad_output):
    def oracle(X, y):
        return bad_output(X)

    with pytest.raises(FitFailure):
        ds_single(low_dim_problem['X'], low_dim_problem['y'], fit_oracle=oracle,
                  random_state=0)


@pytest.mark.parametrize("kwargs", [
    {'q': 0.0},
    {'q': 1.0},
    {'q': float('nan')},
    {'num_split': 0},
    {'num_split': 2.5},
    {'aggregation': 'vote'},
    {'on_fit_failure': 'retry'},
    {'mirror': 'max'},
    {'offset': 3},
    {'inclusion_threshold': 0.0},
    {'no_such_option': 1},
])
def test_invalid_configuration_fails_before_fitting(low_dim_problem, recording_oracle, kwargs):
    with pytest.raises(InvalidConfiguration):
        DS(low_dim_problem['X'], low_dim_problem['y'], fit_oracle=recording_oracle, **kwargs)
    assert recording_oracle.seen == []


def test_mismatched_dimensions(recording_oracle):
    with pytest.raises(InvalidConfiguration):
        DS(np.zeros((10, 3)), np.zeros(9), fit_oracle=recording_oracle)
    with pytest.raises(InvalidConfiguration):
        DS(np.zeros(10), np.zeros(10), fit_oracle=recording_oracle)


def test_single_column_design_is_rejected(recording_oracle):
    with pytest.raises(InvalidConfiguration, match="at least 2 columns"):
        DS(np.ones((10, 1)), np.ones(10), fit_oracle=recording_oracle)
    assert recording_oracle.seen == []


def test_too_few_samples(recording_oracle):
    with pytest.raises(InsufficientSamples):
        DS(np.ones((3, 2)), np.ones(3), fit_oracle=recording_oracle)
    assert recording_oracle.seen == []


def test_config_validate_returns_self():
    config = DSConfig(q=0.2, num_split=3)
    assert config.validate() is config
    assert config.serial().n_jobs == 1
