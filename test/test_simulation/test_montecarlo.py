import numpy as np
import pytest
import pytest_check as check

from monitored_circuit import CircuitConfig
from simulation import MonteCarloConfig, run_thermalized_dynamics, run_trials


@pytest.fixture
def small_config():
    return CircuitConfig(L=8, p=0.2, initial_state="product_rand", t_therm=2, t_meas=3)


def test_trials_shapes(small_config):
    result = run_trials(small_config, MonteCarloConfig(trials=3, seed=7))
    assert result.trials == 3
    for record in (result.entropy, result.n_meas, result.n_det, result.i2):
        assert record.shape == (3, 2 * small_config.t_meas)
    assert result.i3 is None
    assert result.mean_entropy().shape == (6,)
    assert result.mean_i2().shape == (6,)


def test_trials_are_reproducible(small_config):
    first = run_trials(small_config, MonteCarloConfig(trials=4, seed=11))
    second = run_trials(small_config, MonteCarloConfig(trials=4, seed=11))
    np.testing.assert_array_equal(first.entropy, second.entropy)
    np.testing.assert_array_equal(first.n_det, second.n_det)
    np.testing.assert_array_equal(first.i2, second.i2)


def test_tripartite_information_on_request():
    config = CircuitConfig(L=8, p=0.1, t_meas=2, measure_i3=True)
    result = run_trials(config, MonteCarloConfig(trials=2, seed=3))
    assert result.i3.shape == (2, 4)


def test_deterministic_fraction():
    quiet = run_trials(CircuitConfig(L=4, p=0.0, t_meas=2), MonteCarloConfig(trials=2, seed=1))
    assert np.isnan(quiet.deterministic_fraction()).all()

    busy = run_trials(CircuitConfig(L=4, p=1.0, t_meas=2), MonteCarloConfig(trials=2, seed=1))
    fraction = busy.deterministic_fraction()
    assert np.isnan(fraction[-1])
    for value in fraction[:-1]:
        check.greater_equal(value, 0.0)
        check.less_equal(value, 1.0)


def test_thermalized_dynamics_is_seeded(small_config):
    a = run_thermalized_dynamics(small_config, np.random.default_rng(21))
    b = run_thermalized_dynamics(small_config, np.random.default_rng(21))
    assert a.entropy_record == b.entropy_record
    assert a.state == b.state
    assert len(a.entropy_record) == 2 * small_config.t_meas


def test_inhomogeneous_rates_in_config():
    config = CircuitConfig(L=4, p=[0.0, 1.0, 1.0, 0.0], t_meas=2)
    result = run_trials(config, MonteCarloConfig(trials=2, seed=5))
    np.testing.assert_array_equal(result.n_meas[:, :-1], 2)


@pytest.mark.parametrize("trials", [0, -2])
def test_monte_carlo_config_validation(trials):
    with pytest.raises(ValueError):
        MonteCarloConfig(trials=trials)


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(L=1),
        dict(t_meas=-1),
        dict(t_therm=-1),
        dict(initial_state="ghz"),
        dict(unitaries_type="haar"),
        dict(p=1.5),
        dict(p=-0.1),
        dict(L=4, p=[0.1, 0.2]),
        dict(L=2, p=[0.1, 2.0]),
    ],
)
def test_circuit_config_validation(kwargs):
    with pytest.raises(ValueError):
        CircuitConfig(**kwargs)


def test_config_probabilities():
    assert CircuitConfig(L=3, p=0.25).probabilities() == [0.25, 0.25, 0.25]
    assert CircuitConfig(L=2, p=[0, 1]).probabilities() == [0.0, 1.0]
    assert CircuitConfig(L=2, p=np.float32(0.5)).probabilities() == [0.5, 0.5]
    assert CircuitConfig(L=2, p=np.array([0.5, 1.0])).probabilities() == [0.5, 1.0]


@pytest.mark.slow
def test_parallel_trials_match_serial(small_config):
    serial = run_trials(small_config, MonteCarloConfig(trials=5, seed=13, workers=None))
    parallel = run_trials(small_config, MonteCarloConfig(trials=5, seed=13, workers=2))
    np.testing.assert_array_equal(serial.entropy, parallel.entropy)
    np.testing.assert_array_equal(serial.n_meas, parallel.n_meas)
    np.testing.assert_array_equal(serial.i2, parallel.i2)


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__, "-vv", "-rA"]))
