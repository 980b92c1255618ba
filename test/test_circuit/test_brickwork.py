"""Tests for the brickwork scheduler, its records and exact replay."""

import numpy as np
import pytest
import pytest_check as check

from monitored_circuit import StabilizerState, create_initial_state
from simulation import (
    brickwork_circuit,
    brickwork_circuit_dynamics,
    build_bonds,
    replay_brickwork_circuit,
)


@pytest.mark.parametrize(
    "L, is_pbc, odd, even",
    [
        (6, False, [(0, 1), (2, 3), (4, 5)], [(1, 2), (3, 4)]),
        (6, True, [(0, 1), (2, 3), (4, 5)], [(1, 2), (3, 4), (5, 0)]),
        (5, True, [(0, 1), (2, 3), (4, 0)], [(1, 2), (3, 4)]),
        (5, False, [(0, 1), (2, 3)], [(1, 2), (3, 4)]),
        (2, False, [(0, 1)], []),
    ],
)
def test_build_bonds(L, is_pbc, odd, even):
    odd_bonds, even_bonds = build_bonds(L, is_pbc)
    assert list(odd_bonds) == odd
    assert list(even_bonds) == even


def test_build_bonds_rejects_single_site():
    with pytest.raises(ValueError):
        build_bonds(1, True)


def test_replay_with_identity_gates_keeps_state():
    state = StabilizerState.product_zero(4)
    state.apply("H", 1)
    reference = state.copy()
    result = replay_brickwork_circuit(
        4, 1, state, False,
        unitary_gates=[[0], [0, 0]],
        measurement_gates=[[None] * 4, [None] * 4],
    )
    assert result.state == reference
    assert result.measurement_record == [[None] * 4, [None] * 4]
    assert result.gates_record is None


def test_no_measurements_at_zero_rate():
    result = brickwork_circuit(
        6, 3, 0.0, StabilizerState.product_zero(6), True,
        extract_gates=True, rng=np.random.default_rng(0),
    )
    assert len(result.measurement_record) == 6
    for layer in result.measurement_record:
        assert layer == [None] * 6
    assert result.state.is_pure


def test_full_rate_measures_every_qubit_except_last_sublayer():
    L, T = 6, 3
    result = brickwork_circuit(
        L, T, 1.0, StabilizerState.product_zero(L), True, rng=np.random.default_rng(1)
    )
    for layer in result.measurement_record[:-1]:
        check.is_true(all(outcome in (1, -1) for outcome in layer))
    assert result.measurement_record[-1] == [None] * L


def test_first_qubit_can_be_left_unmeasured():
    result = brickwork_circuit(
        4, 2, 1.0, StabilizerState.product_zero(4), True,
        measure_first_qubit=False, rng=np.random.default_rng(2),
    )
    for layer in result.measurement_record:
        assert layer[0] is None
    assert all(o is not None for o in result.measurement_record[0][1:])


def test_inhomogeneous_measurement_rates():
    result = brickwork_circuit(
        4, 2, [1.0, 0.0, 0.0, 1.0], StabilizerState.product_zero(4), False,
        rng=np.random.default_rng(3),
    )
    for layer in result.measurement_record[:-1]:
        assert layer[1] is None and layer[2] is None
        assert layer[0] is not None and layer[3] is not None


@pytest.mark.parametrize("unitaries_type, n_gates", [("cliffords", 11520), ("dual_unitaries", 5760)])
def test_gates_record_shape(unitaries_type, n_gates):
    L, T = 7, 2
    odd_bonds, even_bonds = build_bonds(L, True)
    result = brickwork_circuit(
        L, T, 0.2, StabilizerState.product_zero(L), True,
        extract_gates=True, unitaries_type=unitaries_type, rng=np.random.default_rng(4),
    )
    assert len(result.gates_record) == 2 * T
    for k, layer in enumerate(result.gates_record):
        expected = even_bonds if k % 2 == 0 else odd_bonds
        assert len(layer) == len(expected)
        assert all(0 <= g < n_gates for g in layer)


def test_gates_record_only_on_request():
    result = brickwork_circuit(4, 1, 0.5, StabilizerState.product_zero(4), True)
    assert result.gates_record is None


@pytest.mark.parametrize("unitaries_type", ["cliffords", "dual_unitaries"])
@pytest.mark.parametrize("initial_state", ["product_0", "fully_mixed", "bell_pairs"])
@pytest.mark.parametrize("is_pbc", [True, False])
def test_replay_reproduces_final_state(unitaries_type, initial_state, is_pbc):
    L, T = 8, 4
    initial = create_initial_state(L, initial_state)
    result = brickwork_circuit(
        L, T, 0.3, initial.copy(), is_pbc,
        extract_gates=True, unitaries_type=unitaries_type, rng=np.random.default_rng(5),
    )
    replayed = replay_brickwork_circuit(
        L, T, initial.copy(), is_pbc,
        unitary_gates=result.gates_record,
        measurement_gates=result.measurement_record,
        unitaries_type=unitaries_type,
    )
    assert replayed.state == result.state
    assert replayed.measurement_record == result.measurement_record


def test_same_seed_same_run():
    runs = [
        brickwork_circuit(
            6, 3, 0.25, StabilizerState.product_zero(6), True,
            extract_gates=True, rng=np.random.default_rng(17),
        )
        for _ in range(2)
    ]
    assert runs[0].state == runs[1].state
    assert runs[0].gates_record == runs[1].gates_record
    assert runs[0].measurement_record == runs[1].measurement_record


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(L=4, T=1, p=1.5),
        dict(L=4, T=1, p=[0.1, 0.1]),
        dict(L=4, T=-1, p=0.1),
        dict(L=5, T=1, p=0.1),
        dict(L=4, T=1, p=0.1, unitaries_type="haar"),
    ],
)
def test_invalid_circuit_arguments(kwargs):
    state = StabilizerState.product_zero(4)
    reference = state.copy()
    L, T, p = kwargs.pop("L"), kwargs.pop("T"), kwargs.pop("p")
    with pytest.raises(ValueError):
        brickwork_circuit(L, T, p, state, True, **kwargs)
    assert state == reference


@pytest.mark.parametrize(
    "unitary_gates, measurement_gates",
    [
        ([[0, 0]], [[None] * 4]),
        ([[0], [0, 0]], [[None] * 4, [None] * 4]),
        ([[0, 0], [0, 11520]], [[None] * 4, [None] * 4]),
        ([[0, 0], [0, 0]], [[None] * 4, [None] * 3]),
        ([[0, 0], [0, 0]], [[0, None, None, None], [None] * 4]),
        ([[0, 0], [0, 3.7]], [[None] * 4, [None] * 4]),
        ([[True, 0], [0, 0]], [[None] * 4, [None] * 4]),
        ([[0, 0], [0, 0]], [[True, None, None, None], [None] * 4]),
        ([[0, 0], [0, 0]], [[1.0, None, None, None], [None] * 4]),
    ],
)
def test_invalid_replay_records_leave_state_untouched(unitary_gates, measurement_gates):
    state = StabilizerState.product_zero(4)
    reference = state.copy()
    with pytest.raises(ValueError):
        replay_brickwork_circuit(
            4, 1, state, True,
            unitary_gates=unitary_gates, measurement_gates=measurement_gates,
        )
    assert state == reference


def test_dynamics_records():
    L, T = 8, 3
    result = brickwork_circuit_dynamics(
        L, T, 0.2, StabilizerState.product_zero(L), True,
        measure_i3=True, rng=np.random.default_rng(6),
    )
    for record in (result.entropy_record, result.n_meas_record, result.n_det_record,
                   result.i2_record, result.i3_record, result.measurement_record):
        assert len(record) == 2 * T
    assert result.n_meas_record[-1] == 0
    for s, n_meas, n_det in zip(result.entropy_record, result.n_meas_record, result.n_det_record):
        check.greater_equal(s, 0)
        check.less_equal(s, L // 2)
        check.less_equal(n_det, n_meas)
    for layer, n_meas in zip(result.measurement_record, result.n_meas_record):
        check.equal(sum(o is not None for o in layer), n_meas)


def test_dynamics_without_i3():
    result = brickwork_circuit_dynamics(
        4, 1, 0.5, StabilizerState.product_zero(4), True, rng=np.random.default_rng(7)
    )
    assert result.i3_record is None


def test_full_rate_dynamics_disentangles():
    L, T = 8, 3
    result = brickwork_circuit_dynamics(
        L, T, 1.0, StabilizerState.product_zero(L), True, rng=np.random.default_rng(8)
    )
    assert result.entropy_record[:-1] == [0] * (2 * T - 1)
    assert result.n_meas_record[:-1] == [L] * (2 * T - 1)
    assert result.i2_record[:-1] == [0] * (2 * T - 1)


def test_fully_mixed_state_without_measurements_stays_mixed():
    L, T = 8, 2
    result = brickwork_circuit_dynamics(
        L, T, 0.0, create_initial_state(L, "fully_mixed"), True,
        rng=np.random.default_rng(9),
    )
    assert result.entropy_record == [L // 2] * (2 * T)
    assert result.i2_record == [0] * (2 * T)
    assert result.n_det_record == [0] * (2 * T)


def test_zero_layers():
    state = StabilizerState.product_zero(4)
    result = brickwork_circuit_dynamics(4, 0, 0.5, state, True)
    assert result.entropy_record == []
    assert result.state == StabilizerState.product_zero(4)


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__, "-vv", "-rA"]))
