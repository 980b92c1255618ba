"""Brickwork monitored circuits: random two-qubit Cliffords plus Z measurements.

One time layer is

    gates on even bonds -> measurement sublayer -> gates on odd bonds -> measurement sublayer

with odd bonds (0,1), (2,3), ... and even bonds (1,2), (3,4), ... (the
odd/even names follow the 1-based site numbering). The last measurement
sublayer of the last layer is never run, so every circuit ends on gates.

Random draws come from a single ``numpy.random.Generator`` in a fixed order:
per layer, one gate index per bond in bond order, then one ``random()`` per
eligible qubit in qubit order, then an outcome draw only when that
measurement is not determined by the state. Recording the gate indices and
outcomes of a run and feeding them to ``replay_brickwork_circuit`` therefore
reproduces the final state exactly.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from numbers import Integral
from typing import Callable, List, Optional, Sequence, Tuple, Union

import numpy as np

from monitored_circuit.cliffords import unitary_family
from monitored_circuit.configs import measurement_probabilities
from monitored_circuit.measurement import measure_z
from monitored_circuit.observables import (
    antipodal_eighths,
    entanglement_entropy,
    half_chain,
    mutual_information,
    quarter_blocks,
    tripartite_information,
)
from monitored_circuit.tableau import StabilizerState

logger = logging.getLogger(__name__)

Bond = Tuple[int, int]
Layer = List[Optional[int]]


@dataclass
class CircuitResult:
    state: StabilizerState
    measurement_record: List[Layer]
    gates_record: Optional[List[Layer]] = None


@dataclass
class DynamicsResult:
    """Final state plus one entry per half time step (2T entries per record)."""
    state: StabilizerState
    entropy_record: List[int]
    n_meas_record: List[int]
    n_det_record: List[int]
    i2_record: List[int]
    measurement_record: List[Layer]
    gates_record: Optional[List[Layer]] = None
    i3_record: Optional[List[int]] = None


@dataclass
class _Sublayer:
    outcomes: Layer
    n_meas: int = 0
    n_det: int = 0


@dataclass
class _Bookkeeping:
    measurement_record: List[Layer] = field(default_factory=list)
    gates_record: List[Layer] = field(default_factory=list)


def build_bonds(L: int, is_pbc: bool) -> Tuple[Tuple[Bond, ...], Tuple[Bond, ...]]:
    """Return ``(odd_bonds, even_bonds)`` for a chain of ``L`` qubits.

    With periodic boundaries the wrap-around bond (L-1, 0) joins the odd
    bonds when L is odd and the even bonds when L is even.
    """
    if L < 2:
        raise ValueError(f"L must be at least 2, got {L}")
    odd_bonds = [(2 * i, 2 * i + 1) for i in range(L // 2)]
    if is_pbc and L % 2 == 1:
        odd_bonds.append((L - 1, 0))
    even_bonds = [(2 * i + 1, 2 * i + 2) for i in range((L - 1) // 2)]
    if is_pbc and L % 2 == 0:
        even_bonds.append((L - 1, 0))
    return tuple(odd_bonds), tuple(even_bonds)


def _check_circuit_args(L: int, T: int, state: StabilizerState) -> None:
    if L < 2:
        raise ValueError(f"L must be at least 2, got {L}")
    if T < 0:
        raise ValueError(f"T must be non-negative, got {T}")
    if state.n_qubits != L:
        raise ValueError(f"State has {state.n_qubits} qubits, expected L={L}")


def _random_gate_layer(
    bonds: Sequence[Bond],
    state: StabilizerState,
    apply_gate: Callable[..., int],
    rng: np.random.Generator,
) -> Layer:
    return [apply_gate(q1, q2, state, rng=rng) for q1, q2 in bonds]


def _random_measurement_sublayer(
    state: StabilizerState,
    probabilities: Sequence[float],
    measure_first_qubit: bool,
    rng: np.random.Generator,
) -> Tuple[StabilizerState, _Sublayer]:
    sublayer = _Sublayer(outcomes=[None] * len(probabilities))
    for qubit, p in enumerate(probabilities):
        if qubit == 0 and not measure_first_qubit:
            continue
        if rng.random() < p:
            state, outcome, is_det = measure_z(qubit, state, rng=rng)
            sublayer.outcomes[qubit] = outcome
            sublayer.n_meas += 1
            sublayer.n_det += int(is_det)
    return state, sublayer


def _run_random_circuit(
    L: int,
    T: int,
    p: Union[float, Sequence[float]],
    state: StabilizerState,
    is_pbc: bool,
    extract_gates: bool,
    measure_first_qubit: bool,
    unitaries_type: str,
    rng: Optional[np.random.Generator],
    observe: Optional[Callable[[StabilizerState, _Sublayer], None]] = None,
) -> Tuple[StabilizerState, _Bookkeeping]:
    apply_gate, _ = unitary_family(unitaries_type)
    probabilities = measurement_probabilities(p, L)
    _check_circuit_args(L, T, state)
    rng = np.random.default_rng() if rng is None else rng

    odd_bonds, even_bonds = build_bonds(L, is_pbc)
    books = _Bookkeeping()
    for t in range(T):
        for bonds, last_sublayer in ((even_bonds, False), (odd_bonds, t == T - 1)):
            gates = _random_gate_layer(bonds, state, apply_gate, rng)
            if extract_gates:
                books.gates_record.append(gates)
            if last_sublayer:
                sublayer = _Sublayer(outcomes=[None] * L)
            else:
                state, sublayer = _random_measurement_sublayer(
                    state, probabilities, measure_first_qubit, rng
                )
            books.measurement_record.append(sublayer.outcomes)
            if observe is not None:
                observe(state, sublayer)
        logger.debug("layer %d/%d done, rank=%d", t + 1, T, state.rank)
    return state, books


def brickwork_circuit(
    L: int,
    T: int,
    p: Union[float, Sequence[float]],
    state: StabilizerState,
    is_pbc: bool,
    *,
    extract_gates: bool = False,
    measure_first_qubit: bool = True,
    unitaries_type: str = "cliffords",
    rng: Optional[np.random.Generator] = None,
) -> CircuitResult:
    """Run ``T`` random brickwork layers on ``state`` (mutated and returned).

    ``p`` is either one measurement probability for every qubit or a length-L
    vector of per-qubit probabilities. With ``extract_gates`` the applied gate
    indices are returned as ``gates_record`` (2T layers) for later replay.
    ``measure_first_qubit=False`` leaves qubit 0 unmeasured throughout.
    """
    state, books = _run_random_circuit(
        L, T, p, state, is_pbc, extract_gates, measure_first_qubit, unitaries_type, rng
    )
    return CircuitResult(
        state=state,
        measurement_record=books.measurement_record,
        gates_record=books.gates_record if extract_gates else None,
    )


def brickwork_circuit_dynamics(
    L: int,
    T: int,
    p: Union[float, Sequence[float]],
    state: StabilizerState,
    is_pbc: bool,
    *,
    extract_gates: bool = False,
    measure_first_qubit: bool = True,
    unitaries_type: str = "cliffords",
    measure_i3: bool = False,
    rng: Optional[np.random.Generator] = None,
) -> DynamicsResult:
    """``brickwork_circuit`` that records observables after every measurement sublayer.

    Per half time step: half-chain entropy, number of measurements, number of
    deterministic measurements, and the mutual information between the first
    eighth of the chain and the eighth starting at L/2. ``measure_i3`` adds
    the tripartite information of the first three quarter blocks.
    """
    half = half_chain(L)
    a8, b8 = antipodal_eighths(L)
    quarters = quarter_blocks(L)
    entropy_record: List[int] = []
    n_meas_record: List[int] = []
    n_det_record: List[int] = []
    i2_record: List[int] = []
    i3_record: List[int] = []

    def observe(current: StabilizerState, sublayer: _Sublayer) -> None:
        entropy_record.append(entanglement_entropy(current, half))
        n_meas_record.append(sublayer.n_meas)
        n_det_record.append(sublayer.n_det)
        i2_record.append(mutual_information(current, a8, b8))
        if measure_i3:
            i3_record.append(tripartite_information(current, *quarters))

    state, books = _run_random_circuit(
        L, T, p, state, is_pbc, extract_gates, measure_first_qubit, unitaries_type, rng,
        observe=observe,
    )
    return DynamicsResult(
        state=state,
        entropy_record=entropy_record,
        n_meas_record=n_meas_record,
        n_det_record=n_det_record,
        i2_record=i2_record,
        measurement_record=books.measurement_record,
        gates_record=books.gates_record if extract_gates else None,
        i3_record=i3_record if measure_i3 else None,
    )


def _is_index(value) -> bool:
    return isinstance(value, Integral) and not isinstance(value, bool)


def _check_replay_records(
    L: int,
    T: int,
    n_gates: int,
    odd_bonds: Sequence[Bond],
    even_bonds: Sequence[Bond],
    unitary_gates: Sequence[Sequence[Optional[int]]],
    measurement_gates: Sequence[Sequence[Optional[int]]],
) -> None:
    if len(unitary_gates) != 2 * T or len(measurement_gates) != 2 * T:
        raise ValueError(
            f"Invalid gate configuration: must have 2T={2 * T} layers of gates and measurements, "
            f"got {len(unitary_gates)} and {len(measurement_gates)}"
        )
    for k, layer in enumerate(unitary_gates):
        bonds = even_bonds if k % 2 == 0 else odd_bonds
        if len(layer) != len(bonds):
            raise ValueError(
                f"Gate layer {k} has {len(layer)} entries, expected one per bond ({len(bonds)})"
            )
        for gate_index in layer:
            if gate_index is None:
                continue
            if not _is_index(gate_index) or not 0 <= gate_index < n_gates:
                raise ValueError(
                    f"Gate layer {k}: gate index {gate_index!r} is not an integer in [0, {n_gates - 1}]"
                )
    for k, layer in enumerate(measurement_gates):
        if len(layer) != L:
            raise ValueError(
                f"Measurement layer {k} has {len(layer)} entries, expected L={L}"
            )
        for outcome in layer:
            if outcome is not None and (not _is_index(outcome) or outcome not in (1, -1)):
                raise ValueError(
                    f"Measurement layer {k}: outcome {outcome} is not +1, -1 or None"
                )


def replay_brickwork_circuit(
    L: int,
    T: int,
    state: StabilizerState,
    is_pbc: bool,
    *,
    unitary_gates: Sequence[Sequence[Optional[int]]],
    measurement_gates: Sequence[Sequence[Optional[int]]],
    unitaries_type: str = "cliffords",
) -> CircuitResult:
    """Replay a recorded brickwork circuit on ``state`` (mutated and returned).

    ``unitary_gates`` holds 2T layers of gate indices (even bonds first in
    each time step) and ``measurement_gates`` 2T layers of forced outcomes,
    one entry per qubit. ``None`` skips that gate or measurement. All records
    are validated before the state is touched.
    """
    apply_gate, n_gates = unitary_family(unitaries_type)
    _check_circuit_args(L, T, state)
    odd_bonds, even_bonds = build_bonds(L, is_pbc)
    _check_replay_records(
        L, T, n_gates, odd_bonds, even_bonds, unitary_gates, measurement_gates
    )

    measurement_record: List[Layer] = []
    for t in range(T):
        for k, bonds in ((2 * t, even_bonds), (2 * t + 1, odd_bonds)):
            for (q1, q2), gate_index in zip(bonds, unitary_gates[k]):
                if gate_index is not None:
                    apply_gate(q1, q2, state, gate_index=gate_index)
            outcomes: Layer = [None] * L
            if k != 2 * T - 1:
                for qubit, forced in enumerate(measurement_gates[k]):
                    if forced is not None:
                        state, outcomes[qubit], _ = measure_z(
                            qubit, state, forced_outcome=forced
                        )
            measurement_record.append(outcomes)
        logger.debug("replayed layer %d/%d, rank=%d", t + 1, T, state.rank)
    return CircuitResult(state=state, measurement_record=measurement_record)
