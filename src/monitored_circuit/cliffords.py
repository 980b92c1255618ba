"""Integer-indexed synthesis of single- and two-qubit Clifford gates.

The single-qubit group (24 elements) is enumerated as short sequences of
pi and pi/2 rotations about X and Y. Two-qubit Cliffords (11520 elements) are
indexed as

    [0, 576)        C1 x C1                      (local class)
    [576, 5760)     C1 x C1 . CNOT . S1 x S1     (CNOT class)
    [5760, 10944)   C1 x C1 . iSWAP . S1 x S1    (iSWAP class)
    [10944, 11520)  C1 x C1 . SWAP               (SWAP class)

where S1 = {I, 9, 8} is the order-3 subgroup generated by index 9. The
dual-unitary subset keeps only the iSWAP and SWAP classes (5760 elements).

Index-to-gate maps are pure: the same index always produces the same gate
sequence, so a recorded list of indices replays a circuit exactly.
"""
from __future__ import annotations

from numbers import Integral
from typing import Optional, Tuple

import numpy as np

from .tableau import StabilizerState

N_SINGLE_QUBIT_CLIFFORDS = 24
N_LOCAL_CLIFFORDS = N_SINGLE_QUBIT_CLIFFORDS ** 2
N_TWO_QUBIT_CLIFFORDS = 11520
N_DUAL_UNITARIES = 5760

_CNOT_CLASS_END = 5760
_ISWAP_CLASS_END = 10944
_DUAL_ISWAP_CLASS_END = 5184

# Corrections applied after the entangling gate (indices into the table below).
_S1_CORRECTIONS = {2: 8, 3: 9}

_X, _Y = "X", "Y"
_X2, _MX2 = "SQRT_X", "SQRT_X_DAG"
_Y2, _MY2 = "SQRT_Y", "SQRT_Y_DAG"

# Gate sequences in application order; entry k is Clifford index k + 1.
SINGLE_QUBIT_CLIFFORDS: Tuple[Tuple[str, ...], ...] = (
    # Paulis
    (),
    (_X,),
    (_Y,),
    (_Y, _X),
    # 2pi/3 rotations
    (_X2, _Y2),
    (_X2, _MY2),
    (_MX2, _Y2),
    (_MX2, _MY2),
    (_Y2, _X2),
    (_Y2, _MX2),
    (_MY2, _X2),
    (_MY2, _MX2),
    # pi/2 rotations
    (_X2,),
    (_MX2,),
    (_Y2,),
    (_MY2,),
    (_MX2, _Y2, _X2),
    (_MX2, _MY2, _X2),
    # Hadamard-like
    (_X, _Y2),
    (_X, _MY2),
    (_Y, _X2),
    (_Y, _MX2),
    (_X2, _Y2, _X2),
    (_MX2, _Y2, _MX2),
)

_DESCRIPTION = {_X: "X", _Y: "Y", _X2: "X/2", _MX2: "-X/2", _Y2: "Y/2", _MY2: "-Y/2"}


def _check_clifford_index(clifford_index: int) -> None:
    if not 1 <= clifford_index <= N_SINGLE_QUBIT_CLIFFORDS:
        raise ValueError(
            f"clifford_index must be between 1 and {N_SINGLE_QUBIT_CLIFFORDS}, got {clifford_index}"
        )


def single_qubit_clifford_sequence(clifford_index: int) -> Tuple[str, ...]:
    """Elementary gate names making up single-qubit Clifford ``clifford_index``."""
    _check_clifford_index(clifford_index)
    return SINGLE_QUBIT_CLIFFORDS[clifford_index - 1]


def clifford_description(clifford_index: int) -> str:
    """Readable form of a single-qubit Clifford, e.g. ``"X/2, -Y/2"``."""
    sequence = single_qubit_clifford_sequence(clifford_index)
    if not sequence:
        return "I"
    return ", ".join(_DESCRIPTION[gate] for gate in sequence)


def apply_single_qubit_clifford(
    clifford_index: int, qubit: int, state: StabilizerState
) -> StabilizerState:
    """Apply single-qubit Clifford ``clifford_index`` (1..24) to ``qubit``."""
    for gate in single_qubit_clifford_sequence(clifford_index):
        state.apply(gate, qubit)
    return state


def _apply_local_layer(ind1: int, qubit1: int, qubit2: int, state: StabilizerState) -> None:
    apply_single_qubit_clifford(ind1 // N_SINGLE_QUBIT_CLIFFORDS + 1, qubit1, state)
    apply_single_qubit_clifford(ind1 % N_SINGLE_QUBIT_CLIFFORDS + 1, qubit2, state)


def _apply_s1_corrections(ind2: int, qubit1: int, qubit2: int, state: StabilizerState) -> None:
    i1 = ind2 // 3 + 1
    i2 = ind2 % 3 + 1
    if i1 in _S1_CORRECTIONS:
        apply_single_qubit_clifford(_S1_CORRECTIONS[i1], qubit1, state)
    if i2 in _S1_CORRECTIONS:
        apply_single_qubit_clifford(_S1_CORRECTIONS[i2], qubit2, state)


def _draw_index(gate_index: Optional[int], size: int, rng: Optional[np.random.Generator]) -> int:
    if gate_index is None:
        rng = np.random.default_rng() if rng is None else rng
        return int(rng.integers(0, size))
    if isinstance(gate_index, bool) or not isinstance(gate_index, Integral):
        raise ValueError(f"gate_index must be an integer, got {gate_index!r}")
    if not 0 <= gate_index < size:
        raise ValueError(f"gate_index must be between 0 and {size - 1}, got {gate_index}")
    return int(gate_index)


def _check_pair(qubit1: int, qubit2: int, state: StabilizerState) -> None:
    for q in (qubit1, qubit2):
        if not 0 <= q < state.n_qubits:
            raise ValueError(f"Qubit {q} out of range for {state.n_qubits} qubits")
    if qubit1 == qubit2:
        raise ValueError(f"Two-qubit gates need distinct qubits, got ({qubit1}, {qubit2})")


def apply_random_two_qubit_clifford(
    qubit1: int,
    qubit2: int,
    state: StabilizerState,
    gate_index: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> int:
    """Apply two-qubit Clifford ``gate_index`` (0..11519) to ``(qubit1, qubit2)``.

    A uniformly random index is drawn from ``rng`` when ``gate_index`` is None.
    Returns the index that was applied.
    """
    gate_index = _draw_index(gate_index, N_TWO_QUBIT_CLIFFORDS, rng)
    _check_pair(qubit1, qubit2, state)

    _apply_local_layer(gate_index % N_LOCAL_CLIFFORDS, qubit1, qubit2, state)
    if gate_index < N_LOCAL_CLIFFORDS:
        return gate_index
    if gate_index < _CNOT_CLASS_END:
        state.apply("CNOT", qubit1, qubit2)
        ind2 = (gate_index - N_LOCAL_CLIFFORDS) // N_LOCAL_CLIFFORDS
        _apply_s1_corrections(ind2, qubit1, qubit2, state)
    elif gate_index < _ISWAP_CLASS_END:
        state.apply("ISWAP", qubit1, qubit2)
        ind2 = (gate_index - _CNOT_CLASS_END) // N_LOCAL_CLIFFORDS
        _apply_s1_corrections(ind2, qubit1, qubit2, state)
    else:
        state.apply("SWAP", qubit1, qubit2)
    return gate_index


def apply_random_two_qubit_dual_unitary(
    qubit1: int,
    qubit2: int,
    state: StabilizerState,
    gate_index: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> int:
    """Apply dual-unitary Clifford ``gate_index`` (0..5759) to ``(qubit1, qubit2)``.

    Returns the index that was applied.
    """
    gate_index = _draw_index(gate_index, N_DUAL_UNITARIES, rng)
    _check_pair(qubit1, qubit2, state)

    _apply_local_layer(gate_index % N_LOCAL_CLIFFORDS, qubit1, qubit2, state)
    if gate_index < _DUAL_ISWAP_CLASS_END:
        state.apply("ISWAP", qubit1, qubit2)
        _apply_s1_corrections(gate_index // N_LOCAL_CLIFFORDS, qubit1, qubit2, state)
    else:
        state.apply("SWAP", qubit1, qubit2)
    return gate_index


UNITARY_FAMILIES = {
    "cliffords": (apply_random_two_qubit_clifford, N_TWO_QUBIT_CLIFFORDS),
    "dual_unitaries": (apply_random_two_qubit_dual_unitary, N_DUAL_UNITARIES),
}


def unitary_family(unitaries_type: str):
    """Return ``(apply_function, n_gates)`` for ``"cliffords"`` or ``"dual_unitaries"``."""
    try:
        return UNITARY_FAMILIES[unitaries_type]
    except KeyError:
        raise ValueError(
            f"Invalid unitaries_type '{unitaries_type}'. Must be one of {sorted(UNITARY_FAMILIES)}."
        ) from None
