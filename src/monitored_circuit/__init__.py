"""Stabilizer-state tools for monitored random Clifford circuits."""

from .tableau import StabilizerState
from .linalg import rank_gf2, solve_gf2
from .cliffords import (
    N_DUAL_UNITARIES,
    N_TWO_QUBIT_CLIFFORDS,
    SINGLE_QUBIT_CLIFFORDS,
    apply_random_two_qubit_clifford,
    apply_random_two_qubit_dual_unitary,
    apply_single_qubit_clifford,
    clifford_description,
    single_qubit_clifford_sequence,
    unitary_family,
)
from .measurement import InvalidStateError, measure_z
from .observables import (
    calc_ee_observables,
    entanglement_entropy,
    mutual_information,
    row_echelon,
    tripartite_information,
)
from .states import STATE_TYPES, create_initial_state
from .configs import CircuitConfig

__all__ = [
    "StabilizerState",
    "rank_gf2",
    "solve_gf2",
    "N_DUAL_UNITARIES",
    "N_TWO_QUBIT_CLIFFORDS",
    "SINGLE_QUBIT_CLIFFORDS",
    "apply_random_two_qubit_clifford",
    "apply_random_two_qubit_dual_unitary",
    "apply_single_qubit_clifford",
    "clifford_description",
    "single_qubit_clifford_sequence",
    "unitary_family",
    "InvalidStateError",
    "measure_z",
    "calc_ee_observables",
    "entanglement_entropy",
    "mutual_information",
    "row_echelon",
    "tripartite_information",
    "STATE_TYPES",
    "create_initial_state",
    "CircuitConfig",
]
