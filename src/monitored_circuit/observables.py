"""Entanglement entropy and multipartite information of stabilizer states.

The entropy of a region is read off the rank of the stabilizer generators
restricted to that region. The restricted ``rank x 2|A|`` binary matrix
(X bits, then Z bits) is reduced with a Pauli-aware elimination: at each
column the active rows are classified by the Pauli they carry there (X, Y or
Z), and one or two pivot rows are used to clear that column. The number of
non-zero rows left over is the rank of the restriction.
"""
from __future__ import annotations

from typing import Iterable, List, Tuple

import numpy as np

from .tableau import StabilizerState


def _pauli_at(matrix: np.ndarray, row: int, col: int, n_cols: int) -> Tuple[bool, bool]:
    return bool(matrix[row, col]), bool(matrix[row, col + n_cols])


def _swap_rows(matrix: np.ndarray, a: int, b: int) -> None:
    if a != b:
        matrix[[a, b]] = matrix[[b, a]]


def _one_kind_pauli(matrix: np.ndarray, ku: int, k: int, nl: int, n_cols: int) -> None:
    _swap_rows(matrix, k, ku)
    pivot_op = _pauli_at(matrix, ku, nl, n_cols)
    for i in range(ku + 1, matrix.shape[0]):
        if _pauli_at(matrix, i, nl, n_cols) == pivot_op:
            matrix[i] ^= matrix[ku]


def _two_kind_pauli(matrix: np.ndarray, ku: int, k1: int, k2: int, nl: int, n_cols: int) -> None:
    _swap_rows(matrix, k1, ku)
    _swap_rows(matrix, k2, ku + 1)
    first_op = _pauli_at(matrix, ku, nl, n_cols)
    second_op = _pauli_at(matrix, ku + 1, nl, n_cols)
    for i in range(ku + 2, matrix.shape[0]):
        op = _pauli_at(matrix, i, nl, n_cols)
        if op == (False, False):
            continue
        if op == first_op:
            matrix[i] ^= matrix[ku]
        elif op == second_op:
            matrix[i] ^= matrix[ku + 1]
        else:
            # The third Pauli is the product of the two pivots.
            matrix[i] ^= matrix[ku]
            matrix[i] ^= matrix[ku + 1]


def row_echelon(matrix: np.ndarray) -> np.ndarray:
    """Reduce a ``K x 2N`` binary symplectic matrix to row-echelon form in place.

    Columns ``[0, N)`` hold X bits and ``[N, 2N)`` Z bits. Returns ``matrix``.
    """
    n_rows = matrix.shape[0]
    if matrix.shape[1] % 2:
        raise ValueError(f"Expected an even number of columns, got {matrix.shape[1]}")
    n_cols = matrix.shape[1] // 2
    ku = 0  # first row of the active region
    nl = 0  # active column
    while nl < n_cols and ku < n_rows:
        kinds = set()
        k1 = k2 = None
        k1_op = None
        for i in range(ku, n_rows):
            op = _pauli_at(matrix, i, nl, n_cols)
            if op == (False, False):
                continue
            kinds.add(op)
            if k1 is None:
                k1, k1_op = i, op
            elif k2 is None and op != k1_op:
                k2 = i

        if not kinds:
            nl += 1
        elif len(kinds) == 1:
            _one_kind_pauli(matrix, ku, k1, nl, n_cols)
            nl += 1
            ku += 1
        else:
            _two_kind_pauli(matrix, ku, k1, k2, nl, n_cols)
            nl += 1
            ku += 2
    return matrix


def _as_subsystem(subsystem: Iterable[int], n_qubits: int) -> List[int]:
    qubits = [int(q) for q in subsystem]
    if len(set(qubits)) != len(qubits):
        raise ValueError(f"Subsystem contains repeated qubits: {qubits}")
    for q in qubits:
        if not 0 <= q < n_qubits:
            raise ValueError(f"Qubit {q} out of range for {n_qubits} qubits")
    return sorted(qubits)


def entanglement_entropy(state: StabilizerState, subsystem: Iterable[int]) -> int:
    """Entropy (in bits) of ``subsystem`` for a stabilizer state."""
    n = state.n_qubits
    qubits = _as_subsystem(subsystem, n)
    rank = state.rank
    if rank == 0:
        # Maximally mixed: every qubit carries one bit.
        return len(qubits)
    if not qubits:
        return 0

    if len(qubits) <= n // 2:
        region = qubits
    else:
        chosen = set(qubits)
        region = [q for q in range(n) if q not in chosen]

    xs, zs, _ = state.to_numpy()
    restricted = np.concatenate([xs[:, region], zs[:, region]], axis=1).astype(np.uint8)
    row_echelon(restricted)
    rnk = int(np.count_nonzero(restricted.any(axis=1)))

    if rank < n:
        return rank - rnk
    return rnk - len(region)


def mutual_information(state: StabilizerState, a: Iterable[int], b: Iterable[int]) -> int:
    """I(A:B) = S(A) + S(B) - S(AB)."""
    a, b = list(a), list(b)
    return (
        entanglement_entropy(state, a)
        + entanglement_entropy(state, b)
        - entanglement_entropy(state, a + b)
    )


def tripartite_information(
    state: StabilizerState, a: Iterable[int], b: Iterable[int], c: Iterable[int]
) -> int:
    """I3(A:B:C) = S_A + S_B + S_C - S_AB - S_BC - S_AC + S_ABC."""
    a, b, c = list(a), list(b), list(c)

    def s(region: List[int]) -> int:
        return entanglement_entropy(state, region)

    return (
        s(a) + s(b) + s(c)
        - s(a + b) - s(b + c) - s(a + c)
        + s(a + b + c)
    )


def half_chain(n_qubits: int) -> List[int]:
    return list(range(n_qubits // 2))


def antipodal_eighths(n_qubits: int) -> Tuple[List[int], List[int]]:
    """First eighth of the chain and the eighth starting at the middle."""
    return (
        list(range(n_qubits // 8)),
        list(range(n_qubits // 2, 5 * n_qubits // 8)),
    )


def quarter_blocks(n_qubits: int) -> Tuple[List[int], List[int], List[int]]:
    """The first three quarters of the chain as separate blocks."""
    quarter, half = n_qubits // 4, n_qubits // 2
    return (
        list(range(quarter)),
        list(range(quarter, half)),
        list(range(half, half + quarter)),
    )


def calc_ee_observables(state: StabilizerState) -> Tuple[int, int]:
    """Half-chain entropy and tripartite information of the quarter blocks."""
    n = state.n_qubits
    return (
        entanglement_entropy(state, half_chain(n)),
        tripartite_information(state, *quarter_blocks(n)),
    )
