"""Mixed stabilizer state on top of stim Pauli strings.

stim only ships pure-state tableaux, while monitored circuits routinely start
from (or pass through) mixed states. ``StabilizerState`` therefore keeps an
explicit list of stabilizer generators as ``stim.PauliString`` rows together
with a ``rank``:

- only the first ``rank`` rows are active generators,
- ``rank == 0`` is the maximally mixed state,
- ``rank == n_qubits`` is a pure state.

Gates are applied by conjugating every active generator with stim
(``PauliString.after``); projective Z measurements follow the usual
Gottesman-Knill update, with a GF(2) solve deciding whether a commuting
``Z_q`` already belongs to the stabilizer group.
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
import stim

from .linalg import rank_gf2, solve_gf2

# Pauli type codes returned by ``stim.PauliString.__getitem__``.
PAULI_I, PAULI_X, PAULI_Y, PAULI_Z = 0, 1, 2, 3

SINGLE_QUBIT_GATES = frozenset(
    {"I", "X", "Y", "Z", "H", "SQRT_X", "SQRT_X_DAG", "SQRT_Y", "SQRT_Y_DAG"}
)
TWO_QUBIT_GATES = frozenset({"CNOT", "ISWAP", "SWAP"})


class StabilizerState:
    """An ``n_qubits`` stabilizer state with ``rank`` independent generators."""

    def __init__(
        self,
        n_qubits: int,
        generators: Iterable[stim.PauliString] = (),
        rank: Optional[int] = None,
    ):
        if n_qubits < 1:
            raise ValueError(f"n_qubits must be positive, got {n_qubits}")
        rows = [g.copy() for g in generators]
        for i, row in enumerate(rows):
            if len(row) != n_qubits:
                raise ValueError(
                    f"Generator {i} acts on {len(row)} qubits, expected {n_qubits}"
                )
        if rank is None:
            rank = len(rows)
        if not 0 <= rank <= min(len(rows), n_qubits):
            raise ValueError(
                f"rank must lie in [0, {min(len(rows), n_qubits)}], got {rank}"
            )
        _check_generators(rows[:rank])
        self.n_qubits = n_qubits
        self.rank = rank
        self._rows: List[stim.PauliString] = rows

    # ------------------------------------------------------------------ builders

    @classmethod
    def from_rows(
        cls,
        signs: Sequence[int],
        xs: np.ndarray,
        zs: np.ndarray,
        rank: Optional[int] = None,
    ) -> "StabilizerState":
        """Build a state from explicit (sign, X-bits, Z-bits) rows.

        ``xs`` and ``zs`` are boolean arrays of shape ``(rows, n_qubits)``;
        ``signs`` holds ``+1`` / ``-1`` per row.
        """
        xs = np.atleast_2d(np.asarray(xs, dtype=bool))
        zs = np.atleast_2d(np.asarray(zs, dtype=bool))
        if xs.shape != zs.shape:
            raise ValueError(f"xs and zs shapes differ: {xs.shape} vs {zs.shape}")
        if len(signs) != xs.shape[0]:
            raise ValueError(
                f"Expected {xs.shape[0]} signs, got {len(signs)}"
            )
        rows = []
        for sign, x_row, z_row in zip(signs, xs, zs):
            if sign not in (1, -1):
                raise ValueError(f"Row signs must be +1 or -1, got {sign}")
            rows.append(stim.PauliString.from_numpy(xs=x_row, zs=z_row, sign=int(sign)))
        return cls(xs.shape[1], rows, rank)

    @classmethod
    def product_zero(cls, n_qubits: int) -> "StabilizerState":
        """|0...0>, stabilized by Z_0, ..., Z_{n-1}."""
        return cls(n_qubits, [_single_z(n_qubits, q) for q in range(n_qubits)])

    @classmethod
    def maximally_mixed(cls, n_qubits: int) -> "StabilizerState":
        """The rank-0 state: no constraint on any qubit."""
        return cls(n_qubits, [], 0)

    # ------------------------------------------------------------------ reading

    @property
    def is_pure(self) -> bool:
        return self.rank == self.n_qubits

    def stabilizers(self) -> List[stim.PauliString]:
        """Copies of the active generators."""
        return [row.copy() for row in self._rows[: self.rank]]

    def pauli(self, row: int, qubit: int) -> int:
        """Pauli type (0=I, 1=X, 2=Y, 3=Z) of generator ``row`` on ``qubit``."""
        self._check_row(row)
        self._check_qubit(qubit)
        return self._rows[row][qubit]

    def xz_bits(self, row: int, qubit: int) -> Tuple[bool, bool]:
        """(X-bit, Z-bit) of generator ``row`` on ``qubit``."""
        op = self.pauli(row, qubit)
        return op in (PAULI_X, PAULI_Y), op in (PAULI_Y, PAULI_Z)

    def sign(self, row: int) -> int:
        self._check_row(row)
        return int(self._rows[row].sign.real)

    def to_numpy(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Active rows as ``(xs, zs, signs)`` with shapes ``(rank, n)``, ``(rank, n)``, ``(rank,)``."""
        xs = np.zeros((self.rank, self.n_qubits), dtype=bool)
        zs = np.zeros((self.rank, self.n_qubits), dtype=bool)
        signs = np.ones(self.rank, dtype=np.int8)
        for i, row in enumerate(self._rows[: self.rank]):
            xs[i], zs[i] = row.to_numpy()
            signs[i] = int(row.sign.real)
        return xs, zs, signs

    # ------------------------------------------------------------------ mutation

    def apply(self, gate: str, *targets: int) -> None:
        """Conjugate every active generator by one elementary gate, in place."""
        if gate in SINGLE_QUBIT_GATES:
            arity = 1
        elif gate in TWO_QUBIT_GATES:
            arity = 2
        else:
            raise ValueError(f"Unknown gate: '{gate}'")
        if len(targets) != arity:
            raise ValueError(f"{gate} acts on {arity} qubit(s), got targets {targets}")
        for q in targets:
            self._check_qubit(q)
        if arity == 2 and targets[0] == targets[1]:
            raise ValueError(f"{gate} needs two distinct qubits, got {targets}")
        if gate == "I" or self.rank == 0:
            return
        instruction = stim.CircuitInstruction(gate, list(targets))
        for i in range(self.rank):
            self._rows[i] = self._rows[i].after(instruction)

    def set_sign(self, row: int, sign: int) -> None:
        self._check_row(row)
        if sign not in (1, -1):
            raise ValueError(f"sign must be +1 or -1, got {sign}")
        self._rows[row].sign = sign

    def project_z(self, qubit: int) -> Tuple[Optional[int], Optional[int]]:
        """Project onto the Z eigenbasis of ``qubit``.

        Returns ``(None, result)`` when the outcome is fixed by the state, and
        ``(row, None)`` when it is not; in that case generator ``row`` now
        reads ``+Z_qubit`` and the caller chooses its sign with ``set_sign``.
        """
        self._check_qubit(qubit)
        active = self._rows[: self.rank]
        anticommuting = [
            i for i, row in enumerate(active) if row[qubit] in (PAULI_X, PAULI_Y)
        ]
        if anticommuting:
            pivot = anticommuting[0]
            for i in anticommuting[1:]:
                self._rows[i] = self._rows[i] * self._rows[pivot]
            self._rows[pivot] = _single_z(self.n_qubits, qubit)
            return pivot, None

        target = np.zeros(2 * self.n_qubits, dtype=np.uint8)
        target[self.n_qubits + qubit] = 1
        if self.rank:
            xs, zs, _ = self.to_numpy()
            columns = np.concatenate([xs, zs], axis=1).T.astype(np.uint8)
            combination = solve_gf2(columns, target)
        else:
            combination = None
        if combination is not None:
            product = stim.PauliString(self.n_qubits)
            for i in np.flatnonzero(combination):
                product *= active[i]
            return None, int(product.sign.real)

        # Z_qubit commutes with the group without belonging to it: one more generator.
        row = self.rank
        if row < len(self._rows):
            self._rows[row] = _single_z(self.n_qubits, qubit)
        else:
            self._rows.append(_single_z(self.n_qubits, qubit))
        self.rank += 1
        return row, None

    # ------------------------------------------------------------------ misc

    def copy(self) -> "StabilizerState":
        return StabilizerState(self.n_qubits, [r.copy() for r in self._rows], self.rank)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StabilizerState):
            return NotImplemented
        return (
            self.n_qubits == other.n_qubits
            and self.rank == other.rank
            and self._rows[: self.rank] == other._rows[: other.rank]
        )

    def __repr__(self) -> str:
        rows = ", ".join(str(r) for r in self._rows[: self.rank])
        return f"StabilizerState(n_qubits={self.n_qubits}, rank={self.rank}, [{rows}])"

    def _check_qubit(self, qubit: int) -> None:
        if not 0 <= qubit < self.n_qubits:
            raise ValueError(f"Qubit {qubit} out of range for {self.n_qubits} qubits")

    def _check_row(self, row: int) -> None:
        if not 0 <= row < self.rank:
            raise ValueError(f"Row {row} out of range for rank {self.rank}")


def _check_generators(rows: Sequence[stim.PauliString]) -> None:
    """Active generators must pairwise commute and be independent."""
    for i, row in enumerate(rows):
        for j in range(i + 1, len(rows)):
            if not row.commutes(rows[j]):
                raise ValueError(f"Generators {i} and {j} anticommute: {row}, {rows[j]}")
    if not rows:
        return
    bits = np.array([np.concatenate(row.to_numpy()) for row in rows], dtype=np.uint8)
    if rank_gf2(bits) < len(rows):
        raise ValueError(f"The {len(rows)} active generators are not independent")


def _single_z(n_qubits: int, qubit: int) -> stim.PauliString:
    pauli = stim.PauliString(n_qubits)
    pauli[qubit] = PAULI_Z
    return pauli
