"""Projective Z measurements on mixed stabilizer states."""
from __future__ import annotations

import logging
from typing import Optional, Tuple

import numpy as np

from .tableau import StabilizerState

logger = logging.getLogger(__name__)


class InvalidStateError(RuntimeError):
    """Raised when a measurement meets a tableau whose rank is out of range."""


def _draw_outcome(forced_outcome: Optional[int], rng: Optional[np.random.Generator]) -> int:
    if forced_outcome is not None:
        return forced_outcome
    rng = np.random.default_rng() if rng is None else rng
    return int(rng.choice((-1, 1)))


def measure_z(
    qubit: int,
    state: StabilizerState,
    forced_outcome: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> Tuple[StabilizerState, int, bool]:
    """Measure Z on ``qubit``.

    Returns ``(state, outcome, is_deterministic)`` with ``outcome`` in
    ``{+1, -1}``. The returned state replaces ``state``: a rank-0 input is not
    updated in place but rebuilt as a fresh rank-1 state.

    ``forced_outcome`` fixes the result of a random measurement (replay). It
    is ignored when the state already determines the outcome.
    """
    if isinstance(forced_outcome, bool) or forced_outcome not in (None, 1, -1):
        raise ValueError(f"forced_outcome must be +1, -1 or None, got {forced_outcome}")
    if not 0 <= qubit < state.n_qubits:
        raise ValueError(f"Qubit {qubit} out of range for {state.n_qubits} qubits")
    if not 0 <= state.rank <= state.n_qubits:
        raise InvalidStateError(
            f"Invalid state for measurement: rank={state.rank}, n_qubits={state.n_qubits}"
        )

    if state.rank > 0:
        anticommuting_index, result = state.project_z(qubit)
        if result is not None:
            if forced_outcome is not None and forced_outcome != result:
                logger.debug(
                    "Qubit %d: forced outcome %d overridden by deterministic result %d",
                    qubit, forced_outcome, result,
                )
            return state, result, True
        outcome = _draw_outcome(forced_outcome, rng)
        state.set_sign(anticommuting_index, outcome)
        return state, outcome, False

    # Rank 0: nothing to update, the state becomes +-Z_qubit.
    outcome = _draw_outcome(forced_outcome, rng)
    zs = np.zeros((1, state.n_qubits), dtype=bool)
    zs[0, qubit] = True
    new_state = StabilizerState.from_rows([outcome], np.zeros_like(zs), zs)
    return new_state, outcome, False
