"""Initial states for monitored brickwork circuits."""
from __future__ import annotations

from typing import Optional

import numpy as np

from .tableau import StabilizerState

STATE_TYPES = (
    "product_0",
    "product_rand",
    "bell_pairs",
    "bell_pairs_nnn",
    "fully_mixed",
    "maximally_entangled",
)


def _bell_pair(state: StabilizerState, q1: int, q2: int) -> None:
    state.apply("H", q1)
    state.apply("CNOT", q1, q2)


def create_initial_state(
    L: int, state_type: str, rng: Optional[np.random.Generator] = None
) -> StabilizerState:
    """Create an ``L``-qubit initial state.

    state_type:
        "product_0"           -> |0>^L
        "product_rand"        -> each qubit |0> or |1> with probability 1/2
        "bell_pairs"          -> (|00> + |11>) on (0,1), (2,3), ...
        "bell_pairs_nnn"      -> Bell pairs on next-nearest neighbours
                                 (0,2), (1,3), (4,6), (5,7), ...
                                 (every qubit is paired, so L % 4 == 0)
        "fully_mixed"         -> rank-0 state
        "maximally_entangled" -> stabilized by X_i Z_{L-1-i} with random signs
    """
    if L < 1:
        raise ValueError(f"L must be positive, got {L}")
    rng = np.random.default_rng() if rng is None else rng

    if state_type == "product_0":
        return StabilizerState.product_zero(L)

    if state_type == "product_rand":
        state = StabilizerState.product_zero(L)
        for q in range(L):
            if rng.random() < 0.5:
                state.apply("X", q)
        return state

    if state_type == "bell_pairs":
        if L % 2 != 0:
            raise ValueError("L must be even for Bell pairs")
        state = StabilizerState.product_zero(L)
        for q in range(0, L - 1, 2):
            _bell_pair(state, q, q + 1)
        return state

    if state_type == "bell_pairs_nnn":
        if L % 4 != 0:
            raise ValueError("L must be a multiple of 4 for next-nearest-neighbour Bell pairs")
        state = StabilizerState.product_zero(L)
        for block in range(0, L, 4):
            _bell_pair(state, block, block + 2)
            _bell_pair(state, block + 1, block + 3)
        return state

    if state_type == "fully_mixed":
        return StabilizerState.maximally_mixed(L)

    if state_type == "maximally_entangled":
        xs = np.eye(L, dtype=bool)
        zs = np.fliplr(np.eye(L, dtype=bool))
        signs = [int(s) for s in rng.choice((1, -1), size=L)]
        return StabilizerState.from_rows(signs, xs, zs)

    raise ValueError(
        f"Invalid state_type '{state_type}'. Must be one of {', '.join(STATE_TYPES)}."
    )
