"""Linear algebra helpers over GF(2) used by the stabilizer tableau."""
from __future__ import annotations

from typing import Optional

import numpy as np


def rank_gf2(matrix: np.ndarray) -> int:
    """Return the rank of ``matrix`` over GF(2)."""
    mat = (np.asarray(matrix) & 1).astype(np.uint8)
    if mat.ndim != 2 or mat.size == 0:
        return 0
    rows, cols = mat.shape
    rank = 0
    for col in range(cols):
        pivot = None
        for r in range(rank, rows):
            if mat[r, col]:
                pivot = r
                break
        if pivot is None:
            continue
        if pivot != rank:
            mat[[rank, pivot]] = mat[[pivot, rank]]
        for r in range(rows):
            if r != rank and mat[r, col]:
                mat[r, :] ^= mat[rank, :]
        rank += 1
        if rank == rows:
            break
    return rank


def solve_gf2(matrix: np.ndarray, rhs: np.ndarray) -> Optional[np.ndarray]:
    """Solve ``matrix @ x = rhs`` over GF(2); return one solution or None if inconsistent.

    ``matrix`` has shape ``(m, n)`` and ``rhs`` shape ``(m,)``. Free variables
    are set to zero.
    """
    mat = (np.asarray(matrix) & 1).astype(np.uint8)
    b = (np.asarray(rhs) & 1).astype(np.uint8)
    m, n = mat.shape
    if b.shape != (m,):
        raise ValueError(f"rhs must have shape ({m},), got {b.shape}")
    aug = np.concatenate([mat, b.reshape(m, 1)], axis=1)
    row = 0
    pivots: list[int] = []
    for col in range(n):
        pivot = next((r for r in range(row, m) if aug[r, col]), None)
        if pivot is None:
            continue
        if pivot != row:
            aug[[row, pivot]] = aug[[pivot, row]]
        pivots.append(col)
        for r in range(m):
            if r != row and aug[r, col]:
                aug[r, :] ^= aug[row, :]
        row += 1
        if row == m:
            break
    if np.any(aug[row:, n]):
        return None
    x = np.zeros(n, dtype=np.uint8)
    # Fully reduced: each pivot row holds a single pivot among the pivot columns.
    for r, col in enumerate(pivots):
        x[col] = aug[r, n]
    return x

