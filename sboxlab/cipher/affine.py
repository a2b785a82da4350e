"""Bit-level 8x8 affine transformation over GF(2).

A matrix is 8 row bytes; bit j of row i is the coefficient K[i][j]. The
forward transform is B(X) = (K . X + C) mod 2. Every operation here returns
new values; matrices passed in are never modified.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence

from .constants import AES_CONSTANT, K44_MATRIX, MATRIX_ROWS, PRESET_MATRICES

logger = logging.getLogger(__name__)


def _check_matrix(matrix: Sequence[int]) -> bytes:
    if len(matrix) != MATRIX_ROWS:
        raise ValueError(f"Affine matrix must have {MATRIX_ROWS} rows, got {len(matrix)}")
    return bytes(matrix)


def get_bit(matrix: Sequence[int], row: int, col: int) -> int:
    return (matrix[row] >> col) & 1


def set_bit(matrix: Sequence[int], row: int, col: int, value: bool | int) -> bytes:
    """Return a copy of ``matrix`` with K[row][col] set to ``value``."""
    rows = bytearray(_check_matrix(matrix))
    if value:
        rows[row] |= 1 << col
    else:
        rows[row] &= ~(1 << col) & 0xFF
    return bytes(rows)


def toggle_bit(matrix: Sequence[int], row: int, col: int) -> bytes:
    """Return a copy of ``matrix`` with K[row][col] flipped."""
    rows = bytearray(_check_matrix(matrix))
    rows[row] ^= 1 << col
    return bytes(rows)


def matrix_to_bits(matrix: Sequence[int]) -> List[List[int]]:
    """8 row bytes -> 8x8 grid of 0/1 (column j is bit j)."""
    return [[(matrix[i] >> j) & 1 for j in range(8)] for i in range(8)]


def bits_to_matrix(bits: Sequence[Sequence[int]]) -> bytes:
    """8x8 grid of 0/1 -> 8 row bytes."""
    if len(bits) != 8 or any(len(row) != 8 for row in bits):
        raise ValueError("Bit matrix must be 8x8")
    rows = bytearray(8)
    for i in range(8):
        for j in range(8):
            if bits[i][j]:
                rows[i] |= 1 << j
    return bytes(rows)


def rank(matrix: Sequence[int]) -> int:
    """GF(2) rank by Gaussian elimination."""
    m = matrix_to_bits(_check_matrix(matrix))
    r = 0
    for col in range(8):
        pivot = next((row for row in range(r, 8) if m[row][col] == 1), None)
        if pivot is None:
            continue
        m[r], m[pivot] = m[pivot], m[r]
        for row in range(8):
            if row != r and m[row][col] == 1:
                m[row] = [a ^ b for a, b in zip(m[row], m[r])]
        r += 1
    return r


def is_valid(matrix: Sequence[int]) -> bool:
    """A matrix is usable for S-box generation iff it is invertible (rank 8)."""
    return rank(matrix) == 8


def invert(matrix: Sequence[int]) -> Optional[bytes]:
    """Invert over GF(2) by Gauss-Jordan on [A | I]. Returns None if singular."""
    m = matrix_to_bits(_check_matrix(matrix))
    aug = [m[i] + [1 if j == i else 0 for j in range(8)] for i in range(8)]

    for col in range(8):
        pivot = next((row for row in range(col, 8) if aug[row][col] == 1), None)
        if pivot is None:
            return None
        aug[col], aug[pivot] = aug[pivot], aug[col]
        for row in range(8):
            if row != col and aug[row][col] == 1:
                aug[row] = [a ^ b for a, b in zip(aug[row], aug[col])]

    return bits_to_matrix([row[8:] for row in aug])


def _multiply(x: int, matrix: Sequence[int]) -> int:
    result = 0
    for i in range(8):
        # parity of (row i AND x) is output bit i
        if bin(matrix[i] & x).count("1") & 1:
            result |= 1 << i
    return result


def apply(x: int, matrix: Sequence[int], constant: int = AES_CONSTANT) -> int:
    """Forward affine map: (K . x) XOR constant."""
    return _multiply(x & 0xFF, matrix) ^ (constant & 0xFF)


def apply_inverse(y: int, inv_matrix: Sequence[int], constant: int = AES_CONSTANT) -> int:
    """Undo ``apply`` given the inverse matrix: K^-1 . (y XOR constant)."""
    return _multiply((y ^ constant) & 0xFF, inv_matrix)


def preset_matrix(name: str) -> bytes:
    key = name.upper()
    if key not in PRESET_MATRICES:
        raise KeyError(f"Unknown matrix preset: {name} (choose from {sorted(PRESET_MATRICES)})")
    return PRESET_MATRICES[key]


def random_matrix(rng: Optional[random.Random] = None) -> bytes:
    rng = rng or random.Random()
    return bytes(rng.randrange(0, 256) for _ in range(8))


def random_valid_matrix(rng: Optional[random.Random] = None, max_attempts: int = 1000) -> bytes:
    """Draw random matrices until one is invertible; K44 if none is found."""
    rng = rng or random.Random()
    for attempt in range(1, max_attempts + 1):
        candidate = random_matrix(rng)
        if is_valid(candidate):
            logger.debug("Found invertible matrix after %d attempt(s)", attempt)
            return candidate
    logger.warning("No invertible matrix in %d attempts; falling back to K44", max_attempts)
    return K44_MATRIX


def reverse_row_bits(matrix: Sequence[int]) -> bytes:
    """Convert between the MSB-first printed layout and bit j = column j.

    The conversion is its own inverse.
    """
    return bytes(int(f"{row:08b}"[::-1], 2) for row in _check_matrix(matrix))
