"""S-box generation: S[x] = Affine(Inverse(x)) for a chosen matrix and constant.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import logging
from typing import List, Sequence

from . import affine, galois
from .constants import AES_CONSTANT, SBOX_SIZE
from .errors import NonBijectiveSBoxError

logger = logging.getLogger(__name__)


def generate_sbox(matrix: Sequence[int], constant: int = AES_CONSTANT) -> bytes:
    """Build the 256-entry forward S-box.

    Only a matrix that passes ``affine.is_valid`` is guaranteed to give a
    bijective table; callers check that first.
    """
    matrix = affine._check_matrix(matrix)
    return bytes(affine.apply(galois.inverse(x), matrix, constant) for x in range(SBOX_SIZE))


def generate_inverse_sbox(sbox: Sequence[int], strict: bool = True) -> bytes:
    """Build the inverse table so that inv[sbox[x]] == x.

    With ``strict`` a non-bijective table raises NonBijectiveSBoxError. Without
    it, colliding entries overwrite each other (last write wins) and slots
    that nothing maps to stay 0.
    """
    if strict and not is_bijective(sbox):
        duplicates = SBOX_SIZE - len(set(sbox)) if len(sbox) == SBOX_SIZE else 0
        raise NonBijectiveSBoxError(
            f"Cannot invert a non-bijective S-box ({duplicates} duplicate value(s))",
            duplicates=duplicates,
        )
    if len(sbox) != SBOX_SIZE:
        raise ValueError(f"S-box must have {SBOX_SIZE} entries, got {len(sbox)}")
    inv = bytearray(SBOX_SIZE)
    for x, y in enumerate(sbox):
        inv[y] = x
    if not strict:
        collisions = SBOX_SIZE - len(set(sbox))
        if collisions:
            logger.warning("Inverse S-box built from non-bijective table: %d slot(s) undefined", collisions)
    return bytes(inv)


def is_bijective(sbox: Sequence[int]) -> bool:
    if len(sbox) != SBOX_SIZE:
        return False
    if any(v < 0 or v > 255 for v in sbox):
        return False
    return len(set(sbox)) == SBOX_SIZE


def is_balanced(sbox: Sequence[int]) -> bool:
    """Each output bit is set for exactly 128 of the 256 inputs."""
    for bit in range(8):
        ones = sum((v >> bit) & 1 for v in sbox)
        if ones != SBOX_SIZE // 2:
            return False
    return True


def find_fixed_points(sbox: Sequence[int]) -> List[int]:
    return [x for x in range(SBOX_SIZE) if sbox[x] == x]


def find_opposite_fixed_points(sbox: Sequence[int]) -> List[int]:
    return [x for x in range(SBOX_SIZE) if sbox[x] == (~x & 0xFF)]


def compare_sboxes(sbox1: Sequence[int], sbox2: Sequence[int]) -> int:
    """Number of positions where the two tables differ."""
    return sum(1 for a, b in zip(sbox1, sbox2) if a != b)


def sbox_entry(sbox: Sequence[int], row: int, col: int) -> int:
    """Paper-table lookup: row is the high nibble, column the low nibble."""
    return sbox[(row << 4) | col]


def substitute(sbox: Sequence[int], byte: int) -> int:
    return sbox[byte & 0xFF]


def substitute_bytes(sbox: Sequence[int], data: bytes) -> bytes:
    return bytes(sbox[b] for b in data)


def format_sbox_table(sbox: Sequence[int], as_hex: bool = False) -> str:
    """Render a 16x16 grid with hex row/column headers."""
    width = 3
    lines = ["    " + "".join(f"{col:X}".rjust(width) for col in range(16))]
    for row in range(16):
        cells = []
        for col in range(16):
            value = sbox[(row << 4) | col]
            cells.append((f"{value:02X}" if as_hex else str(value)).rjust(width))
        lines.append(f"{row:X}".rjust(2) + "  " + "".join(cells))
    return "\n".join(lines)
