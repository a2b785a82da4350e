from __future__ import annotations

from typing import List, Tuple

from . import affine
from .constants import SBOX_SIZE
from .sbox import is_balanced, is_bijective
from .spec import CipherContext


def validate_context(ctx: CipherContext) -> Tuple[bool, List[str]]:
    errs: List[str] = []

    r = affine.rank(ctx.matrix)
    if r != 8:
        errs.append(f"Affine matrix is singular (GF(2) rank {r}/8)")

    sbox = ctx.sbox
    if not is_bijective(sbox):
        errs.append("S-box is not bijective; decryption and inverse S-box are undefined")
    if not is_balanced(sbox):
        errs.append("S-box output bits are not balanced")

    if len(ctx.key) == 0:
        errs.append("Key is empty (it will be all zero bytes after padding)")

    return (len(errs) == 0), errs


def validate_sbox(sbox: bytes) -> Tuple[bool, List[str]]:
    errs: List[str] = []
    if len(sbox) != SBOX_SIZE:
        errs.append(f"S-box must have {SBOX_SIZE} entries, got {len(sbox)}")
        return False, errs
    if not is_bijective(sbox):
        dupes = SBOX_SIZE - len(set(sbox))
        errs.append(f"S-box is not bijective ({dupes} duplicate value(s))")
    if not is_balanced(sbox):
        errs.append("S-box output bits are not balanced")
    return (len(errs) == 0), errs
