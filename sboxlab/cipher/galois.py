"""GF(2^8) arithmetic over x^8 + x^4 + x^3 + x + 1 (0x11B).

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import logging

from .constants import INVERSE_TABLE, REDUCTION_BYTE
from .errors import GaloisFieldError

logger = logging.getLogger(__name__)


def add(a: int, b: int) -> int:
    """Addition in GF(2^8) is XOR."""
    return a ^ b


def multiply(a: int, b: int) -> int:
    """Multiply two bytes in GF(2^8) (Russian peasant with reduction)."""
    p = 0
    a &= 0xFF
    b &= 0xFF
    for _ in range(8):
        if b & 1:
            p ^= a
        hi_bit = a & 0x80
        a = (a << 1) & 0xFF
        if hi_bit:
            a ^= REDUCTION_BYTE
        b >>= 1
    return p


def xtime(byte: int) -> int:
    """Multiply by 0x02."""
    result = (byte << 1) & 0xFF
    return result ^ REDUCTION_BYTE if byte & 0x80 else result


def multiply_by_constant(byte: int, multiplier: int) -> int:
    """Multiply by one of the fixed MixColumns constants using xtime chains.

    Constants outside {1, 2, 3, 9, 11, 13, 14} fall back to ``multiply``.
    """
    if multiplier == 0x01:
        return byte
    if multiplier == 0x02:
        return xtime(byte)
    if multiplier == 0x03:
        return xtime(byte) ^ byte
    if multiplier in (0x09, 0x0B, 0x0D, 0x0E):
        x2 = xtime(byte)
        x4 = xtime(x2)
        x8 = xtime(x4)
        if multiplier == 0x09:
            return x8 ^ byte
        if multiplier == 0x0B:
            return x8 ^ x2 ^ byte
        if multiplier == 0x0D:
            return x8 ^ x4 ^ byte
        return x8 ^ x4 ^ x2
    return multiply(byte, multiplier)


def power(base: int, exp: int) -> int:
    """base**exp in GF(2^8) by square-and-multiply."""
    if exp == 0:
        return 1
    if base == 0:
        return 0
    result = 1
    b = base
    e = exp
    while e > 0:
        if e & 1:
            result = multiply(result, b)
        b = multiply(b, b)
        e >>= 1
    return result


def inverse(byte: int) -> int:
    """Multiplicative inverse by table lookup; inverse(0) == 0."""
    return INVERSE_TABLE[byte & 0xFF]


def inverse_computed(byte: int) -> int:
    """Multiplicative inverse as byte**254 (Fermat), without the table."""
    if byte == 0:
        return 0
    # byte**(2**8 - 2): six rounds of square-then-multiply, then one square.
    result = byte
    for _ in range(6):
        result = multiply(result, result)
        result = multiply(result, byte)
    return multiply(result, result)


def verify_inverse_table() -> bool:
    """Check both inverse paths against each other and against multiply.

    Raises GaloisFieldError on the first bad entry.
    """
    if inverse(0) != 0 or inverse_computed(0) != 0:
        raise GaloisFieldError("inverse(0) must be 0 by convention")
    for x in range(1, 256):
        inv = inverse(x)
        product = multiply(x, inv)
        if product != 1:
            raise GaloisFieldError(f"Invalid inverse: {x} * {inv} = {product}, expected 1")
        computed = inverse_computed(x)
        if computed != inv:
            raise GaloisFieldError(
                f"Inverse table disagrees with exponentiation at {x}: {inv} != {computed}"
            )
    logger.debug("GF(2^8) inverse table verified for 255 nonzero elements")
    return True


verify_inverse_table()
