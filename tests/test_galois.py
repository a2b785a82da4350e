import random

import pytest

from sboxlab.cipher import galois
from sboxlab.cipher.constants import INVERSE_TABLE


def test_multiply_known_values():
    # FIPS-197 section 4.2 example
    assert galois.multiply(0x57, 0x83) == 0xC1
    assert galois.multiply(0x57, 0x13) == 0xFE
    assert galois.multiply(0, 0xAB) == 0
    assert galois.multiply(1, 0xAB) == 0xAB


def test_multiply_commutative():
    rng = random.Random(1337)
    for _ in range(200):
        a, b = rng.randrange(256), rng.randrange(256)
        assert galois.multiply(a, b) == galois.multiply(b, a)


def test_add_is_xor():
    assert galois.add(0x57, 0x83) == 0xD4


@pytest.mark.parametrize("x", [0x00, 0x01, 0x57, 0x80, 0xAE, 0xFF])
def test_xtime_matches_multiply_by_two(x):
    assert galois.xtime(x) == galois.multiply(x, 2)


@pytest.mark.parametrize("c", [0x01, 0x02, 0x03, 0x09, 0x0B, 0x0D, 0x0E, 0x05, 0x63])
def test_multiply_by_constant(c):
    for x in range(256):
        assert galois.multiply_by_constant(x, c) == galois.multiply(x, c)


def test_inverse_table_and_computed_agree():
    assert galois.inverse(0) == 0
    assert galois.inverse_computed(0) == 0
    for x in range(1, 256):
        assert galois.multiply(x, galois.inverse(x)) == 1
        assert galois.inverse_computed(x) == INVERSE_TABLE[x]


def test_power():
    assert galois.power(0x03, 0) == 1
    assert galois.power(0, 5) == 0
    assert galois.power(0x53, 254) == galois.inverse(0x53)
    assert galois.power(0x02, 8) == 0x1B


def test_verify_inverse_table():
    assert galois.verify_inverse_table() is True
