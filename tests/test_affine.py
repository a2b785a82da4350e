import random

import pytest

from sboxlab.cipher import affine
from sboxlab.cipher.constants import K44_MATRIX, KAES_MATRIX, KAES_MATRIX_MSB_FIRST

SINGULAR = bytes([0x01, 0x01, 0x04, 0x08, 0x10, 0x20, 0x40, 0x80])
IDENTITY = bytes([1 << i for i in range(8)])


def test_presets_are_valid():
    assert affine.is_valid(K44_MATRIX)
    assert affine.is_valid(KAES_MATRIX)
    assert affine.rank(K44_MATRIX) == 8


def test_singular_matrix():
    assert affine.rank(SINGULAR) == 7
    assert not affine.is_valid(SINGULAR)
    assert affine.invert(SINGULAR) is None
    assert affine.rank(bytes(8)) == 0


def test_identity_inverse():
    assert affine.invert(IDENTITY) == IDENTITY
    assert affine.apply(0x5A, IDENTITY, 0) == 0x5A


def test_validity_iff_invertible_and_double_inversion():
    rng = random.Random(1337)
    seen_singular = seen_valid = 0
    for _ in range(300):
        m = affine.random_matrix(rng)
        inv = affine.invert(m)
        assert affine.is_valid(m) == (inv is not None)
        if inv is None:
            seen_singular += 1
            continue
        seen_valid += 1
        assert affine.invert(inv) == m
    assert seen_singular > 0 and seen_valid > 0


@pytest.mark.parametrize("matrix", [K44_MATRIX, KAES_MATRIX])
def test_apply_inverse_undoes_apply(matrix):
    inv = affine.invert(matrix)
    for x in range(256):
        assert affine.apply_inverse(affine.apply(x, matrix, 0x63), inv, 0x63) == x


def test_bit_edits_return_new_matrix():
    m = bytes(K44_MATRIX)
    m2 = affine.toggle_bit(m, 0, 0)
    assert m == K44_MATRIX
    assert affine.get_bit(m2, 0, 0) == 1 - affine.get_bit(m, 0, 0)
    assert affine.set_bit(m2, 0, 0, affine.get_bit(m, 0, 0)) == m
    assert affine.set_bit(m, 3, 7, 1)[3] & 0x80


def test_bits_roundtrip():
    bits = affine.matrix_to_bits(K44_MATRIX)
    assert bits[0] == [1, 1, 1, 0, 1, 0, 1, 0]  # 0x57, column j = bit j
    assert affine.bits_to_matrix(bits) == K44_MATRIX
    with pytest.raises(ValueError):
        affine.bits_to_matrix([[0] * 8] * 7)


def test_reverse_row_bits_maps_printed_aes_matrix():
    assert affine.reverse_row_bits(KAES_MATRIX_MSB_FIRST) == KAES_MATRIX
    assert affine.reverse_row_bits(KAES_MATRIX) == KAES_MATRIX_MSB_FIRST


def test_wrong_row_count():
    with pytest.raises(ValueError):
        affine.rank(b"\x01\x02")


def test_preset_lookup():
    assert affine.preset_matrix("k44") == K44_MATRIX
    with pytest.raises(KeyError):
        affine.preset_matrix("nope")


def test_random_valid_matrix():
    m = affine.random_valid_matrix(random.Random(7))
    assert affine.is_valid(m)
    # zero attempts -> K44 fallback
    assert affine.random_valid_matrix(random.Random(7), max_attempts=0) == K44_MATRIX
