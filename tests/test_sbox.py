import random

import pytest

from sboxlab import generate_inverse_sbox, generate_sbox
from sboxlab.cipher import affine
from sboxlab.cipher.constants import AES_SBOX, EXPECTED_SBOX44, K44_MATRIX, KAES_MATRIX
from sboxlab.cipher.errors import NonBijectiveSBoxError
from sboxlab.cipher.sbox import (
    compare_sboxes,
    find_fixed_points,
    find_opposite_fixed_points,
    format_sbox_table,
    is_balanced,
    is_bijective,
    sbox_entry,
    substitute_bytes,
)


def test_k44_reference_table():
    sbox = generate_sbox(K44_MATRIX, 0x63)
    assert sbox[:3] == bytes([0x63, 0x34, 0xA5])
    assert sbox == EXPECTED_SBOX44


def test_kaes_reproduces_standard_aes_sbox():
    sbox = generate_sbox(KAES_MATRIX, 0x63)
    assert list(sbox[:3]) == [99, 124, 119]
    assert sbox == AES_SBOX


@pytest.mark.parametrize("seed", [1, 2, 3, 1337])
def test_inverse_roundtrip_for_random_invertible_matrices(seed):
    rng = random.Random(seed)
    matrix = affine.random_valid_matrix(rng)
    constant = rng.randrange(256)
    sbox = generate_sbox(matrix, constant)
    inv = generate_inverse_sbox(sbox)
    assert is_bijective(sbox)
    for x in range(256):
        assert inv[sbox[x]] == x


def test_singular_matrix_gives_non_bijective_sbox():
    sbox = generate_sbox(bytes([0x01, 0x01, 0x04, 0x08, 0x10, 0x20, 0x40, 0x80]))
    assert not is_bijective(sbox)
    with pytest.raises(NonBijectiveSBoxError) as excinfo:
        generate_inverse_sbox(sbox)
    assert excinfo.value.duplicates > 0


def test_non_strict_inverse_is_last_write_wins():
    sbox = bytes([0] * 256)
    inv = generate_inverse_sbox(sbox, strict=False)
    assert inv[0] == 255
    assert inv[1:] == bytes(255)


def test_balanced_and_fixed_points():
    assert is_balanced(AES_SBOX)
    assert is_balanced(EXPECTED_SBOX44)
    # the AES S-box has neither fixed nor opposite fixed points
    assert find_fixed_points(AES_SBOX) == []
    assert find_opposite_fixed_points(AES_SBOX) == []
    identity = bytes(range(256))
    assert len(find_fixed_points(identity)) == 256


def test_compare_and_lookup():
    assert compare_sboxes(AES_SBOX, AES_SBOX) == 0
    assert compare_sboxes(AES_SBOX, EXPECTED_SBOX44) > 200
    assert sbox_entry(AES_SBOX, 0x5, 0x3) == AES_SBOX[0x53] == 0xED
    assert substitute_bytes(AES_SBOX, b"\x00\x01") == b"\x63\x7c"


def test_format_table():
    text = format_sbox_table(AES_SBOX, as_hex=True)
    lines = text.splitlines()
    assert len(lines) == 17
    assert lines[1].split()[:3] == ["0", "63", "7C"]


@pytest.mark.parametrize("matrix", [bytes(7), bytes(9), b""])
def test_generate_sbox_rejects_wrong_matrix_length(matrix):
    with pytest.raises(ValueError, match="8 rows"):
        generate_sbox(matrix)
