"""sboxlab: affine-matrix S-box design, AES-128 with a custom S-box, and S-box metrics.

Function-level contract::

    generate_sbox(matrix, constant)         -> 256 bytes
    generate_inverse_sbox(sbox)             -> 256 bytes (bijective input)
    is_matrix_valid(matrix)                 -> bool
    invert_matrix(matrix)                   -> 8 bytes, InvalidMatrixError if singular
    encrypt_block / decrypt_block           -> 16 bytes
    encrypt(text, key, sbox)                -> ciphertext bytes (PKCS7 + ECB)
    decrypt(ciphertext, key, sbox)          -> text, InvalidPaddingError on bad padding
    encrypt_with_steps(block, key, sbox)    -> EncryptionTrace (41 steps, 11 round keys)
    calculate_all_metrics(sbox)             -> SBoxMetrics

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

from typing import Sequence

from .cipher import affine
from .cipher.aes import (
    EncryptionStep,
    EncryptionTrace,
    decrypt,
    decrypt_block,
    encrypt,
    encrypt_block,
    encrypt_with_steps,
)
from .cipher.constants import AES_CONSTANT, AES_SBOX, EXPECTED_SBOX44, K44_MATRIX, KAES_MATRIX, PRESET_MATRICES
from .cipher.errors import (
    GaloisFieldError,
    InvalidMatrixError,
    InvalidPaddingError,
    NonBijectiveSBoxError,
    SBoxLabError,
)
from .cipher.sbox import generate_inverse_sbox, generate_sbox, is_balanced, is_bijective
from .cipher.spec import CipherContext
from .evaluation.metrics import AES_METRICS, SBoxMetrics, calculate_all_metrics

__version__ = "0.1.0"


def is_matrix_valid(matrix: Sequence[int]) -> bool:
    return affine.is_valid(matrix)


def invert_matrix(matrix: Sequence[int]) -> bytes:
    inv = affine.invert(matrix)
    if inv is None:
        raise InvalidMatrixError(bytes(matrix), affine.rank(matrix))
    return inv


__all__ = [
    "generate_sbox",
    "generate_inverse_sbox",
    "is_matrix_valid",
    "invert_matrix",
    "is_bijective",
    "is_balanced",
    "encrypt_block",
    "decrypt_block",
    "encrypt",
    "decrypt",
    "encrypt_with_steps",
    "calculate_all_metrics",
    "EncryptionStep",
    "EncryptionTrace",
    "SBoxMetrics",
    "AES_METRICS",
    "CipherContext",
    "SBoxLabError",
    "GaloisFieldError",
    "InvalidMatrixError",
    "NonBijectiveSBoxError",
    "InvalidPaddingError",
    "AES_CONSTANT",
    "AES_SBOX",
    "EXPECTED_SBOX44",
    "K44_MATRIX",
    "KAES_MATRIX",
    "PRESET_MATRICES",
]
