from __future__ import annotations

from typing import Optional


class SBoxLabError(Exception):
    """Base class for sboxlab failures."""


class GaloisFieldError(SBoxLabError):
    """The GF(2^8) inverse table failed its self-check."""


class InvalidMatrixError(SBoxLabError, ValueError):
    """Affine matrix has GF(2) rank below 8 and cannot yield a bijective S-box."""

    def __init__(self, matrix: bytes, rank: int):
        self.matrix = bytes(matrix)
        self.rank = rank
        super().__init__(
            f"Affine matrix {self.matrix.hex().upper()} is singular (rank {rank}/8)"
        )


class NonBijectiveSBoxError(SBoxLabError, ValueError):
    """S-box is not a permutation of 0..255."""

    def __init__(self, message: str, duplicates: int = 0):
        self.duplicates = duplicates
        super().__init__(message)


class InvalidPaddingError(SBoxLabError, ValueError):
    """PKCS7 unpadding rejected the decrypted data.

    ``reason`` names the failed check: ``empty``, ``length_out_of_range``,
    ``length_exceeds_data`` or ``byte_mismatch``. A bad padding usually means
    the wrong key or S-box was used, or the ciphertext was corrupted.
    """

    REASONS = ("empty", "length_out_of_range", "length_exceeds_data", "byte_mismatch")

    def __init__(
        self,
        reason: str,
        message: str,
        *,
        position: Optional[int] = None,
        expected: Optional[int] = None,
        actual: Optional[int] = None,
    ):
        if reason not in self.REASONS:
            raise ValueError(f"Unknown padding failure reason: {reason}")
        self.reason = reason
        self.position = position
        self.expected = expected
        self.actual = actual
        super().__init__(message)
