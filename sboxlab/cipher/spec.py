from __future__ import annotations

import json
from functools import lru_cache
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from . import aes, affine
from .constants import AES_CONSTANT, KEY_SIZE, MATRIX_ROWS
from .errors import InvalidMatrixError, NonBijectiveSBoxError
from .sbox import generate_inverse_sbox, generate_sbox, is_bijective


@lru_cache(maxsize=64)
def _cached_sbox(matrix: bytes, constant: int) -> bytes:
    return generate_sbox(matrix, constant)


def _parse_byte_list(v: Any, expected: Optional[int], what: str) -> bytes:
    if isinstance(v, str):
        cleaned = "".join(v.split()).replace("0x", "").replace("0X", "")
        v = bytes.fromhex(cleaned)
    elif isinstance(v, (list, tuple)):
        parsed: List[int] = []
        for item in v:
            if isinstance(item, str):
                item = int(item, 16)
            if not 0 <= int(item) <= 255:
                raise ValueError(f"{what} entries must be bytes (0..255), got {item}")
            parsed.append(int(item))
        v = bytes(parsed)
    v = bytes(v)
    if expected is not None and len(v) != expected:
        raise ValueError(f"{what} must be {expected} bytes, got {len(v)}")
    return v


class CipherContext(BaseModel):
    """Matrix, constant and key travelling together through encrypt and decrypt.

    The S-box is derived from this value alone, so a later edit to some
    external matrix cannot desynchronise decryption from encryption. Build
    through ``CipherContext.create`` to get the singular-matrix check.
    """

    model_config = ConfigDict(frozen=True)

    matrix: bytes = Field(..., description="8 row bytes of the affine matrix")
    constant: int = Field(default=AES_CONSTANT, ge=0, le=255)
    key: bytes = Field(default=b"", description="Raw key, at most 16 bytes before padding")
    name: str = Field(default="custom", max_length=80)

    @field_validator("matrix", mode="before")
    @classmethod
    def _matrix_bytes(cls, v: Any) -> bytes:
        return _parse_byte_list(v, MATRIX_ROWS, "matrix")

    @field_validator("constant", mode="before")
    @classmethod
    def _constant_int(cls, v: Any) -> int:
        if isinstance(v, str):
            return int(v, 16)
        return v

    @field_validator("key", mode="before")
    @classmethod
    def _key_bytes(cls, v: Any) -> bytes:
        if isinstance(v, str):
            v = v.encode("utf-8")
        elif not isinstance(v, (bytes, bytearray, memoryview)):
            raise ValueError(f"key must be str or bytes, got {type(v).__name__}")
        v = bytes(v)
        if len(v) > KEY_SIZE:
            raise ValueError(f"key must be at most {KEY_SIZE} bytes, got {len(v)}")
        return v

    @classmethod
    def create(
        cls,
        matrix: Union[bytes, List[int], str],
        constant: int = AES_CONSTANT,
        key: Union[str, bytes] = b"",
        *,
        name: str = "custom",
        allow_singular: bool = False,
    ) -> "CipherContext":
        ctx = cls(matrix=matrix, constant=constant, key=key, name=name)
        if not allow_singular:
            r = affine.rank(ctx.matrix)
            if r != MATRIX_ROWS:
                raise InvalidMatrixError(ctx.matrix, r)
        return ctx

    @classmethod
    def from_preset(cls, preset: str, key: Union[str, bytes] = b"", constant: int = AES_CONSTANT) -> "CipherContext":
        return cls.create(affine.preset_matrix(preset), constant, key, name=preset.upper())

    # -- derived values ----------------------------------------------------

    @property
    def sbox(self) -> bytes:
        return _cached_sbox(self.matrix, self.constant)

    @property
    def inverse_sbox(self) -> bytes:
        return generate_inverse_sbox(self.sbox, strict=True)

    @property
    def key_bytes(self) -> bytes:
        return aes.normalize_key(self.key)

    @property
    def is_valid(self) -> bool:
        return affine.is_valid(self.matrix)

    def with_key(self, key: Union[str, bytes]) -> "CipherContext":
        return type(self).create(self.matrix, self.constant, key, name=self.name, allow_singular=True)

    # -- cipher ------------------------------------------------------------

    def encrypt(self, plaintext: str) -> bytes:
        return aes.encrypt(plaintext, self.key_bytes, self.sbox)

    def decrypt(self, ciphertext: bytes) -> str:
        return aes.decrypt(ciphertext, self.key_bytes, self.sbox)

    def encrypt_block(self, block: bytes) -> bytes:
        return aes.encrypt_block(block, self.key_bytes, self.sbox)

    def decrypt_block(self, block: bytes) -> bytes:
        return aes.decrypt_block(block, self.key_bytes, self.sbox)

    def encrypt_with_steps(self, block: bytes) -> aes.EncryptionTrace:
        return aes.encrypt_with_steps(block, self.key_bytes, self.sbox)

    # -- hex export / import -------------------------------------------------

    def to_hex_dict(self, include_key: bool = False) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "name": self.name,
            "matrix": [f"{b:02X}" for b in self.matrix],
            "constant": f"{self.constant:02X}",
            "sbox": self.sbox.hex().upper(),
        }
        if include_key:
            out["key"] = self.key.hex().upper()
        return out

    @classmethod
    def from_hex_dict(cls, data: Dict[str, Any], key: Union[str, bytes, None] = None) -> "CipherContext":
        """Rebuild a context from ``to_hex_dict`` output.

        A stored ``sbox`` must match the one regenerated from the matrix.
        """
        raw_key: Union[str, bytes] = b""
        if key is not None:
            raw_key = key
        elif data.get("key"):
            raw_key = bytes.fromhex(data["key"])
        ctx = cls.create(
            data["matrix"],
            data.get("constant", f"{AES_CONSTANT:02X}"),
            raw_key,
            name=data.get("name", "custom"),
            allow_singular=True,
        )
        stored = data.get("sbox")
        if stored:
            stored_bytes = _parse_byte_list(stored, 256, "sbox")
            if stored_bytes != ctx.sbox:
                raise ValueError("Stored S-box does not match the S-box generated from the matrix")
        if not ctx.is_valid:
            raise InvalidMatrixError(ctx.matrix, affine.rank(ctx.matrix))
        if not is_bijective(ctx.sbox):
            raise NonBijectiveSBoxError("Imported configuration does not yield a bijective S-box")
        return ctx

    def to_json(self, include_key: bool = False) -> str:
        return json.dumps(self.to_hex_dict(include_key=include_key), indent=2, sort_keys=True)

    @classmethod
    def from_json(cls, text: str, key: Union[str, bytes, None] = None) -> "CipherContext":
        return cls.from_hex_dict(json.loads(text), key=key)
