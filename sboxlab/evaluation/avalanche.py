"""Cipher-level avalanche measurement for AES-128 with a custom S-box.

Flips one random plaintext (or key) bit per trial and measures the fraction
of ciphertext bits that change. Good diffusion gives a mean close to 0.5.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import random
import statistics
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Sequence

from sboxlab.cipher.aes import encrypt_block
from sboxlab.cipher.constants import BLOCK_SIZE, KEY_SIZE
from sboxlab.utils.repro import make_rng


def _hamming_distance_bytes(a: bytes, b: bytes) -> int:
    if len(a) != len(b):
        raise ValueError("hamming distance length mismatch")
    return sum(bin(x ^ y).count("1") for x, y in zip(a, b))


def _flip_bit(data: bytes, bit_index: int) -> bytes:
    byte_i, bit_i = divmod(bit_index, 8)
    if byte_i < 0 or byte_i >= len(data):
        raise IndexError("bit_index out of range")
    out = bytearray(data)
    out[byte_i] ^= 1 << bit_i
    return bytes(out)


def _rand_bytes(rng: random.Random, n: int) -> bytes:
    return bytes(rng.randrange(0, 256) for _ in range(n))


@dataclass
class AvalancheResult:
    input_type: str             # "plaintext" or "key"
    trials: int
    mean: float = 0.0
    std: float = 0.0
    min_fraction: float = 0.0
    max_fraction: float = 0.0
    fractions: List[float] = field(default_factory=list, repr=False)

    @property
    def deviation(self) -> float:
        return abs(self.mean - 0.5)

    @property
    def passes(self) -> bool:
        """Heuristic: mean within 0.05 of one half."""
        return self.deviation < 0.05

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d.pop("fractions")
        d["passes"] = self.passes
        return d

    def summary(self) -> str:
        status = "PASS" if self.passes else "FAIL"
        return (
            f"[{status}] avalanche({self.input_type}): mean={self.mean:.4f}, "
            f"std={self.std:.4f}, min={self.min_fraction:.4f}, max={self.max_fraction:.4f}"
        )


def _summarize(input_type: str, fractions: List[float]) -> AvalancheResult:
    return AvalancheResult(
        input_type=input_type,
        trials=len(fractions),
        mean=round(statistics.mean(fractions), 6) if fractions else 0.0,
        std=round(statistics.stdev(fractions), 6) if len(fractions) > 1 else 0.0,
        min_fraction=min(fractions) if fractions else 0.0,
        max_fraction=max(fractions) if fractions else 0.0,
        fractions=fractions,
    )


def avalanche_plaintext(sbox: Sequence[int], *, trials: int = 200, seed: int = 1337) -> AvalancheResult:
    rng = make_rng(seed, stream=0)
    total_bits = BLOCK_SIZE * 8
    fractions: List[float] = []
    for _ in range(trials):
        key = _rand_bytes(rng, KEY_SIZE)
        pt = _rand_bytes(rng, BLOCK_SIZE)
        ct = encrypt_block(pt, key, sbox)
        ct2 = encrypt_block(_flip_bit(pt, rng.randrange(total_bits)), key, sbox)
        fractions.append(_hamming_distance_bytes(ct, ct2) / total_bits)
    return _summarize("plaintext", fractions)


def avalanche_key(sbox: Sequence[int], *, trials: int = 200, seed: int = 1337) -> AvalancheResult:
    rng = make_rng(seed, stream=1)
    total_bits = BLOCK_SIZE * 8
    fractions: List[float] = []
    for _ in range(trials):
        key = _rand_bytes(rng, KEY_SIZE)
        pt = _rand_bytes(rng, BLOCK_SIZE)
        ct = encrypt_block(pt, key, sbox)
        ct2 = encrypt_block(pt, _flip_bit(key, rng.randrange(KEY_SIZE * 8)), sbox)
        fractions.append(_hamming_distance_bytes(ct, ct2) / total_bits)
    return _summarize("key", fractions)
