"""Roundtrip verification P = D(E(P, K), K) for a CipherContext.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import logging
import random
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from sboxlab.cipher.aes import decrypt_block, encrypt_block
from sboxlab.cipher.constants import BLOCK_SIZE, KEY_SIZE
from sboxlab.cipher.errors import SBoxLabError
from sboxlab.cipher.spec import CipherContext
from sboxlab.utils.repro import make_rng

logger = logging.getLogger(__name__)


@dataclass
class RoundtripFailure:
    """Details of a single failed test vector."""
    vector_index: int
    mode: str                # "block" or "text"
    plaintext_hex: str
    key_hex: str
    ciphertext_hex: str
    decrypted_hex: str
    error: Optional[str]


@dataclass
class RoundtripResult:
    name: str
    total_vectors: int
    passed: int
    failed: int
    failures: List[RoundtripFailure] = field(default_factory=list)
    elapsed_seconds: float = 0.0
    seed: int = 1337

    @property
    def success_rate(self) -> float:
        return self.passed / self.total_vectors if self.total_vectors > 0 else 0.0

    @property
    def is_perfect(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def summary(self) -> str:
        status = "PASS" if self.is_perfect else "FAIL"
        return (
            f"[{status}] {self.name}: {self.passed}/{self.total_vectors} vectors passed "
            f"({self.elapsed_seconds:.2f}s)"
        )


def _rand_bytes(rng: random.Random, n: int) -> bytes:
    return bytes(rng.randrange(0, 256) for _ in range(n))


def _rand_text(rng: random.Random, n: int) -> str:
    return "".join(chr(rng.randrange(32, 127)) for _ in range(n))


def run_roundtrip_tests(
    context: CipherContext,
    *,
    num_vectors: int = 200,
    seed: int = 1337,
    max_text_length: int = 64,
    max_failures_recorded: int = 10,
) -> RoundtripResult:
    """Check block and text roundtrips with random keys.

    Even-indexed vectors test one 16-byte block under a random 16-byte key.
    Odd-indexed vectors test PKCS7-padded text of random length under a
    random key of 1..16 bytes.

    Args:
        context: Matrix and constant to test; its own key is ignored.
        num_vectors: Number of random vectors.
        seed: Random seed for reproducibility.
        max_text_length: Longest random text, in characters.
        max_failures_recorded: Maximum number of failure details to keep.
    """
    sbox = context.sbox
    rng = make_rng(seed, stream=2)
    passed = 0
    failures: List[RoundtripFailure] = []
    failed = 0
    start = time.perf_counter()

    for i in range(num_vectors):
        if i % 2 == 0:
            mode = "block"
            key = _rand_bytes(rng, KEY_SIZE)
            pt = _rand_bytes(rng, BLOCK_SIZE)
        else:
            mode = "text"
            key = _rand_bytes(rng, rng.randint(1, KEY_SIZE))
            pt = _rand_text(rng, rng.randint(0, max_text_length)).encode("ascii")

        ct = b""
        try:
            if mode == "block":
                ct = encrypt_block(pt, key, sbox)
                pt2 = decrypt_block(ct, key, sbox)
            else:
                ctx = context.with_key(key)
                ct = ctx.encrypt(pt.decode("ascii"))
                pt2 = ctx.decrypt(ct).encode("utf-8")
            error = None
        except SBoxLabError as exc:
            pt2 = b""
            error = f"{type(exc).__name__}: {exc}"

        if error is None and pt2 == pt:
            passed += 1
            continue
        failed += 1
        if len(failures) < max_failures_recorded:
            failures.append(RoundtripFailure(
                vector_index=i,
                mode=mode,
                plaintext_hex=pt.hex(),
                key_hex=key.hex(),
                ciphertext_hex=ct.hex() if ct else "<error>",
                decrypted_hex=pt2.hex() if error is None else "<error>",
                error=error,
            ))

    elapsed = time.perf_counter() - start
    if failed:
        logger.warning("Roundtrip for %s: %d/%d vectors failed", context.name, failed, num_vectors)

    return RoundtripResult(
        name=context.name,
        total_vectors=num_vectors,
        passed=passed,
        failed=failed,
        failures=failures,
        elapsed_seconds=round(elapsed, 4),
        seed=seed,
    )
