"""AES-128 (Nk=4, Nb=4, Nr=10) parameterised by an arbitrary S-box.

The S-box is part of the cipher's identity: it drives SubBytes and the
SubWord step of the key schedule, so the same key bytes expand to different
round keys under different S-boxes.

Messages are PKCS7-padded and processed in ECB mode. ECB leaks equal
plaintext blocks as equal ciphertext blocks; it is kept because this engine
is an auditable teaching cipher, not a production one.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Literal, Optional, Sequence, Tuple, Union

from . import galois
from .constants import (
    BLOCK_SIZE,
    INV_MIX_COLUMNS_MATRIX,
    KEY_SIZE,
    MIX_COLUMNS_MATRIX,
    NB,
    NK,
    NR,
    RCON,
    SBOX_SIZE,
)
from .errors import InvalidPaddingError
from .sbox import generate_inverse_sbox

logger = logging.getLogger(__name__)

# 4 rows x 4 columns; byte i of a block sits at row i % 4, column i // 4.
State = Tuple[Tuple[int, ...], ...]
KeyLike = Union[str, bytes, bytearray]
Operation = Literal["initial", "subBytes", "shiftRows", "mixColumns", "addRoundKey"]

TRACE_LENGTH = 1 + 1 + (NR - 1) * 4 + 3


@dataclass(frozen=True)
class EncryptionStep:
    """One snapshot in an encryption trace."""
    round: int
    operation: Operation
    state: State
    round_key: Optional[State] = None

    def state_bytes(self) -> bytes:
        return state_to_bytes(self.state)

    def to_dict(self) -> Dict[str, object]:
        return {
            "round": self.round,
            "operation": self.operation,
            "state": state_to_bytes(self.state).hex(),
            "round_key": state_to_bytes(self.round_key).hex() if self.round_key else None,
        }


@dataclass(frozen=True)
class EncryptionTrace:
    ciphertext: bytes
    steps: Tuple[EncryptionStep, ...]
    round_keys: Tuple[State, ...]

    def to_dict(self) -> Dict[str, object]:
        return {
            "ciphertext": self.ciphertext.hex(),
            "steps": [s.to_dict() for s in self.steps],
            "round_keys": [state_to_bytes(k).hex() for k in self.round_keys],
        }


# ---------------------------------------------------------------------------
# Contract checks
# ---------------------------------------------------------------------------

def _check_block(block: Sequence[int], what: str = "Block") -> bytes:
    if len(block) != BLOCK_SIZE:
        raise ValueError(f"{what} must be {BLOCK_SIZE} bytes, got {len(block)}")
    return bytes(block)


def _check_key(key: Sequence[int]) -> bytes:
    if len(key) != KEY_SIZE:
        raise ValueError(f"Key must be {KEY_SIZE} bytes, got {len(key)}")
    return bytes(key)


def _check_sbox(sbox: Sequence[int]) -> bytes:
    if len(sbox) != SBOX_SIZE:
        raise ValueError(f"S-box must have {SBOX_SIZE} entries, got {len(sbox)}")
    return bytes(sbox)


def normalize_key(key: KeyLike) -> bytes:
    """UTF-8 encode a text key, then zero-pad or truncate to 16 bytes."""
    key_bytes = key.encode("utf-8") if isinstance(key, str) else bytes(key)
    if len(key_bytes) < KEY_SIZE:
        key_bytes = key_bytes + b"\x00" * (KEY_SIZE - len(key_bytes))
    return key_bytes[:KEY_SIZE]


# ---------------------------------------------------------------------------
# State helpers
# ---------------------------------------------------------------------------

def bytes_to_state(block: Sequence[int]) -> State:
    return tuple(tuple(block[row + 4 * col] for col in range(4)) for row in range(4))


def state_to_bytes(state: State) -> bytes:
    return bytes(state[i % 4][i // 4] for i in range(BLOCK_SIZE))


def format_state(state: State) -> str:
    return "\n".join(" ".join(f"{b:02X}" for b in row) for row in state)


# ---------------------------------------------------------------------------
# Round transformations
# ---------------------------------------------------------------------------

def sub_bytes(state: State, sbox: Sequence[int]) -> State:
    return tuple(tuple(sbox[b] for b in row) for row in state)


def inv_sub_bytes(state: State, inv_sbox: Sequence[int]) -> State:
    return sub_bytes(state, inv_sbox)


def shift_rows(state: State) -> State:
    """Row r rotates left by r."""
    return tuple(tuple(row[(col + r) % 4] for col in range(4)) for r, row in enumerate(state))


def inv_shift_rows(state: State) -> State:
    """Row r rotates right by r."""
    return tuple(tuple(row[(col - r) % 4] for col in range(4)) for r, row in enumerate(state))


def _mix(state: State, matrix: Tuple[Tuple[int, ...], ...]) -> State:
    out = [[0] * 4 for _ in range(4)]
    for col in range(4):
        for row in range(4):
            acc = 0
            for k in range(4):
                acc ^= galois.multiply_by_constant(state[k][col], matrix[row][k])
            out[row][col] = acc
    return tuple(tuple(r) for r in out)


def mix_columns(state: State) -> State:
    return _mix(state, MIX_COLUMNS_MATRIX)


def inv_mix_columns(state: State) -> State:
    return _mix(state, INV_MIX_COLUMNS_MATRIX)


def add_round_key(state: State, round_key: State) -> State:
    return tuple(
        tuple(a ^ b for a, b in zip(srow, krow)) for srow, krow in zip(state, round_key)
    )


# ---------------------------------------------------------------------------
# Key schedule
# ---------------------------------------------------------------------------

def _rot_word(word: List[int]) -> List[int]:
    return word[1:] + word[:1]


def _sub_word(word: List[int], sbox: Sequence[int]) -> List[int]:
    return [sbox[b] for b in word]


def key_expansion(key: Sequence[int], sbox: Sequence[int]) -> Tuple[State, ...]:
    """Expand a 16-byte key into 11 round keys using the given S-box."""
    key = _check_key(key)
    sbox = _check_sbox(sbox)

    w: List[List[int]] = [list(key[4 * i:4 * i + 4]) for i in range(NK)]
    for i in range(NK, NB * (NR + 1)):
        temp = list(w[i - 1])
        if i % NK == 0:
            temp = _sub_word(_rot_word(temp), sbox)
            temp[0] ^= RCON[i // NK - 1]
        w.append([a ^ b for a, b in zip(w[i - NK], temp)])

    round_keys = []
    for rnd in range(NR + 1):
        words = w[rnd * 4:(rnd + 1) * 4]
        # word c becomes column c of the round key
        round_keys.append(tuple(tuple(words[col][row] for col in range(4)) for row in range(4)))
    return tuple(round_keys)


# ---------------------------------------------------------------------------
# Block cipher
# ---------------------------------------------------------------------------

def _encrypt_state(state: State, round_keys: Sequence[State], sbox: bytes) -> State:
    state = add_round_key(state, round_keys[0])
    for rnd in range(1, NR):
        state = sub_bytes(state, sbox)
        state = shift_rows(state)
        state = mix_columns(state)
        state = add_round_key(state, round_keys[rnd])
    state = sub_bytes(state, sbox)
    state = shift_rows(state)
    return add_round_key(state, round_keys[NR])


def _decrypt_state(state: State, round_keys: Sequence[State], inv_sbox: bytes) -> State:
    state = add_round_key(state, round_keys[NR])
    state = inv_shift_rows(state)
    state = inv_sub_bytes(state, inv_sbox)
    for rnd in range(NR - 1, 0, -1):
        state = add_round_key(state, round_keys[rnd])
        state = inv_mix_columns(state)
        state = inv_shift_rows(state)
        state = inv_sub_bytes(state, inv_sbox)
    return add_round_key(state, round_keys[0])


def encrypt_block(block: Sequence[int], key: Sequence[int], sbox: Sequence[int]) -> bytes:
    """Encrypt one 16-byte block with a 16-byte key under ``sbox``."""
    block = _check_block(block, "Plaintext block")
    sbox = _check_sbox(sbox)
    round_keys = key_expansion(key, sbox)
    return state_to_bytes(_encrypt_state(bytes_to_state(block), round_keys, sbox))


def decrypt_block(block: Sequence[int], key: Sequence[int], sbox: Sequence[int]) -> bytes:
    """Decrypt one 16-byte block. ``sbox`` must be bijective."""
    block = _check_block(block, "Ciphertext block")
    sbox = _check_sbox(sbox)
    inv_sbox = generate_inverse_sbox(sbox, strict=True)
    round_keys = key_expansion(key, sbox)
    return state_to_bytes(_decrypt_state(bytes_to_state(block), round_keys, inv_sbox))


def encrypt_with_steps(block: Sequence[int], key: Sequence[int], sbox: Sequence[int]) -> EncryptionTrace:
    """Encrypt one block and record all 41 intermediate states."""
    block = _check_block(block, "Plaintext block")
    sbox = _check_sbox(sbox)
    round_keys = key_expansion(key, sbox)
    steps: List[EncryptionStep] = []

    state = bytes_to_state(block)
    steps.append(EncryptionStep(0, "initial", state))

    state = add_round_key(state, round_keys[0])
    steps.append(EncryptionStep(0, "addRoundKey", state, round_keys[0]))

    for rnd in range(1, NR + 1):
        state = sub_bytes(state, sbox)
        steps.append(EncryptionStep(rnd, "subBytes", state))
        state = shift_rows(state)
        steps.append(EncryptionStep(rnd, "shiftRows", state))
        if rnd != NR:
            state = mix_columns(state)
            steps.append(EncryptionStep(rnd, "mixColumns", state))
        state = add_round_key(state, round_keys[rnd])
        steps.append(EncryptionStep(rnd, "addRoundKey", state, round_keys[rnd]))

    return EncryptionTrace(
        ciphertext=state_to_bytes(state),
        steps=tuple(steps),
        round_keys=round_keys,
    )


def replay_step(previous: State, step: EncryptionStep, sbox: Sequence[int]) -> State:
    """Apply ``step.operation`` to ``previous``; used to audit a trace."""
    ops: Dict[str, Callable[[State], State]] = {
        "subBytes": lambda s: sub_bytes(s, sbox),
        "shiftRows": shift_rows,
        "mixColumns": mix_columns,
    }
    if step.operation == "initial":
        return step.state
    if step.operation == "addRoundKey":
        if step.round_key is None:
            raise ValueError(f"addRoundKey step in round {step.round} carries no round key")
        return add_round_key(previous, step.round_key)
    return ops[step.operation](previous)


# ---------------------------------------------------------------------------
# PKCS7 + ECB
# ---------------------------------------------------------------------------

def pkcs7_pad(data: bytes, block_size: int = BLOCK_SIZE) -> bytes:
    pad_len = block_size - (len(data) % block_size)
    return bytes(data) + bytes([pad_len]) * pad_len


def pkcs7_unpad(data: bytes, block_size: int = BLOCK_SIZE) -> bytes:
    """Strip PKCS7 padding, raising InvalidPaddingError on any malformed byte."""
    if len(data) == 0:
        raise InvalidPaddingError("empty", "Invalid padding: empty data")

    pad_len = data[-1]
    if pad_len == 0 or pad_len > block_size:
        raise InvalidPaddingError(
            "length_out_of_range",
            f"Invalid padding length: {pad_len} (must be 1..{block_size})",
            position=len(data) - 1,
            actual=pad_len,
        )
    if pad_len > len(data):
        raise InvalidPaddingError(
            "length_exceeds_data",
            f"Padding length {pad_len} exceeds data length {len(data)}",
            position=len(data) - 1,
            actual=pad_len,
        )
    for i in range(len(data) - pad_len, len(data)):
        if data[i] != pad_len:
            raise InvalidPaddingError(
                "byte_mismatch",
                f"Invalid padding byte at position {i}: expected {pad_len}, got {data[i]}",
                position=i,
                expected=pad_len,
                actual=data[i],
            )
    return bytes(data[:len(data) - pad_len])


def encrypt_ecb(data: bytes, key: KeyLike, sbox: Sequence[int]) -> bytes:
    """PKCS7-pad ``data`` and encrypt each block independently."""
    sbox = _check_sbox(sbox)
    round_keys = key_expansion(normalize_key(key), sbox)
    padded = pkcs7_pad(data)
    out = bytearray()
    for i in range(0, len(padded), BLOCK_SIZE):
        state = bytes_to_state(padded[i:i + BLOCK_SIZE])
        out += state_to_bytes(_encrypt_state(state, round_keys, sbox))
    logger.debug("ECB encrypted %d byte(s) into %d block(s)", len(data), len(padded) // BLOCK_SIZE)
    return bytes(out)


def decrypt_ecb(ciphertext: bytes, key: KeyLike, sbox: Sequence[int]) -> bytes:
    """Decrypt each block independently and strip PKCS7 padding."""
    if len(ciphertext) % BLOCK_SIZE != 0:
        raise ValueError(
            f"Ciphertext length {len(ciphertext)} is not a multiple of {BLOCK_SIZE}"
        )
    sbox = _check_sbox(sbox)
    inv_sbox = generate_inverse_sbox(sbox, strict=True)
    round_keys = key_expansion(normalize_key(key), sbox)
    out = bytearray()
    for i in range(0, len(ciphertext), BLOCK_SIZE):
        state = bytes_to_state(ciphertext[i:i + BLOCK_SIZE])
        out += state_to_bytes(_decrypt_state(state, round_keys, inv_sbox))
    return pkcs7_unpad(bytes(out))


def encrypt(plaintext: str, key: KeyLike, sbox: Sequence[int]) -> bytes:
    """Encrypt UTF-8 text (PKCS7 + ECB)."""
    return encrypt_ecb(plaintext.encode("utf-8"), key, sbox)


def decrypt(ciphertext: bytes, key: KeyLike, sbox: Sequence[int]) -> str:
    """Decrypt to UTF-8 text. Undecodable bytes become U+FFFD."""
    return decrypt_ecb(ciphertext, key, sbox).decode("utf-8", errors="replace")


def ciphertext_to_base64(ciphertext: bytes) -> str:
    return base64.b64encode(ciphertext).decode("ascii")


def ciphertext_from_base64(text: str) -> bytes:
    return base64.b64decode(text.strip(), validate=True)


def ciphertext_to_hex(ciphertext: bytes, sep: str = " ") -> str:
    return sep.join(f"{b:02X}" for b in ciphertext)
