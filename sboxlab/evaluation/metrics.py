"""Cryptographic strength metrics for 8-bit S-boxes.

NL, SAC, BIC-NL, BIC-SAC, LAP and DAP as used in the affine-matrix
exploration literature, plus differential uniformity and algebraic degree.

Every scan is split into a ``*_partition`` function over a contiguous range
of its outer loop variable (mask or input difference). A partition returns
its local extremum, so any split of the range reduces to the same answer;
``sboxlab.evaluation.parallel`` relies on that to farm partitions out to
worker processes.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass
from itertools import combinations
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)

N = 256
BITS = 8
OUTPUT_BIT_PAIRS: Tuple[Tuple[int, int], ...] = tuple(combinations(range(BITS), 2))

_X = np.arange(N, dtype=np.int64)
_PARITY = np.array([bin(i).count("1") & 1 for i in range(N)], dtype=np.int64)
# _MASK_SIGNS[mask, x] = (-1) ** parity(x & mask)
_MASK_SIGNS = 1 - 2 * _PARITY[np.bitwise_and.outer(_X, _X)]


@dataclass(frozen=True)
class SBoxMetrics:
    """Metric snapshot for one S-box. Recompute on any S-box change."""
    nl: int
    sac: float
    bic_nl: int
    bic_sac: float
    lap: float
    dap: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "NL": self.nl,
            "SAC": self.sac,
            "BICNL": self.bic_nl,
            "BICSAC": self.bic_sac,
            "LAP": self.lap,
            "DAP": self.dap,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SBoxMetrics":
        return cls(
            nl=int(d["NL"]),
            sac=float(d["SAC"]),
            bic_nl=int(d["BICNL"]),
            bic_sac=float(d["BICSAC"]),
            lap=float(d["LAP"]),
            dap=float(d["DAP"]),
        )

    def summary(self) -> str:
        return (
            f"NL={self.nl}, SAC={self.sac:.5f}, BIC-NL={self.bic_nl}, "
            f"BIC-SAC={self.bic_sac:.5f}, LAP={self.lap:.6f}, DAP={self.dap:.6f}"
        )


IDEAL_METRICS = SBoxMetrics(nl=120, sac=0.5, bic_nl=120, bic_sac=0.5, lap=0.0, dap=0.0)
# BIC-SAC here counts agreements of the two output-bit changes. Published tables
# report the complement (0.50460 for AES, 0.50237 for S-box44).
AES_METRICS = SBoxMetrics(nl=112, sac=0.50488, bic_nl=112, bic_sac=0.49540, lap=0.0625, dap=0.015625)
K44_EXPECTED_METRICS = SBoxMetrics(nl=112, sac=0.50073, bic_nl=112, bic_sac=0.49763, lap=0.0625, dap=0.015625)


def as_sbox_array(sbox: Sequence[int]) -> np.ndarray:
    if len(sbox) != N:
        raise ValueError(f"S-box must have {N} entries, got {len(sbox)}")
    arr = np.asarray(list(sbox), dtype=np.int64)
    if arr.min() < 0 or arr.max() > 255:
        raise ValueError("S-box entries must be bytes (0..255)")
    return arr


# ---------------------------------------------------------------------------
# Boolean functions derived from the S-box
# ---------------------------------------------------------------------------

def component_tables(sbox: Sequence[int]) -> np.ndarray:
    """Truth tables of the 8 output-bit functions, shape (8, 256), values 0/1."""
    arr = as_sbox_array(sbox)
    return np.stack([(arr >> bit) & 1 for bit in range(BITS)])


def pair_tables(sbox: Sequence[int]) -> np.ndarray:
    """Truth tables of f_j XOR f_k for the 28 output-bit pairs, shape (28, 256)."""
    comps = component_tables(sbox)
    return np.stack([comps[j] ^ comps[k] for j, k in OUTPUT_BIT_PAIRS])


def walsh_spectrum(truth_table: Sequence[int]) -> np.ndarray:
    """W(mask) = sum_x (+1 if parity(x & mask) == f(x) else -1), for all 256 masks."""
    signs = 1 - 2 * np.asarray(truth_table, dtype=np.int64)
    return _MASK_SIGNS @ signs


def walsh_max_partition(tables: np.ndarray, start: int = 0, stop: int = N) -> int:
    """Max |W| over masks [start, stop) for every truth table in ``tables``."""
    if start >= stop:
        return 0
    signs = 1 - 2 * np.asarray(tables, dtype=np.int64)
    coeffs = _MASK_SIGNS[start:stop] @ signs.T
    return int(np.abs(coeffs).max())


def nonlinearity_from_walsh(max_walsh: int) -> int:
    return N // 2 - max_walsh // 2


def boolean_nonlinearity(truth_table: Sequence[int]) -> int:
    return nonlinearity_from_walsh(int(np.abs(walsh_spectrum(truth_table)).max()))


# ---------------------------------------------------------------------------
# NL / BIC-NL
# ---------------------------------------------------------------------------

def nl_partition(sbox: Sequence[int], start: int = 0, stop: int = N) -> int:
    return walsh_max_partition(component_tables(sbox), start, stop)


def bic_nl_partition(sbox: Sequence[int], start: int = 0, stop: int = N) -> int:
    return walsh_max_partition(pair_tables(sbox), start, stop)


def calculate_nl(sbox: Sequence[int]) -> int:
    """Minimum nonlinearity over the 8 component functions (max 120 here)."""
    return nonlinearity_from_walsh(nl_partition(sbox))


def calculate_bic_nl(sbox: Sequence[int]) -> int:
    """Minimum nonlinearity over the 28 XORs of output-bit pairs."""
    return nonlinearity_from_walsh(bic_nl_partition(sbox))


# ---------------------------------------------------------------------------
# SAC / BIC-SAC
# ---------------------------------------------------------------------------

def _output_changes(arr: np.ndarray) -> np.ndarray:
    """changes[i, o, x] = 1 if output bit o flips when input bit i of x flips."""
    diffs = np.stack([arr ^ arr[_X ^ (1 << i)] for i in range(BITS)])
    return np.stack([(diffs >> o) & 1 for o in range(BITS)], axis=1)


def calculate_sac_matrix(sbox: Sequence[int]) -> List[List[float]]:
    """matrix[output_bit][input_bit] = flip probability of that output bit."""
    changes = _output_changes(as_sbox_array(sbox))
    probs = changes.sum(axis=2) / N
    return [[float(probs[i, o]) for i in range(BITS)] for o in range(BITS)]


def calculate_sac(sbox: Sequence[int]) -> float:
    """Mean flip probability over all 64 (input bit, output bit) pairs; ideal 0.5."""
    changes = _output_changes(as_sbox_array(sbox))
    return float(changes.sum()) / (BITS * BITS * N)


def _bic_sac_pair_scores(sbox: Sequence[int]) -> Dict[Tuple[int, int], float]:
    changes = _output_changes(as_sbox_array(sbox))
    scores: Dict[Tuple[int, int], float] = {}
    for j, k in OUTPUT_BIT_PAIRS:
        # fraction of x where both bits change together or stay together
        agree = 1 - (changes[:, j, :] ^ changes[:, k, :])
        scores[(j, k)] = float(agree.sum()) / (BITS * N)
    return scores


def calculate_bic_sac(sbox: Sequence[int]) -> float:
    scores = _bic_sac_pair_scores(sbox)
    return sum(scores.values()) / len(scores)


def calculate_bic_sac_matrix(sbox: Sequence[int]) -> List[List[Optional[float]]]:
    """Symmetric 8x8 matrix of pair scores; the diagonal is None."""
    matrix: List[List[Optional[float]]] = [[None] * BITS for _ in range(BITS)]
    for (j, k), value in _bic_sac_pair_scores(sbox).items():
        matrix[j][k] = value
        matrix[k][j] = value
    return matrix


# ---------------------------------------------------------------------------
# LAP / DAP
# ---------------------------------------------------------------------------

def lap_partition(sbox: Sequence[int], start: int = 1, stop: int = N) -> int:
    """Max |2 * #{x : a.x == b.S(x)} - 256| over input masks a in [start, stop), b != 0."""
    start = max(start, 1)
    if start >= stop:
        return 0
    arr = as_sbox_array(sbox)
    out_signs = _MASK_SIGNS[1:, :][:, arr]
    corr = _MASK_SIGNS[start:stop] @ out_signs.T
    return int(np.abs(corr).max())


def calculate_lap(sbox: Sequence[int]) -> float:
    """max |count / 256 - 1/2| over 255 x 255 nonzero mask pairs."""
    return lap_partition(sbox) / (2 * N)


def dap_partition(sbox: Sequence[int], start: int = 1, stop: int = N) -> int:
    """Largest DDT count for input differences in [start, stop), dx != 0."""
    start = max(start, 1)
    arr = as_sbox_array(sbox)
    best = 0
    for dx in range(start, stop):
        counts = np.bincount(arr ^ arr[_X ^ dx], minlength=N)
        best = max(best, int(counts.max()))
    return best


def calculate_dap(sbox: Sequence[int]) -> float:
    """Largest DDT entry / 256, output difference 0 included."""
    return dap_partition(sbox) / N


def calculate_du(sbox: Sequence[int]) -> int:
    """Differential uniformity: largest DDT count for dx != 0."""
    return dap_partition(sbox)


def calculate_algebraic_degree(sbox: Sequence[int]) -> int:
    """Max ANF degree over the component functions (Mobius transform)."""
    degree = 0
    for table in component_tables(sbox):
        anf = [int(v) for v in table]
        step = 1
        while step < N:
            for mask in range(N):
                if mask & step:
                    anf[mask] ^= anf[mask ^ step]
            step <<= 1
        for mask, coeff in enumerate(anf):
            if coeff:
                degree = max(degree, bin(mask).count("1"))
    return degree


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------

def calculate_all_metrics(sbox: Sequence[int], workers: Optional[int] = None) -> SBoxMetrics:
    """Compute NL, SAC, BIC-NL, BIC-SAC, LAP and DAP.

    Args:
        sbox: 256-entry table, ideally bijective.
        workers: If > 1, partitions run on a process pool of this size.

    Returns:
        SBoxMetrics snapshot.
    """
    as_sbox_array(sbox)
    if workers and workers > 1:
        from sboxlab.evaluation.parallel import calculate_all_metrics_parallel

        return calculate_all_metrics_parallel(sbox, workers=workers)

    t0 = time.perf_counter()
    metrics = SBoxMetrics(
        nl=calculate_nl(sbox),
        sac=calculate_sac(sbox),
        bic_nl=calculate_bic_nl(sbox),
        bic_sac=calculate_bic_sac(sbox),
        lap=calculate_lap(sbox),
        dap=calculate_dap(sbox),
    )
    logger.debug("Metrics computed in %.3fs: %s", time.perf_counter() - t0, metrics.summary())
    return metrics


def _rate(value: float, good: float, fair: float, higher_is_better: bool) -> str:
    if higher_is_better:
        if value >= good:
            return "good"
        return "fair" if value >= fair else "poor"
    if value <= good:
        return "good"
    return "fair" if value <= fair else "poor"


def rate_metrics(metrics: SBoxMetrics) -> Dict[str, str]:
    """Coarse good/fair/poor labels for display."""
    return {
        "NL": _rate(metrics.nl, 112, 100, True),
        "SAC": _rate(abs(metrics.sac - 0.5), 0.01, 0.05, False),
        "BICNL": _rate(metrics.bic_nl, 112, 100, True),
        "BICSAC": _rate(abs(metrics.bic_sac - 0.5), 0.01, 0.05, False),
        "LAP": _rate(metrics.lap, 0.0625, 0.125, False),
        "DAP": _rate(metrics.dap, 0.015625, 0.03125, False),
    }


def metrics_report(sbox: Sequence[int]) -> Dict[str, Any]:
    """Metrics plus the matrices and extra properties, as a JSON-ready dict."""
    metrics = calculate_all_metrics(sbox)
    return {
        "metrics": metrics.to_dict(),
        "ratings": rate_metrics(metrics),
        "sac_matrix": calculate_sac_matrix(sbox),
        "bic_sac_matrix": calculate_bic_sac_matrix(sbox),
        "differential_uniformity": calculate_du(sbox),
        "algebraic_degree": calculate_algebraic_degree(sbox),
        "deviation_from_aes": {
            k: v - asdict(AES_METRICS)[f] for (k, v), f in zip(
                metrics.to_dict().items(), ("nl", "sac", "bic_nl", "bic_sac", "lap", "dap")
            )
        },
    }
