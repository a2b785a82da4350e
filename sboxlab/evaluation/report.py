"""Structured evaluation report for one cipher configuration.

Aggregates S-box metrics, cipher avalanche and roundtrip results into a
single serializable report.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sboxlab.cipher.sbox import find_fixed_points, find_opposite_fixed_points, is_balanced, is_bijective
from sboxlab.cipher.spec import CipherContext

from .avalanche import AvalancheResult, avalanche_key, avalanche_plaintext
from .metrics import AES_METRICS, SBoxMetrics, calculate_all_metrics, rate_metrics
from .roundtrip import RoundtripResult, run_roundtrip_tests


@dataclass
class EvaluationReport:
    name: str
    config: Dict[str, Any]
    metrics: SBoxMetrics
    bijective: bool
    balanced: bool
    fixed_points: List[int] = field(default_factory=list)
    opposite_fixed_points: List[int] = field(default_factory=list)
    avalanche: List[AvalancheResult] = field(default_factory=list)
    roundtrip: Optional[RoundtripResult] = None
    timestamp: str = ""

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize full report for JSON export."""
        return {
            "timestamp": self.timestamp,
            "name": self.name,
            "config": self.config,
            "metrics": self.metrics.to_dict(),
            "ratings": rate_metrics(self.metrics),
            "bijective": self.bijective,
            "balanced": self.balanced,
            "fixed_points": self.fixed_points,
            "opposite_fixed_points": self.opposite_fixed_points,
            "avalanche": [a.to_dict() for a in self.avalanche],
            "roundtrip": self.roundtrip.to_dict() if self.roundtrip else None,
        }

    def to_summary(self) -> str:
        lines = [f"Evaluation Report: {self.name} ({self.timestamp})", "=" * 50]
        lines.append(f"Metrics: {self.metrics.summary()}")
        lines.append(f"AES ref: {AES_METRICS.summary()}")
        lines.append(
            f"Bijective: {self.bijective}, balanced: {self.balanced}, "
            f"fixed points: {len(self.fixed_points)}, opposite fixed points: {len(self.opposite_fixed_points)}"
        )
        for a in self.avalanche:
            lines.append(f"  {a.summary()}")
        if self.roundtrip is not None:
            lines.append(f"  {self.roundtrip.summary()}")
        return "\n".join(lines)


def build_report(
    context: CipherContext,
    *,
    avalanche_trials: int = 100,
    roundtrip_vectors: int = 100,
    seed: int = 1337,
    workers: Optional[int] = None,
) -> EvaluationReport:
    sbox = context.sbox
    bijective = is_bijective(sbox)
    report = EvaluationReport(
        name=context.name,
        config=context.to_hex_dict(),
        metrics=calculate_all_metrics(sbox, workers=workers),
        bijective=bijective,
        balanced=is_balanced(sbox),
        fixed_points=find_fixed_points(sbox),
        opposite_fixed_points=find_opposite_fixed_points(sbox),
    )
    if avalanche_trials > 0:
        report.avalanche = [
            avalanche_plaintext(sbox, trials=avalanche_trials, seed=seed),
            avalanche_key(sbox, trials=avalanche_trials, seed=seed),
        ]
    # decryption needs an inverse S-box
    if bijective and roundtrip_vectors > 0:
        report.roundtrip = run_roundtrip_tests(context, num_vectors=roundtrip_vectors, seed=seed)
    return report
