"""S-box metrics and cipher-level evaluation.

Provides the MetricsEngine (NL, SAC, BIC-NL, BIC-SAC, LAP, DAP), process-pool
partitioning with a cancellable scheduler, avalanche and roundtrip checks,
and a report aggregating them.

Research / education only. Do NOT use in production.
"""

from .metrics import (
    SBoxMetrics,
    IDEAL_METRICS,
    AES_METRICS,
    K44_EXPECTED_METRICS,
    calculate_nl,
    calculate_sac,
    calculate_sac_matrix,
    calculate_bic_nl,
    calculate_bic_sac,
    calculate_bic_sac_matrix,
    calculate_lap,
    calculate_dap,
    calculate_du,
    calculate_algebraic_degree,
    calculate_all_metrics,
    rate_metrics,
    metrics_report,
)
from .parallel import MetricsScheduler, calculate_all_metrics_parallel
from .avalanche import AvalancheResult, avalanche_plaintext, avalanche_key
from .roundtrip import RoundtripResult, RoundtripFailure, run_roundtrip_tests
from .report import EvaluationReport, build_report

__all__ = [
    "SBoxMetrics",
    "IDEAL_METRICS",
    "AES_METRICS",
    "K44_EXPECTED_METRICS",
    "calculate_nl",
    "calculate_sac",
    "calculate_sac_matrix",
    "calculate_bic_nl",
    "calculate_bic_sac",
    "calculate_bic_sac_matrix",
    "calculate_lap",
    "calculate_dap",
    "calculate_du",
    "calculate_algebraic_degree",
    "calculate_all_metrics",
    "rate_metrics",
    "metrics_report",
    "MetricsScheduler",
    "calculate_all_metrics_parallel",
    "AvalancheResult",
    "avalanche_plaintext",
    "avalanche_key",
    "RoundtripResult",
    "RoundtripFailure",
    "run_roundtrip_tests",
    "EvaluationReport",
    "build_report",
]
