"""Seeded randomness and run artifacts for evaluation runs."""
from __future__ import annotations

import json
import random
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any


def make_rng(seed: int, stream: int = 0) -> random.Random:
    """Independent generator for one evaluation stream.

    Nothing in sboxlab draws from the global ``random`` state; every test
    vector comes from a generator built here, so equal seeds give equal runs.
    """
    return random.Random(seed * 1_000_003 + stream)


def utc_timestamp() -> str:
    # e.g. 2026-01-08T12-34-56Z (safe for filenames)
    return time.strftime("%Y-%m-%dT%H-%M-%SZ", time.gmtime())


@dataclass(frozen=True)
class RunPaths:
    run_dir: Path
    config_json: Path
    metrics_json: Path
    report_json: Path


def make_run_dir(runs_root: str | Path, sbox_name: str, seed: int) -> RunPaths:
    """Create ``<runs_root>/<timestamp>_<sbox_name>_s<seed>`` for one report."""
    safe = "".join(ch if ch.isalnum() or ch in {"-", "_"} else "_" for ch in sbox_name.strip())[:60]
    run_dir = Path(runs_root) / f"{utc_timestamp()}_{safe or 'sbox'}_s{seed}"
    run_dir.mkdir(parents=True, exist_ok=True)
    return RunPaths(
        run_dir=run_dir,
        config_json=run_dir / "sbox_config.json",
        metrics_json=run_dir / "metrics.json",
        report_json=run_dir / "report.json",
    )


def _hex_bytes(obj: Any) -> str:
    if isinstance(obj, (bytes, bytearray)):
        return obj.hex().upper()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def write_json(path: str | Path, obj: Any) -> None:
    """Write ``obj`` as indented JSON; raw bytes (keys, S-boxes) become hex."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj, indent=2, sort_keys=True, default=_hex_bytes), encoding="utf-8")


def read_json(path: str | Path) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))
