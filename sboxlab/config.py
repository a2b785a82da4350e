from __future__ import annotations

import os
from functools import lru_cache
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class Settings(BaseModel):
    # S-box defaults
    default_preset: Literal["K44", "KAES"] = Field(default="K44")
    default_constant: int = Field(default=0x63, ge=0, le=255)

    # Metrics
    metrics_workers: int = Field(default=1, ge=1, le=64, description="Processes for partitioned metric scans")

    # Logging
    log_level: str = Field(default="INFO")

    # Reproducibility
    global_seed: int = Field(default=1337)

    # Paths
    project_root: str = Field(default=os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir)))
    runs_dir: str = Field(default="runs")


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    # Load .env if present
    load_dotenv()

    return Settings(
        default_preset=os.getenv("SBOXLAB_DEFAULT_PRESET", "K44").upper(),
        default_constant=int(os.getenv("SBOXLAB_DEFAULT_CONSTANT", "0x63"), 0),
        metrics_workers=int(os.getenv("SBOXLAB_METRICS_WORKERS", "1")),
        log_level=os.getenv("SBOXLAB_LOG_LEVEL", "INFO").upper(),
        global_seed=int(os.getenv("GLOBAL_SEED", "1337")),
        runs_dir=os.getenv("SBOXLAB_RUNS_DIR", "runs"),
    )
