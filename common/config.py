from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= 0 else default


@dataclass(frozen=True)
class AnalysisSettings:
    """Window/baseline defaults. CLI flags override these."""
    event_window_days: int = 7
    aggregate_window_days: int = 14
    classifier_window_days: int = 21
    baseline_days: int = 30
    data_file: Optional[str] = None

    @classmethod
    def from_env(cls) -> "AnalysisSettings":
        # IMPORTANT: resolve env at runtime (not import time)
        return cls(
            event_window_days=_env_int("EVENT_WINDOW_DAYS", 7),
            aggregate_window_days=_env_int("AGGREGATE_WINDOW_DAYS", 14),
            classifier_window_days=_env_int("CLASSIFIER_WINDOW_DAYS", 21),
            baseline_days=_env_int("BASELINE_DAYS", 30),
            data_file=os.environ.get("ADIZ_DATA_FILE") or None,
        )
