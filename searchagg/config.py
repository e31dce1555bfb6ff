"""
Aggregator configuration.

Values come from constructor arguments or, via `AggregatorConfig.from_env`,
from environment variables (optionally loaded from a `.env` file):

- SEARCHAGG_MAX_RESULTS: results requested from each provider (default 100)
- SEARCHAGG_TIMEOUT_MS: per-provider deadline in milliseconds (default 1000)
- SEARCHAGG_BREAKER_THRESHOLD: consecutive failures before a provider is
  skipped; 0 disables the breaker (default 0)
- SEARCHAGG_BREAKER_RECOVERY_S: seconds before a skipped provider is retried
  (default 60)
- SEARCHAGG_LOG_LEVEL: logger level (default INFO)
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_MAX_RESULTS = 100
DEFAULT_TIMEOUT_MS = 1000


def load_env(env_path: Optional[Path] = None) -> None:
    """Load .env from the working directory if present."""
    env_path = env_path or Path.cwd() / ".env"
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path)


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class AggregatorConfig:
    """
    Options applied identically to every provider call.

    Attributes:
        max_results: Cap on results requested per provider.
        timeout_ms: Deadline for each provider call, in milliseconds.
        breaker_threshold: Consecutive failures that open a provider's
            circuit breaker. 0 disables breakers.
        breaker_recovery_s: Seconds an open breaker waits before letting
            one trial call through.
    """

    max_results: int = DEFAULT_MAX_RESULTS
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    breaker_threshold: int = 0
    breaker_recovery_s: int = 60

    def __post_init__(self):
        for field_name in ("max_results", "timeout_ms"):
            value = getattr(self, field_name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"{field_name} must be a positive integer, got {value!r}")
        for field_name in ("breaker_threshold", "breaker_recovery_s"):
            value = getattr(self, field_name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"{field_name} must be a non-negative integer, got {value!r}")

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000.0

    @classmethod
    def from_env(cls, load_dotenv_file: bool = True) -> "AggregatorConfig":
        if load_dotenv_file:
            load_env()
        return cls(
            max_results=_int_from_env("SEARCHAGG_MAX_RESULTS", DEFAULT_MAX_RESULTS),
            timeout_ms=_int_from_env("SEARCHAGG_TIMEOUT_MS", DEFAULT_TIMEOUT_MS),
            breaker_threshold=_int_from_env("SEARCHAGG_BREAKER_THRESHOLD", 0),
            breaker_recovery_s=_int_from_env("SEARCHAGG_BREAKER_RECOVERY_S", 60),
        )


def log_level_from_env(default: str = "INFO") -> str:
    return os.getenv("SEARCHAGG_LOG_LEVEL", default).upper()
