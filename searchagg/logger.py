"""
Structured logging for searchagg.

Wraps a stdlib logger with console and optional file output, and keeps
per-provider call metrics so the health of each provider can be reported.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json

from .config import log_level_from_env


class StructuredLogger:
    """
    Logger with console/file outputs and provider call metrics.
    """

    def __init__(
        self,
        name: str = "searchagg",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = False,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files; setting it turns file output on
            enable_file: Write logs to file (under logs/ unless log_dir is given)
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()
        self.logger.propagate = False

        self.metrics = {
            "queries": 0,
            "provider_calls_attempted": 0,
            "provider_calls_successful": 0,
            "provider_calls_failed": 0,
            "errors_by_type": {},
            "provider_success_rate": {},
        }

        if enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file or log_dir is not None:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"searchagg_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        self._log(logging.ERROR, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_query(self):
        """Increment aggregated query counter."""
        self.metrics["queries"] += 1

    def record_provider_attempt(self, provider: str):
        self.metrics["provider_calls_attempted"] += 1
        if provider not in self.metrics["provider_success_rate"]:
            self.metrics["provider_success_rate"][provider] = {
                "attempts": 0,
                "successes": 0
            }
        self.metrics["provider_success_rate"][provider]["attempts"] += 1

    def record_provider_success(self, provider: str):
        self.metrics["provider_calls_successful"] += 1
        if provider in self.metrics["provider_success_rate"]:
            self.metrics["provider_success_rate"][provider]["successes"] += 1

    def record_provider_failure(self, provider: str, error_type: str):
        self.metrics["provider_calls_failed"] += 1

        if error_type not in self.metrics["errors_by_type"]:
            self.metrics["errors_by_type"][error_type] = 0
        self.metrics["errors_by_type"][error_type] += 1

    def get_metrics(self) -> dict:
        """Return current metrics with per-provider success rates filled in."""
        metrics_copy = self.metrics.copy()
        for provider, stats in metrics_copy["provider_success_rate"].items():
            if stats["attempts"] > 0:
                stats["success_rate"] = round(
                    stats["successes"] / stats["attempts"], 3
                )

        return metrics_copy

# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "searchagg",
    level: Optional[str] = None,
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL); defaults to
            SEARCHAGG_LOG_LEVEL, else INFO
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(
            name=name, level=level or log_level_from_env(), **kwargs
        )

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
