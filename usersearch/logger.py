"""
Structured logging for usersearch.

Provides centralized logging with console and file outputs, plus
per-strategy metrics for spotting search phrasings that stopped working.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json
import threading

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for monitoring strategy health.
    """

    def __init__(
        self,
        name: str = "usersearch",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()
        self.logger.propagate = False

        self._metrics_lock = threading.Lock()
        self.metrics = {
            "api_calls": 0,
            "strategies_attempted": 0,
            "strategies_succeeded": 0,
            "strategies_failed": 0,
            "strategies_skipped": 0,
            "errors_by_type": {},
            "strategy_success_rate": {},
        }

        if enable_console:
            # stderr keeps stdout clean for --json output
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"usersearch_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message with optional context."""
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_api_call(self):
        """Increment API call counter."""
        with self._metrics_lock:
            self.metrics["api_calls"] += 1

    def record_strategy_attempt(self, label: str):
        """Record that a strategy was invoked."""
        with self._metrics_lock:
            self.metrics["strategies_attempted"] += 1
            stats = self.metrics["strategy_success_rate"].setdefault(
                label, {"attempts": 0, "successes": 0}
            )
            stats["attempts"] += 1

    def record_strategy_success(self, label: str):
        with self._metrics_lock:
            self.metrics["strategies_succeeded"] += 1
            if label in self.metrics["strategy_success_rate"]:
                self.metrics["strategy_success_rate"][label]["successes"] += 1

    def record_strategy_failure(self, label: str, error_type: str):
        """Record a strategy that errored or came back empty."""
        with self._metrics_lock:
            self.metrics["strategies_failed"] += 1
            errors = self.metrics["errors_by_type"]
            errors[error_type] = errors.get(error_type, 0) + 1

    def record_strategy_skip(self, label: str):
        with self._metrics_lock:
            self.metrics["strategies_skipped"] += 1

    def get_metrics(self) -> dict:
        """Return a snapshot of the metrics with per-strategy success rates filled in."""
        with self._metrics_lock:
            metrics_copy = self.metrics.copy()
            metrics_copy["errors_by_type"] = dict(self.metrics["errors_by_type"])
            metrics_copy["strategy_success_rate"] = {
                label: dict(stats)
                for label, stats in self.metrics["strategy_success_rate"].items()
            }
        for label, stats in metrics_copy["strategy_success_rate"].items():
            if stats["attempts"] > 0:
                stats["success_rate"] = round(
                    stats["successes"] / stats["attempts"], 3
                )

        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Search Session Metrics ===")
        self.info(f"API Calls: {metrics['api_calls']}")
        self.info(
            f"Strategies: {metrics['strategies_succeeded']}/{metrics['strategies_attempted']} "
            f"succeeded, {metrics['strategies_skipped']} skipped"
        )

        if metrics["strategy_success_rate"]:
            self.info("Strategy Success Rates:")
            for label, stats in metrics["strategy_success_rate"].items():
                rate = stats.get("success_rate", 0) * 100
                self.info(f"  {label}: {stats['successes']}/{stats['attempts']} ({rate:.1f}%)")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "usersearch",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
