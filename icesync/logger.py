"""
Structured logging system for icesync.

Provides centralized logging with console and file outputs and the
counters used to report on webhook admissions and reconciliation runs.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json

TASK_STATUSES = ("updated", "unchanged", "ineligible", "failed")


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for triggers, runs and per-task outcomes.
    """

    def __init__(
        self,
        name: str = "icesync",
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
        self.logger.handlers.clear()  # Remove existing handlers
        self.logger.propagate = False

        self.metrics = {
            "api_calls": 0,
            "triggers_admitted": 0,
            "triggers_rejected": 0,
            "runs_started": 0,
            "runs_completed": 0,
            "runs_failed": 0,
            "tasks_seen": 0,
            "records_invalid": 0,
            "tasks": {status: 0 for status in TASK_STATUSES},
            "errors_by_type": {},
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

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"icesync_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

        if not self.logger.handlers:
            self.logger.addHandler(logging.NullHandler())

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
        self.metrics["api_calls"] += 1

    def record_trigger(self, admitted: bool):
        if admitted:
            self.metrics["triggers_admitted"] += 1
        else:
            self.metrics["triggers_rejected"] += 1

    def record_run_start(self):
        self.metrics["runs_started"] += 1

    def record_run_end(self, error: Optional[BaseException] = None):
        """Record the end of a run; a non-None error marks it failed."""
        if error is None:
            self.metrics["runs_completed"] += 1
        else:
            self.metrics["runs_failed"] += 1
            self.record_error(type(error).__name__)

    def record_task(self, status: str):
        """Record a per-task reconciliation outcome."""
        self.metrics["tasks_seen"] += 1
        tasks = self.metrics["tasks"]
        tasks[status] = tasks.get(status, 0) + 1

    def record_invalid_record(self):
        """Record a fetched task record that failed validation."""
        self.metrics["records_invalid"] += 1

    def record_error(self, error_type: str):
        errors = self.metrics["errors_by_type"]
        errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """Return a copy of the current metrics."""
        metrics_copy = self.metrics.copy()
        metrics_copy["tasks"] = dict(self.metrics["tasks"])
        metrics_copy["errors_by_type"] = dict(self.metrics["errors_by_type"])
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== ICE Sync Metrics ===")
        self.info(f"API Calls: {metrics['api_calls']}")
        self.info(
            f"Triggers: {metrics['triggers_admitted']} admitted, "
            f"{metrics['triggers_rejected']} rejected"
        )
        self.info(
            f"Runs: {metrics['runs_completed']}/{metrics['runs_started']} completed, "
            f"{metrics['runs_failed']} failed"
        )
        tasks = metrics["tasks"]
        self.info(
            f"Tasks: {metrics['tasks_seen']} seen, {metrics['records_invalid']} invalid | "
            + " ".join(f"{status}={tasks.get(status, 0)}" for status in TASK_STATUSES)
        )

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "icesync",
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
