"""
Tests for logger functionality.
"""

import pytest
from icesync.logger import StructuredLogger, get_logger, reset_logger


class TestStructuredLogger:
    """Test structured logging functionality."""

    def test_logger_creation(self, tmp_path):
        """Logger should be created with default settings."""
        logger = StructuredLogger(
            name="test",
            level="INFO",
            log_dir=tmp_path,
            enable_console=False,
        )

        assert logger.logger.name == "test"
        assert logger.metrics["api_calls"] == 0
        assert logger.metrics["tasks"] == {"updated": 0, "unchanged": 0, "ineligible": 0, "failed": 0}

    def test_log_methods(self, tmp_path):
        """All log level methods should work."""
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)

        logger.debug("Debug message")
        logger.info("Info message")
        logger.warning("Warning message")
        logger.error("Error message")
        logger.critical("Critical message")

    def test_log_with_context(self, tmp_path):
        """Context kwargs are appended as JSON."""
        logger = StructuredLogger(name="test-context", log_dir=tmp_path, enable_console=False)
        logger.info("Task updated", id="42", priority=2)

        content = next(tmp_path.glob("*.log")).read_text()
        assert 'Task updated | Context: {"id": "42", "priority": 2}' in content

    def test_trigger_and_run_metrics(self):
        logger = StructuredLogger(name="test", enable_console=False, enable_file=False)

        logger.record_trigger(True)
        logger.record_trigger(False)
        logger.record_trigger(False)
        logger.record_run_start()
        logger.record_run_end()
        logger.record_run_start()
        logger.record_run_end(TimeoutError("slow"))

        metrics = logger.get_metrics()
        assert metrics["triggers_admitted"] == 1
        assert metrics["triggers_rejected"] == 2
        assert metrics["runs_started"] == 2
        assert metrics["runs_completed"] == 1
        assert metrics["runs_failed"] == 1
        assert metrics["errors_by_type"]["TimeoutError"] == 1

    def test_task_metrics(self):
        logger = StructuredLogger(name="test", enable_console=False, enable_file=False)
        for status in ("updated", "updated", "ineligible", "failed"):
            logger.record_task(status)

        metrics = logger.get_metrics()
        assert metrics["tasks_seen"] == 4
        assert metrics["tasks"]["updated"] == 2
        assert metrics["tasks"]["unchanged"] == 0

    def test_get_metrics_returns_copy(self):
        logger = StructuredLogger(name="test", enable_console=False, enable_file=False)
        snapshot = logger.get_metrics()
        snapshot["tasks"]["updated"] = 99
        assert logger.metrics["tasks"]["updated"] == 0

    def test_log_file_creation(self, tmp_path):
        """Log file should be created in specified directory."""
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)

        logger.info("Test message")
        logger.log_metrics_summary()

        log_files = list(tmp_path.glob("icesync_*.log"))
        assert len(log_files) == 1

        log_content = log_files[0].read_text()
        assert "Test message" in log_content
        assert "=== ICE Sync Metrics ===" in log_content


class TestGlobalLogger:
    """Test global logger singleton."""

    def test_get_logger_singleton(self, tmp_path):
        """get_logger should return same instance."""
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger2 = get_logger()

        assert logger1 is logger2

    def test_reset_logger(self, tmp_path):
        """reset_logger should create new instance."""
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger1.record_api_call()

        reset_logger()

        logger2 = get_logger(log_dir=tmp_path, enable_console=False)

        assert logger2.metrics["api_calls"] == 0
        reset_logger()
