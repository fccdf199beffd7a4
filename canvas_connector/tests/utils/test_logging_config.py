"""Tests for logging configuration."""

import logging
import sys

import pytest

from canvas_connector.utils.logging_config import get_logger, setup_logging


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_default_name(self):
        """Test default logger name is the package name."""
        logger = setup_logging()
        assert logger.name == "canvas_connector"

    @pytest.mark.parametrize("level", ["DEBUG", "INFO", "WARNING", "ERROR"])
    def test_sets_log_level(self, level):
        """Test log levels are applied."""
        logger = setup_logging(level=level, name=f"cc_test_level_{level}")
        assert logger.level == getattr(logging, level)

    def test_invalid_level_defaults_to_info(self):
        """Test an unknown level falls back to INFO."""
        logger = setup_logging(level="LOUD", name="cc_test_invalid")
        assert logger.level == logging.INFO

    def test_console_handler_writes_to_stderr(self):
        """Test console output goes to stderr, keeping stdout for results."""
        logger = setup_logging(name="cc_test_stderr")
        stream_handlers = [
            h for h in logger.handlers
            if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        ]
        assert len(stream_handlers) == 1
        assert stream_handlers[0].stream is sys.stderr

    def test_file_handler_added(self, tmp_path):
        """Test a file handler is added when log_file is given."""
        log_file = tmp_path / "connector.log"
        logger = setup_logging(log_file=log_file, name="cc_test_file")

        logger.info("hello file")
        for handler in logger.handlers:
            handler.flush()

        assert any(isinstance(h, logging.FileHandler) for h in logger.handlers)
        assert "hello file" in log_file.read_text(encoding="utf-8")
        for handler in logger.handlers:
            handler.close()

    def test_repeated_setup_does_not_duplicate_handlers(self):
        """Test calling setup twice replaces handlers."""
        setup_logging(name="cc_test_repeat")
        logger = setup_logging(name="cc_test_repeat")
        assert len(logger.handlers) == 1


class TestGetLogger:
    """Tests for get_logger function."""

    def test_same_instance(self):
        """Test get_logger returns the configured logger."""
        configured = setup_logging(name="cc_test_same")
        assert get_logger("cc_test_same") is configured

    def test_default_name(self):
        """Test default name."""
        assert get_logger().name == "canvas_connector"
