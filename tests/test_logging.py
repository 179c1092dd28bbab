"""Unit tests for the logging configuration module.

This test module validates the structured logging configuration and the
events emitted while a dependency tree is built.
"""

import json
import logging

import pytest

from src.graph.dependency_tree import DependencyTree
from src.log_config import configure_logging, get_logger


class TestLoggingConfiguration:
    """Test cases for logging configuration."""

    def test_configure_logging_info_level(self):
        """Test logging configuration with INFO level."""
        configure_logging(level="INFO", json_logs=True)
        logger = get_logger("test")
        assert logger is not None

    def test_configure_logging_lowercase_level(self):
        """Test that level names are case-insensitive."""
        configure_logging(level="debug", json_logs=True)
        assert get_logger("test") is not None

    def test_configure_logging_invalid_level(self):
        """Test logging configuration with invalid level."""
        with pytest.raises(ValueError, match="Invalid log level"):
            configure_logging(level="INVALID", json_logs=True)

    def test_configure_logging_console_renderer(self):
        """Test logging configuration with console renderer."""
        configure_logging(level="INFO", json_logs=False)
        assert get_logger("test") is not None

    def test_get_logger_without_name(self):
        """Test getting a logger without a name."""
        configure_logging(level="INFO", json_logs=True)
        assert get_logger() is not None


class TestStructuredLogging:
    """Test cases for structured log output."""

    def setup_method(self):
        """Set up JSON logging before each test."""
        configure_logging(level="INFO", json_logs=True)

    def test_json_output_format(self, caplog):
        """Test that events are rendered as JSON with their context."""
        caplog.set_level(logging.INFO)
        logger = get_logger("test")

        logger.info("test_event", key1="value1", key2=42)

        payload = json.loads(caplog.records[-1].getMessage())
        assert payload["event"] == "test_event"
        assert payload["key1"] == "value1"
        assert payload["key2"] == 42
        assert payload["level"] == "info"
        assert "timestamp" in payload

    def test_tree_build_is_logged(self, caplog):
        """Test that building a tree emits a summary event."""
        caplog.set_level(logging.INFO)

        DependencyTree().init({"a": ["b"], "b": ["x"]})

        # Module loggers are cached on first use, so match text rather than one renderer
        assert "initializing_tree" in caplog.text
        assert "tree_initialized" in caplog.text
        assert "missing_dependency" in caplog.text
