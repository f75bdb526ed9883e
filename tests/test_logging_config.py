"""Tests for logging_config.py utility functions."""

import os
import sys
import logging
from unittest.mock import patch

from conversion_pipeline.core.logging_config import (
    FORMATS,
    get_logger,
    logger,
    resolve_format,
    setup_logger,
)


class TestSetupLogger:
    """Tests for setup_logger function."""

    def test_default_name_and_handler(self):
        """The package logger has one handler and does not propagate."""
        test_logger = setup_logger()
        assert test_logger.name == "conversion-pipeline"
        assert len(test_logger.handlers) == 1
        assert not test_logger.propagate

    def test_handler_uses_stdout(self):
        test_logger = setup_logger(name="test-stdout")
        assert test_logger.handlers[0].stream is sys.stdout

    def test_level_from_parameter(self):
        test_logger = setup_logger(name="test-param-level", level="debug")
        assert test_logger.level == logging.DEBUG

    def test_level_from_env_var(self):
        """LOG_LEVEL applies when no level is passed."""
        with patch.dict(os.environ, {"LOG_LEVEL": "ERROR"}):
            test_logger = setup_logger(name="test-env-level")
        assert test_logger.level == logging.ERROR

    def test_invalid_level_defaults_to_info(self):
        test_logger = setup_logger(name="test-bad-level", level="LOUD")
        assert test_logger.level == logging.INFO

    def test_structured_format(self):
        """Structured records carry source location."""
        with patch.dict(os.environ, {}, clear=False) as env:
            env.pop("LOG_FORMAT", None)
            test_logger = setup_logger(name="test-structured", format_type="structured")
        format_string = test_logger.handlers[0].formatter._fmt
        assert "%(filename)s" in format_string
        assert "%(funcName)s" in format_string

    def test_env_format_applies_without_argument(self):
        """LOG_FORMAT picks the layout when no format_type is passed."""
        with patch.dict(os.environ, {"LOG_FORMAT": "simple"}):
            test_logger = setup_logger(name="test-env-format")
        format_string = test_logger.handlers[0].formatter._fmt
        assert "%(filename)s" not in format_string
        assert "%(message)s" in format_string

    def test_explicit_format_wins_over_env(self):
        with patch.dict(os.environ, {"LOG_FORMAT": "simple"}):
            test_logger = setup_logger(name="test-explicit-format", format_type="structured")
        assert "%(filename)s" in test_logger.handlers[0].formatter._fmt

    def test_explicit_format_replaces_existing_formatter(self):
        """A later explicit format_type reformats the existing handler."""
        test_logger = setup_logger(name="test-reformat", format_type="structured")
        setup_logger(name="test-reformat", format_type="simple")
        assert len(test_logger.handlers) == 1
        assert test_logger.handlers[0].formatter._fmt == FORMATS["simple"]

    def test_unknown_format_falls_back_to_structured(self):
        assert resolve_format("fancy") == "structured"
        with patch.dict(os.environ, {"LOG_FORMAT": "SIMPLE"}):
            assert resolve_format() == "simple"

    def test_no_duplicate_handlers(self):
        first = setup_logger(name="test-no-duplicates")
        second = setup_logger(name="test-no-duplicates", level="WARNING")
        assert first is second
        assert len(first.handlers) == 1
        assert first.level == logging.WARNING


class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger_custom_name(self):
        test_logger = get_logger("queue")
        assert test_logger.name == "queue"
        assert len(test_logger.handlers) == 1

    def test_default_logger(self):
        assert isinstance(logger, logging.Logger)
        assert logger.name == "conversion-pipeline"
