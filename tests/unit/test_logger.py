"""Tests for logging setup."""

import logging
import logging.handlers
import uuid

import pytest

from requestflow.core.config import Settings
from requestflow.core.logging import setup_logger, configure_from_settings


def _unique_name() -> str:
    return f"requestflow-test-{uuid.uuid4().hex[:8]}"


class TestSetupLogger:

    def test_console_only(self):
        logger = setup_logger(_unique_name(), file_logging=False)
        assert logger.level == logging.INFO
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.StreamHandler)

    def test_file_logging(self, tmp_path):
        name = _unique_name()
        logger = setup_logger(name, log_dir=str(tmp_path / "logs"), level="debug")

        logger.debug("hello")
        for handler in logger.handlers:
            handler.flush()

        log_file = tmp_path / "logs" / f"{name}.log"
        assert log_file.exists()
        assert "[DEBUG]" in log_file.read_text()
        assert logger.level == logging.DEBUG

    def test_iso_timestamps(self):
        logger = setup_logger(_unique_name(), file_logging=False)
        assert logger.handlers[0].formatter.datefmt == "%Y-%m-%dT%H:%M:%S"

    def test_invalid_level(self):
        with pytest.raises(ValueError):
            setup_logger(_unique_name(), level="LOUD", file_logging=False)

    def test_no_duplicate_handlers(self):
        name = _unique_name()
        setup_logger(name, file_logging=False)
        logger = setup_logger(name, file_logging=False)
        assert len(logger.handlers) == 1

    def test_configure_from_settings(self, tmp_path):
        settings = Settings(_env_file=None, log_level="WARNING", log_dir=str(tmp_path), file_logging=True)
        name = _unique_name()

        logger = configure_from_settings(settings, name=name)

        assert logger.level == logging.WARNING
        assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in logger.handlers)
