"""Tests for centralized logging configuration."""

import logging

import pytest
from pydantic import ValidationError

from config import Settings
from logging_config import NOISY_LOGGERS, setup_logging


@pytest.fixture
def use_log_level(monkeypatch):
    def _apply(level: str):
        monkeypatch.setenv("LOG_LEVEL", level)
        monkeypatch.setattr("logging_config.settings", Settings(_env_file=None))

    return _apply


class TestSetupLogging:
    @pytest.mark.parametrize("level", ["INFO", "DEBUG", "warning"])
    def test_root_level_from_settings(self, use_log_level, level):
        use_log_level(level)
        setup_logging()
        assert logging.getLogger().level == getattr(logging, level.upper())

    def test_noisy_loggers_pinned_to_warning(self, use_log_level):
        use_log_level("DEBUG")
        setup_logging()
        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING, f"{name} logger not suppressed"

    def test_invalid_log_level_rejected(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "VERBOS")
        with pytest.raises(ValidationError, match="LOG_LEVEL"):
            Settings(_env_file=None)
