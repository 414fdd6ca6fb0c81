"""
Tests for process settings and logging setup.
"""

import logging

import pytest

from routeopt.settings import LOGGER_NAME, RuntimeSettings, configure_logging


class TestRuntimeSettings:
    def test_defaults_from_empty_environment(self, monkeypatch):
        monkeypatch.delenv("ROUTEOPT_LOG_LEVEL", raising=False)
        monkeypatch.delenv("ROUTEOPT_PROGRESS", raising=False)

        settings = RuntimeSettings.from_env()

        assert settings.log_level == "off"
        assert settings.show_progress is None
        assert settings.level > logging.CRITICAL

    @pytest.mark.parametrize(
        "raw, expected", [("1", True), ("yes", True), ("0", False), ("off", False)]
    )
    def test_progress_from_environment(self, monkeypatch, raw, expected):
        monkeypatch.setenv("ROUTEOPT_PROGRESS", raw)
        assert RuntimeSettings.from_env().show_progress is expected

    def test_log_level_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("ROUTEOPT_LOG_LEVEL", "DEBUG")
        assert RuntimeSettings.from_env().level == logging.DEBUG

    def test_unknown_log_level(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            RuntimeSettings(log_level="verbose")


def test_configure_logging_only_touches_package_logger():
    root_level = logging.getLogger().level

    logger = configure_logging(RuntimeSettings(log_level="info"))
    configure_logging(RuntimeSettings(log_level="warning"))

    assert logger.name == LOGGER_NAME
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1
    assert logging.getLogger().level == root_level
