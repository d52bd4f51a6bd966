"""Tests for configuration and logging setup."""

import logging
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from patient_manager import cli
from patient_manager.config import DEFAULT_API_URL, AppConfig
from patient_manager.utils.logging import PACKAGE_LOGGER, LogConfig, get_logger, setup_logging


@pytest.fixture
def restore_logging():
    """Put root and package logger state back after a test reconfigures it."""
    root = logging.getLogger()
    package = logging.getLogger(PACKAGE_LOGGER)
    httpx_logger = logging.getLogger("httpx")
    saved = (root.level, list(root.handlers), package.level, httpx_logger.level)
    yield
    root.setLevel(saved[0])
    root.handlers[:] = saved[1]
    package.setLevel(saved[2])
    httpx_logger.setLevel(saved[3])


class TestAppConfig:
    """Tests for environment-driven configuration."""

    def test_defaults(self, monkeypatch):
        """Test defaults when no variables are set."""
        for name in ["PATIENT_API_URL", "PATIENT_API_TIMEOUT", "PATIENT_MANAGER_LOGIN_DELAY", "LOG_LEVEL"]:
            monkeypatch.delenv(name, raising=False)

        config = AppConfig.from_env()

        assert config.api_base_url == DEFAULT_API_URL
        assert config.request_timeout == 10.0
        assert config.login_delay == 1.0
        assert config.log_level == "WARNING"

    def test_environment_overrides(self, monkeypatch, tmp_path):
        """Test reading every variable."""
        monkeypatch.setenv("PATIENT_API_URL", "http://patients.internal:8080/")
        monkeypatch.setenv("PATIENT_API_TIMEOUT", "2.5")
        monkeypatch.setenv("PATIENT_MANAGER_STORAGE", str(tmp_path / "s.json"))
        monkeypatch.setenv("PATIENT_MANAGER_LOGIN_DELAY", "0")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        config = AppConfig.from_env()

        assert config.api_base_url == "http://patients.internal:8080"
        assert config.request_timeout == 2.5
        assert config.storage_path == Path(tmp_path / "s.json")
        assert config.login_delay == 0
        assert config.log_level == "DEBUG"

    def test_rejects_non_positive_timeout(self):
        """Test timeout validation."""
        with pytest.raises(ValidationError):
            AppConfig(request_timeout=0)


class TestLogging:
    """Tests for logging helpers."""

    def test_log_config_normalises_level(self):
        """Test that level names are case-insensitive."""
        assert LogConfig(level=" debug ").level == "DEBUG"

    def test_log_config_rejects_unknown_level(self):
        """Test that a typo in LOG_LEVEL fails loudly."""
        with pytest.raises(ValidationError):
            LogConfig(level="verbose")

    def test_get_logger_inherits_level(self):
        """Test that module loggers follow the package logger by default."""
        assert get_logger("patient_manager.test_inherit").level == logging.NOTSET

    def test_get_logger_explicit_level(self):
        """Test an explicit level override."""
        assert get_logger("patient_manager.test_explicit", level="debug").level == logging.DEBUG

    def test_setup_logging_governs_package_loggers(self, restore_logging):
        """Test that the configured level applies to every module logger."""
        setup_logging(LogConfig(level="WARNING"))
        logger = get_logger("patient_manager.services.test_governed")

        assert logging.getLogger(PACKAGE_LOGGER).level == logging.WARNING
        assert not logger.isEnabledFor(logging.INFO)
        assert logger.isEnabledFor(logging.WARNING)

    def test_setup_logging_quiets_http_stack(self, restore_logging):
        """Test root level and third-party overrides."""
        setup_logging(LogConfig(level="DEBUG"))

        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_setup_logging_keeps_stricter_level_for_http_stack(self, restore_logging):
        """Test that an ERROR level is not loosened for the HTTP stack."""
        setup_logging(LogConfig(level="ERROR"))
        assert logging.getLogger("httpx").level == logging.ERROR

    def test_setup_logging_to_stderr(self, restore_logging):
        """Test that the stream option selects stderr."""
        setup_logging(LogConfig(stream="stderr"))

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert handlers[0].stream is sys.stderr


class TestCLIEntryPoint:
    """Tests for how the terminal client wires configuration into logging."""

    @pytest.fixture
    def captured(self, monkeypatch):
        """Stub out application assembly and the event loop."""
        captured = {}

        def fake_build(config):
            captured["config"] = config
            return SimpleNamespace(config=config, controller=None)

        monkeypatch.setattr(cli, "build_application", fake_build)
        monkeypatch.setattr(cli, "asyncio", SimpleNamespace(run=lambda coro: coro.close()))
        monkeypatch.setattr(sys, "argv", ["patient-manager"])
        return captured

    def test_log_level_comes_from_environment(self, monkeypatch, captured, restore_logging):
        """Test that LOG_LEVEL reaches the package loggers."""
        monkeypatch.setenv("LOG_LEVEL", "debug")

        cli.main()

        assert captured["config"].log_level == "debug"
        assert logging.getLogger(PACKAGE_LOGGER).level == logging.DEBUG
        assert logging.getLogger().handlers[0].stream is sys.stderr

    def test_default_keeps_info_logs_out_of_the_ui(self, monkeypatch, captured, restore_logging):
        """Test that sign-in and configuration chatter is hidden by default."""
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        cli.main()

        assert not get_logger("patient_manager.services.auth").isEnabledFor(logging.INFO)

    def test_api_url_argument(self, monkeypatch, captured, restore_logging):
        """Test the positional API URL override."""
        monkeypatch.setattr(sys, "argv", ["patient-manager", "http://other:4000/"])

        cli.main()

        assert captured["config"].api_base_url == "http://other:4000"
