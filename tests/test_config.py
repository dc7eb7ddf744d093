"""Unit tests for environment-driven configuration."""

import pytest

from utils.config import Config


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in ("MAX_HISTORY", "DUPLICATE_TOLERANCE_MS", "PORT", "HOST", "CORS_ORIGINS",
                 "BIOMETRIC_API_URL", "REFRESH_INTERVAL", "DASHBOARD_HISTORY_LIMIT", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LOG_TO_FILE", "false")
    return monkeypatch


class TestDefaults:
    """Defaults match the documented bounds."""

    def test_defaults(self, clean_env: pytest.MonkeyPatch) -> None:
        config = Config()

        assert config.ledger.max_history == 100
        assert config.ledger.duplicate_tolerance_ms == 1000
        assert config.dashboard.history_limit == 50
        assert config.dashboard.refresh_interval == 3
        assert config.server.port == 3000
        assert config.server.cors_origins == ["*"]


class TestEnvironment:
    """Environment variables override defaults."""

    def test_overrides(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("MAX_HISTORY", "250")
        clean_env.setenv("DUPLICATE_TOLERANCE_MS", "2000")
        clean_env.setenv("PORT", "8080")
        clean_env.setenv("CORS_ORIGINS", "http://a.example, http://b.example")
        clean_env.setenv("BIOMETRIC_API_URL", "http://pi-server:8080/")
        clean_env.setenv("LOG_LEVEL", "debug")

        config = Config()

        assert config.ledger.max_history == 250
        assert config.ledger.duplicate_tolerance_ms == 2000
        assert config.server.port == 8080
        assert config.server.cors_origins == ["http://a.example", "http://b.example"]
        assert config.dashboard.api_url == "http://pi-server:8080"
        assert config.logging.log_level == "DEBUG"

    def test_non_numeric_value_keeps_default(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("MAX_HISTORY", "lots")
        assert Config().ledger.max_history == 100

    def test_unknown_log_level_keeps_default(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("LOG_LEVEL", "chatty")
        assert Config().logging.log_level == "INFO"

    def test_invalid_values_fail_validation(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("MAX_HISTORY", "0")
        clean_env.setenv("PORT", "70000")

        with pytest.raises(ValueError) as excinfo:
            Config()

        assert "max history" in str(excinfo.value)
        assert "port" in str(excinfo.value)


class TestUpdates:
    """Runtime updates skip invalid values."""

    def test_update_ledger_config(self, clean_env: pytest.MonkeyPatch) -> None:
        config = Config()

        config.update_ledger_config(max_history=10, duplicate_tolerance_ms=-5, unknown=1)

        assert config.ledger.max_history == 10
        assert config.ledger.duplicate_tolerance_ms == 1000

    def test_effective_config(self, clean_env: pytest.MonkeyPatch) -> None:
        effective = Config().get_effective_config()
        assert effective["ledger"] == {"max_history": 100, "duplicate_tolerance_ms": 1000}
        assert effective["logging"]["log_to_file"] is False
