from __future__ import annotations

from datetime import timedelta

import pytest

from autoinspect.core.config import _build_config
from autoinspect.core.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in (
        "ENV",
        "DEBUG",
        "DATABASE_URL",
        "AGENT_TIMEOUT_MINUTES",
        "WATCHDOG_SCAN_INTERVAL_SECONDS",
        "WATCHDOG_MAX_WORKERS",
        "DEFAULT_AGENT_MAX_RETRIES",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)


def test_defaults_match_watchdog_contract():
    config = _build_config("development")

    assert config.AGENT_TIMEOUT_MINUTES == 15
    assert config.agent_timeout == timedelta(minutes=15)
    assert config.WATCHDOG_SCAN_INTERVAL_SECONDS == 300
    assert config.WATCHDOG_MAX_WORKERS == 1
    assert config.DEFAULT_AGENT_MAX_RETRIES == 3
    assert config.DATABASE_URL.startswith("sqlite")
    assert config.is_production is False


def test_timeout_is_read_from_environment(monkeypatch):
    monkeypatch.setenv("AGENT_TIMEOUT_MINUTES", "30")
    assert _build_config("development").agent_timeout == timedelta(minutes=30)


@pytest.mark.parametrize(
    ("key", "value", "message"),
    [
        ("AGENT_TIMEOUT_MINUTES", "0", "AGENT_TIMEOUT_MINUTES"),
        ("WATCHDOG_SCAN_INTERVAL_SECONDS", "10", "WATCHDOG_SCAN_INTERVAL_SECONDS"),
        ("WATCHDOG_MAX_WORKERS", "0", "WATCHDOG_MAX_WORKERS"),
        ("DEFAULT_AGENT_MAX_RETRIES", "-1", "DEFAULT_AGENT_MAX_RETRIES"),
        ("LOG_LEVEL", "chatty", "LOG_LEVEL"),
        ("DATABASE_URL", "mysql://db/autoinspect", "DATABASE_URL"),
    ],
)
def test_invalid_values_are_rejected(monkeypatch, key, value, message):
    monkeypatch.setenv(key, value)
    with pytest.raises(ConfigurationError, match=message):
        _build_config("development")


def test_production_rejects_placeholder_credentials(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://change_me:change_me@db:5432/autoinspect")
    with pytest.raises(ConfigurationError, match="placeholder"):
        _build_config("production")


def test_production_disables_debug(monkeypatch):
    monkeypatch.setenv("DEBUG", "true")
    monkeypatch.setenv("DATABASE_URL", "postgresql://watchdog:secret@db:5432/autoinspect")
    config = _build_config("production")
    assert config.DEBUG is False
    assert config.DB_CONNECTIVITY_REQUIRED is True
