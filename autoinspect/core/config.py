"""Configuration module for the autoinspect watchdog."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from urllib.parse import urlparse

from dotenv import load_dotenv

from autoinspect.core.exceptions import ConfigurationError

load_dotenv()


def _as_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Config:
    """Runtime configuration with validation."""

    APP_NAME: str
    APP_VERSION: str
    ENV: str
    DEBUG: bool
    DATABASE_URL: str
    DB_CONNECTIVITY_REQUIRED: bool
    AGENT_TIMEOUT_MINUTES: int
    WATCHDOG_SCAN_INTERVAL_SECONDS: int
    WATCHDOG_MAX_WORKERS: int
    DEFAULT_AGENT_MAX_RETRIES: int
    REDIS_URL: str
    CELERY_BROKER_URL: str
    CELERY_RESULT_BACKEND: str
    API_PREFIX: str
    LOG_LEVEL: str
    LOG_FILE: str

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"

    @property
    def agent_timeout(self) -> timedelta:
        return timedelta(minutes=self.AGENT_TIMEOUT_MINUTES)


def _build_config(env: str | None = None) -> Config:
    resolved_env = (env or os.getenv("ENV", "development")).strip().lower()
    debug = _as_bool(os.getenv("DEBUG"), default=(resolved_env != "production"))
    redis_url = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    config = Config(
        APP_NAME="autoinspect-watchdog",
        APP_VERSION=os.getenv("APP_VERSION", "1.0.0"),
        ENV=resolved_env,
        DEBUG=debug if resolved_env != "production" else False,
        DATABASE_URL=os.getenv("DATABASE_URL", "sqlite:///./autoinspect.db"),
        DB_CONNECTIVITY_REQUIRED=_as_bool(
            os.getenv("DB_CONNECTIVITY_REQUIRED"), default=(resolved_env == "production")
        ),
        AGENT_TIMEOUT_MINUTES=int(os.getenv("AGENT_TIMEOUT_MINUTES", "15")),
        WATCHDOG_SCAN_INTERVAL_SECONDS=int(os.getenv("WATCHDOG_SCAN_INTERVAL_SECONDS", "300")),
        WATCHDOG_MAX_WORKERS=int(os.getenv("WATCHDOG_MAX_WORKERS", "1")),
        DEFAULT_AGENT_MAX_RETRIES=int(os.getenv("DEFAULT_AGENT_MAX_RETRIES", "3")),
        REDIS_URL=redis_url,
        CELERY_BROKER_URL=os.getenv("CELERY_BROKER_URL", redis_url),
        CELERY_RESULT_BACKEND=os.getenv("CELERY_RESULT_BACKEND", redis_url),
        API_PREFIX=os.getenv("API_PREFIX", "/api/v1"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
        LOG_FILE=os.getenv("LOG_FILE", "autoinspect.log"),
    )
    _validate_config(config)
    return config


def _validate_database_url(database_url: str) -> None:
    parsed = urlparse(database_url)
    if parsed.scheme not in {"sqlite", "postgresql", "postgresql+psycopg2"}:
        raise ConfigurationError(
            "DATABASE_URL must use sqlite:// or postgresql:// style URL."
        )
    if parsed.scheme.startswith("postgresql") and not parsed.hostname:
        raise ConfigurationError("PostgreSQL DATABASE_URL is missing hostname.")


def _validate_config(config: Config) -> None:
    _validate_database_url(config.DATABASE_URL)

    if config.AGENT_TIMEOUT_MINUTES < 1:
        raise ConfigurationError("AGENT_TIMEOUT_MINUTES must be >= 1.")
    if config.WATCHDOG_SCAN_INTERVAL_SECONDS < 30:
        raise ConfigurationError("WATCHDOG_SCAN_INTERVAL_SECONDS must be >= 30.")
    if config.WATCHDOG_MAX_WORKERS < 1:
        raise ConfigurationError("WATCHDOG_MAX_WORKERS must be >= 1.")
    if config.DEFAULT_AGENT_MAX_RETRIES < 0:
        raise ConfigurationError("DEFAULT_AGENT_MAX_RETRIES must be >= 0.")
    if config.LOG_LEVEL not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ConfigurationError("LOG_LEVEL must be one of DEBUG/INFO/WARNING/ERROR/CRITICAL.")
    if config.is_production and "change_me" in config.DATABASE_URL.lower():
        raise ConfigurationError("Production DATABASE_URL uses placeholder credentials.")


@lru_cache(maxsize=8)
def get_config(env: str | None = None) -> Config:
    """Get validated configuration for the requested environment."""
    return _build_config(env)
