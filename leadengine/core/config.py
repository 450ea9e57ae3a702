"""Configuration module for the lead engine."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from urllib.parse import urlparse

from dotenv import load_dotenv

from leadengine.core.exceptions import ConfigurationError

load_dotenv()

ANALYTICS_PERIODS = {"today", "week", "month", "year", "all"}


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
    AI_ENABLED: bool
    OLLAMA_URL: str
    OLLAMA_MODEL: str
    LLM_TEMPERATURE: float
    LLM_MAX_TOKENS: int
    LLM_TIMEOUT_SECONDS: int
    LLM_MAX_RETRIES: int
    LLM_MIN_INTERVAL_SECONDS: float
    HOT_LEAD_THRESHOLD: int
    SCORING_RECENCY_WINDOW_DAYS: int
    ANALYTICS_MAX_ROWS: int
    ANALYTICS_DEFAULT_PERIOD: str
    CELERY_BROKER_URL: str
    CELERY_RESULT_BACKEND: str
    API_PREFIX: str
    LOG_LEVEL: str
    LOG_FILE: str

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"


def _build_config(env: str | None = None) -> Config:
    resolved_env = (env or os.getenv("ENV", "development")).strip().lower()
    debug = _as_bool(os.getenv("DEBUG"), default=False)
    redis_url = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    config = Config(
        APP_NAME="LeadEngine",
        APP_VERSION=os.getenv("APP_VERSION", "1.0.0"),
        ENV=resolved_env,
        DEBUG=debug if resolved_env != "production" else False,
        DATABASE_URL=os.getenv("DATABASE_URL", "sqlite:///./leadengine.db"),
        DB_CONNECTIVITY_REQUIRED=_as_bool(
            os.getenv("DB_CONNECTIVITY_REQUIRED"), default=(resolved_env == "production")
        ),
        AI_ENABLED=_as_bool(os.getenv("AI_ENABLED"), default=True),
        OLLAMA_URL=os.getenv("OLLAMA_URL", "http://localhost:11434/api/chat"),
        OLLAMA_MODEL=os.getenv("OLLAMA_MODEL", "qwen2.5:7b"),
        LLM_TEMPERATURE=float(os.getenv("LLM_TEMPERATURE", "0.7")),
        LLM_MAX_TOKENS=int(os.getenv("LLM_MAX_TOKENS", "500")),
        LLM_TIMEOUT_SECONDS=int(os.getenv("LLM_TIMEOUT_SECONDS", "20")),
        LLM_MAX_RETRIES=int(os.getenv("LLM_MAX_RETRIES", "1")),
        LLM_MIN_INTERVAL_SECONDS=float(os.getenv("LLM_MIN_INTERVAL_SECONDS", "0.25")),
        HOT_LEAD_THRESHOLD=int(os.getenv("HOT_LEAD_THRESHOLD", "60")),
        SCORING_RECENCY_WINDOW_DAYS=int(os.getenv("SCORING_RECENCY_WINDOW_DAYS", "7")),
        ANALYTICS_MAX_ROWS=int(os.getenv("ANALYTICS_MAX_ROWS", "50000")),
        ANALYTICS_DEFAULT_PERIOD=os.getenv("ANALYTICS_DEFAULT_PERIOD", "month").strip().lower(),
        CELERY_BROKER_URL=os.getenv("CELERY_BROKER_URL", redis_url),
        CELERY_RESULT_BACKEND=os.getenv("CELERY_RESULT_BACKEND", redis_url),
        API_PREFIX=os.getenv("API_PREFIX", "/api/v1"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
        LOG_FILE=os.getenv("LOG_FILE", ""),
    )
    _validate_config(config)
    return config


def _validate_database_url(database_url: str) -> None:
    parsed = urlparse(database_url)
    if parsed.scheme not in {"sqlite", "postgresql", "postgresql+psycopg2", "postgresql+psycopg"}:
        raise ConfigurationError(
            "DATABASE_URL must use sqlite:// or postgresql:// style URL."
        )
    if parsed.scheme.startswith("postgresql") and not parsed.hostname:
        raise ConfigurationError("PostgreSQL DATABASE_URL is missing hostname.")


def _validate_config(config: Config) -> None:
    _validate_database_url(config.DATABASE_URL)

    if config.LLM_TIMEOUT_SECONDS < 1:
        raise ConfigurationError("LLM_TIMEOUT_SECONDS must be >= 1.")
    if config.LLM_MAX_RETRIES < 0:
        raise ConfigurationError("LLM_MAX_RETRIES must be >= 0.")
    if config.LLM_MIN_INTERVAL_SECONDS < 0:
        raise ConfigurationError("LLM_MIN_INTERVAL_SECONDS must be >= 0.")
    if config.LLM_MAX_TOKENS < 1:
        raise ConfigurationError("LLM_MAX_TOKENS must be >= 1.")
    if not 0 <= config.HOT_LEAD_THRESHOLD <= 100:
        raise ConfigurationError("HOT_LEAD_THRESHOLD must be between 0 and 100.")
    if config.SCORING_RECENCY_WINDOW_DAYS < 0:
        raise ConfigurationError("SCORING_RECENCY_WINDOW_DAYS must be >= 0.")
    if config.ANALYTICS_MAX_ROWS < 1:
        raise ConfigurationError("ANALYTICS_MAX_ROWS must be >= 1.")
    if config.ANALYTICS_DEFAULT_PERIOD not in ANALYTICS_PERIODS:
        raise ConfigurationError(
            f"ANALYTICS_DEFAULT_PERIOD must be one of {', '.join(sorted(ANALYTICS_PERIODS))}."
        )
    if config.LOG_LEVEL not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ConfigurationError("LOG_LEVEL must be one of DEBUG/INFO/WARNING/ERROR/CRITICAL.")
    if config.is_production and "change_me" in config.DATABASE_URL.lower():
        raise ConfigurationError("Production DATABASE_URL uses placeholder credentials.")


@lru_cache(maxsize=8)
def get_config(env: str | None = None) -> Config:
    """Get validated configuration for the requested environment."""
    return _build_config(env)
