"""Configuration loading and validation."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_SOURCES = ("headlines", "editorial", "digest")


@dataclass(frozen=True)
class Config:
    """Application configuration. All values sourced from environment variables."""

    # Required
    database_path: str

    # Optional — Provider keys (a source without a key is reported as failed)
    headlines_api_key: str = ""
    editorial_api_key: str = ""
    digest_api_key: str = ""

    # Optional — Ingestion
    ingestion_sources: tuple[str, ...] = field(default=DEFAULT_SOURCES)
    fetch_interval_minutes: int = 60
    provider_timeout_seconds: float = 15.0
    provider_page_size: int = 10
    ingestion_max_workers: int = 3
    source_failure_alert_threshold: int = 3

    # Optional — Application
    log_level: str = "INFO"
    log_format: str = "json"
    app_env: str = "production"


_REQUIRED_VARS = [
    "DATABASE_PATH",
]


def _parse_sources(value: str | None) -> tuple[str, ...]:
    if not value:
        return DEFAULT_SOURCES
    return tuple(s.strip() for s in value.split(",") if s.strip())


def load_config(env_path: str | Path | None = None) -> Config:
    """Load configuration from environment variables.

    Loads a .env file if present (for local development), then validates
    that all required variables are set. Raises ValueError listing any
    missing variables.
    """
    load_dotenv(dotenv_path=env_path)

    missing = [var for var in _REQUIRED_VARS if not os.environ.get(var)]
    if missing:
        raise ValueError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    return Config(
        # Required
        database_path=os.environ["DATABASE_PATH"],
        # Optional — Provider keys
        headlines_api_key=os.environ.get("HEADLINES_API_KEY", ""),
        editorial_api_key=os.environ.get("EDITORIAL_API_KEY", ""),
        digest_api_key=os.environ.get("DIGEST_API_KEY", ""),
        # Optional — Ingestion
        ingestion_sources=_parse_sources(os.environ.get("INGESTION_SOURCES")),
        fetch_interval_minutes=int(os.environ.get("FETCH_INTERVAL_MINUTES", "60")),
        provider_timeout_seconds=float(os.environ.get("PROVIDER_TIMEOUT_SECONDS", "15")),
        provider_page_size=int(os.environ.get("PROVIDER_PAGE_SIZE", "10")),
        ingestion_max_workers=int(os.environ.get("INGESTION_MAX_WORKERS", "3")),
        source_failure_alert_threshold=int(
            os.environ.get("SOURCE_FAILURE_ALERT_THRESHOLD", "3")
        ),
        # Optional — Application
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        log_format=os.environ.get("LOG_FORMAT", "json"),
        app_env=os.environ.get("APP_ENV", "production"),
    )
