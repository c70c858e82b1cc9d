"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class PriceIngestionSettings:
    """
    Runtime settings for stock price CSV ingestion.

    ``max_in_flight`` of 0 leaves the number of queued inserts unbounded.
    """

    max_workers: int = 8
    max_in_flight: int = 0
    log_validation_errors: bool = True
    staging_dir: str = "uploads"


@lru_cache(maxsize=1)
def get_price_ingestion_settings() -> PriceIngestionSettings:
    """
    Return cached ingestion settings from environment variables.
    """

    return PriceIngestionSettings(
        max_workers=max(1, _get_int_env("PRICE_INGEST_MAX_WORKERS", 8)),
        max_in_flight=max(0, _get_int_env("PRICE_INGEST_MAX_IN_FLIGHT", 0)),
        log_validation_errors=_get_bool_env("PRICE_INGEST_LOG_VALIDATION_ERRORS", True),
        staging_dir=_get_str_env("UPLOAD_STAGING_DIR", "uploads"),
    )


def get_log_level() -> str:
    return _get_str_env("LOG_LEVEL", "INFO").upper()
