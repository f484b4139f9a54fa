"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

ALLOWED_STORAGE_BACKENDS = {"postgres", "memory"}


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
class AirQualityIngestionSettings:
    """
    Runtime settings for air-quality CSV ingestion.
    """

    batch_size: int = 500
    max_fallback_rows: int = 100
    log_batch_errors: bool = True


@dataclass(frozen=True)
class StorageSettings:
    """
    Which storage collaborator backs ingestion and reads.
    """

    backend: str = "postgres"


@lru_cache(maxsize=1)
def get_ingestion_settings() -> AirQualityIngestionSettings:
    """
    Return cached ingestion settings from environment variables.
    """

    return AirQualityIngestionSettings(
        batch_size=max(1, _get_int_env("AQ_INGEST_BATCH_SIZE", 500)),
        max_fallback_rows=max(0, _get_int_env("AQ_INGEST_MAX_FALLBACK_ROWS", 100)),
        log_batch_errors=_get_bool_env("AQ_INGEST_LOG_BATCH_ERRORS", True),
    )


@lru_cache(maxsize=1)
def get_storage_settings() -> StorageSettings:
    """
    Return cached storage settings.

    Raises RuntimeError for an unknown STORAGE_BACKEND rather than silently
    falling back to memory.
    """

    backend = _get_str_env("STORAGE_BACKEND", "postgres").lower()
    if backend not in ALLOWED_STORAGE_BACKENDS:
        raise RuntimeError(
            f"STORAGE_BACKEND '{backend}' is not valid. "
            f"Allowed values: {sorted(ALLOWED_STORAGE_BACKENDS)}."
        )
    return StorageSettings(backend=backend)
