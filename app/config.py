"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache

from db.config import load_env_files

DEFAULT_CHUNK_SIZE = 500
DEFAULT_MAX_UPLOAD_BYTES = 50 * 1024 * 1024


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


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
class LoggingSettings:
    level: str = "INFO"


@dataclass(frozen=True)
class IngestionSettings:
    """
    Runtime settings for report ingestion.

    upsert_chunk_size bounds each upsert statement; max_parse_errors_reported
    bounds the row errors echoed back to the uploader.
    """

    upsert_chunk_size: int = DEFAULT_CHUNK_SIZE
    max_parse_errors_reported: int = 100
    default_marketplace_id: str = "ATVPDKIKX0DER"


@dataclass(frozen=True)
class UploadSettings:
    """
    Upload intake limits and binary format detection.
    """

    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    binary_suffixes: frozenset[str] = field(default_factory=lambda: frozenset({".xlsx", ".xls"}))


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    return LoggingSettings(level=_get_str_env("LOG_LEVEL", "INFO").upper())


@lru_cache(maxsize=1)
def get_ingestion_settings() -> IngestionSettings:
    """
    Return cached ingestion settings from environment variables.
    """

    return IngestionSettings(
        upsert_chunk_size=max(1, _get_int_env("REPORT_INGEST_CHUNK_SIZE", DEFAULT_CHUNK_SIZE)),
        max_parse_errors_reported=max(0, _get_int_env("REPORT_INGEST_MAX_ERRORS_REPORTED", 100)),
        default_marketplace_id=_get_str_env("REPORT_DEFAULT_MARKETPLACE_ID", "ATVPDKIKX0DER"),
    )


@lru_cache(maxsize=1)
def get_upload_settings() -> UploadSettings:
    """
    Return cached upload intake settings.
    """

    return UploadSettings(
        max_upload_bytes=max(1, _get_int_env("REPORT_UPLOAD_MAX_BYTES", DEFAULT_MAX_UPLOAD_BYTES)),
    )
