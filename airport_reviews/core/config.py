"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    port: int = 3000
    fetch_timeout: int = 30
    chunk_size: int = 64 * 1024
    csv_encoding: str = "utf-8-sig"
    log_level: str = "INFO"


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("%s=%r is not an integer; falling back to %d.", name, raw, default)
        return default
    if value <= 0:
        logger.warning("%s must be positive; falling back to %d.", name, default)
        return default
    return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    port = _get_int_env("PORT", 3000)
    fetch_timeout = _get_int_env("CSV_FETCH_TIMEOUT", 30)
    chunk_size = _get_int_env("CSV_CHUNK_SIZE", 64 * 1024)
    csv_encoding = (os.getenv("CSV_ENCODING") or "utf-8-sig").strip()
    log_level = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()

    return Settings(
        port=port,
        fetch_timeout=fetch_timeout,
        chunk_size=chunk_size,
        csv_encoding=csv_encoding,
        log_level=log_level,
    )
