"""Configuration management for the sticker pack tool."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .common.constants import DEFAULT_UPLOAD_CONCURRENCY
from .utils import ConfigError

ENV_SERVER_URL = "STICKER_SERVER_URL"
ENV_CDN_URL = "STICKER_CDN_URL"
ENV_DB_PATH = "STICKER_DB_PATH"
ENV_CONCURRENCY = "STICKER_UPLOAD_CONCURRENCY"
ENV_TIMEOUT = "STICKER_UPLOAD_TIMEOUT"
ENV_LOG_LEVEL = "LOG_LEVEL"

DEFAULT_SERVER_URL = "https://chat.signal.org"
DEFAULT_CDN_URL = "https://cdn.signal.org"
DEFAULT_TIMEOUT_SECONDS = 120
MAX_UPLOAD_CONCURRENCY = 10


def _base_dir() -> Path:
    return Path(__file__).resolve().parents[1]


def _env_path() -> Path:
    return _base_dir() / ".env"


def default_db_path() -> Path:
    """Location of the credential store when none is configured."""
    return _base_dir() / "stickerpack.db"


@dataclass(frozen=True)
class Config:
    """Settings passed explicitly into the store, client and uploader."""

    server_url: str
    cdn_url: str
    db_path: Path
    upload_concurrency: int
    upload_timeout: int
    log_level: str


def _parse_int(value: str, name: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ConfigError(f"Invalid integer for {name}.") from exc
    if parsed <= 0:
        raise ConfigError(f"{name} must be greater than 0.")
    return parsed


def _parse_url(value: str, name: str) -> str:
    if not value.startswith(("https://", "http://")):
        raise ConfigError(f"{name} must be an http(s) URL.")
    return value.rstrip("/")


def load_config(env_file: Optional[Path] = None) -> Config:
    """
    Load and validate configuration from the .env file and environment.

    Args:
        env_file: Optional path override for the .env file.

    Returns:
        Config instance.
    """
    env_path = env_file or _env_path()
    if env_path.exists():
        load_dotenv(env_path)

    server_url = os.getenv(ENV_SERVER_URL, DEFAULT_SERVER_URL).strip()
    cdn_url = os.getenv(ENV_CDN_URL, DEFAULT_CDN_URL).strip()
    db_path = os.getenv(ENV_DB_PATH, "").strip()
    concurrency = os.getenv(ENV_CONCURRENCY, str(DEFAULT_UPLOAD_CONCURRENCY)).strip()
    timeout = os.getenv(ENV_TIMEOUT, str(DEFAULT_TIMEOUT_SECONDS)).strip()
    log_level = os.getenv(ENV_LOG_LEVEL, "INFO").strip().upper() or "INFO"

    upload_concurrency = _parse_int(concurrency, ENV_CONCURRENCY)
    if upload_concurrency > MAX_UPLOAD_CONCURRENCY:
        raise ConfigError(
            f"{ENV_CONCURRENCY} must not exceed {MAX_UPLOAD_CONCURRENCY}."
        )

    return Config(
        server_url=_parse_url(server_url, ENV_SERVER_URL),
        cdn_url=_parse_url(cdn_url, ENV_CDN_URL),
        db_path=Path(db_path).expanduser() if db_path else default_db_path(),
        upload_concurrency=upload_concurrency,
        upload_timeout=_parse_int(timeout, ENV_TIMEOUT),
        log_level=log_level,
    )
