"""Shared utilities for the sticker pack tool."""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlencode

from .common.constants import (
    DEFAULT_MESSAGES,
    INSTALL_URL_BASE,
    MESSAGE_KEY_AUTHENTICATION,
    MESSAGE_KEY_DIMENSIONS_TOO_LARGE,
    MESSAGE_KEY_DIMENSIONS_TOO_SMALL,
    MESSAGE_KEY_MUST_LOOP_FOREVER,
    MESSAGE_KEY_NOT_SQUARE,
    MESSAGE_KEY_PROCESSING,
    MESSAGE_KEY_TOO_LARGE,
    MESSAGE_KEY_UPLOAD,
)


class StickerPackError(Exception):
    """Base exception for sticker pack errors.

    ``kind`` is the stable machine-readable identifier callers branch on.
    ``message_key`` is an optional localization key for display.
    """

    kind = "sticker_pack"
    default_message_key: Optional[str] = None

    def __init__(self, message: str = "", message_key: Optional[str] = None) -> None:
        super().__init__(message)
        self.message_key = message_key or self.default_message_key


class ConfigError(StickerPackError):
    """Raised when configuration is invalid or missing."""

    kind = "config"


class EncryptionError(StickerPackError):
    """Raised when encryption or decryption fails."""

    kind = "encryption"


class DatabaseError(StickerPackError):
    """Raised when the local item store fails."""

    kind = "database"


class StickerProcessingError(StickerPackError):
    """Raised when a single image cannot be turned into a sticker."""

    kind = "processing"
    default_message_key = MESSAGE_KEY_PROCESSING


class DecodeError(StickerProcessingError):
    """Raised when image dimensions cannot be read."""

    kind = "decode"


class TooLargeError(StickerProcessingError):
    """Raised when the sticker exceeds the byte length limit."""

    kind = "too_large"
    default_message_key = MESSAGE_KEY_TOO_LARGE


class NotSquareError(StickerProcessingError):
    """Raised when an animated sticker is not square."""

    kind = "not_square"
    default_message_key = MESSAGE_KEY_NOT_SQUARE


class DimensionsTooLargeError(StickerProcessingError):
    """Raised when an animated sticker is wider than allowed."""

    kind = "dimensions_too_large"
    default_message_key = MESSAGE_KEY_DIMENSIONS_TOO_LARGE


class DimensionsTooSmallError(StickerProcessingError):
    """Raised when an animated sticker is narrower than allowed."""

    kind = "dimensions_too_small"
    default_message_key = MESSAGE_KEY_DIMENSIONS_TOO_SMALL


class MustLoopForeverError(StickerProcessingError):
    """Raised when an animated sticker has a finite play count."""

    kind = "must_loop_forever"
    default_message_key = MESSAGE_KEY_MUST_LOOP_FOREVER


class AuthenticationError(StickerPackError):
    """Raised when no usable credentials are stored."""

    kind = "authentication"
    default_message_key = MESSAGE_KEY_AUTHENTICATION


class MissingImageDataError(StickerPackError):
    """Raised when a sticker selected for upload has no image buffer."""

    kind = "missing_image_data"


class UploadError(StickerPackError):
    """Raised when connecting or uploading to the sticker service fails."""

    kind = "upload"
    default_message_key = MESSAGE_KEY_UPLOAD


def setup_logging(log_level: int | str = logging.INFO) -> None:
    """
    Configure global logging.

    Args:
        log_level: Logging verbosity level or level name.
    """
    if isinstance(log_level, str):
        log_level = log_level.upper()
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )


def format_bytes(size: int) -> str:
    """
    Convert bytes to a human-readable string.

    Args:
        size: Size in bytes.

    Returns:
        Human-readable size string.
    """
    if size < 0:
        raise ValueError("Size must be non-negative.")

    units = ["B", "KB", "MB", "GB"]
    value = float(size)
    for unit in units:
        if value < 1024 or unit == units[-1]:
            return f"{value:.2f} {unit}"
        value /= 1024
    return f"{value:.2f} GB"


def describe_error(exc: BaseException) -> str:
    """
    Return display text for an error, preferring its localization key.

    Args:
        exc: Raised exception.

    Returns:
        Message suitable for showing to the user.
    """
    key = getattr(exc, "message_key", None)
    if key and key in DEFAULT_MESSAGES:
        return DEFAULT_MESSAGES[key]
    return str(exc) or exc.__class__.__name__


def build_install_url(pack_id: str, key: str) -> str:
    """
    Build the shareable install link for an uploaded pack.

    Args:
        pack_id: Pack identifier assigned by the service.
        key: Hex-encoded pack key.

    Returns:
        Install URL.
    """
    return f"{INSTALL_URL_BASE}#{urlencode({'pack_id': pack_id, 'pack_key': key})}"
