"""Common constants and shared data models."""

from .constants import (
    MAX_STICKER_BYTE_LENGTH,
    MAX_STICKER_DIMENSION,
    MIN_STICKER_DIMENSION,
    STICKER_SIZE,
)
from .types import (
    Credentials,
    ImageMeta,
    NormalizedSticker,
    PackInfo,
    PackManifest,
    StickerEntry,
    StickerInput,
    UploadResult,
)

__all__ = [
    "MAX_STICKER_BYTE_LENGTH",
    "MAX_STICKER_DIMENSION",
    "MIN_STICKER_DIMENSION",
    "STICKER_SIZE",
    "Credentials",
    "ImageMeta",
    "NormalizedSticker",
    "PackInfo",
    "PackManifest",
    "StickerEntry",
    "StickerInput",
    "UploadResult",
]
