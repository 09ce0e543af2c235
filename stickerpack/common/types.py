"""Type definitions and data models."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class ImageMeta:
    """Metadata read from the decoder for a raw image."""
    width: int
    height: int
    format: Optional[str] = None
    mode: Optional[str] = None
    has_alpha: bool = False
    frame_count: int = 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "width": self.width,
            "height": self.height,
            "format": self.format,
            "mode": self.mode,
            "has_alpha": self.has_alpha,
            "frame_count": self.frame_count,
        }


@dataclass(frozen=True)
class NormalizedSticker:
    """A sticker image ready for packing."""
    path: Optional[str]
    buffer: bytes
    content_type: str
    data_uri: str
    meta: ImageMeta


@dataclass(frozen=True)
class PackInfo:
    """Title and author of a pack."""
    title: str
    author: str


@dataclass(frozen=True)
class StickerInput:
    """A sticker selected for a pack, with its optional emoji."""
    image_data: Optional[NormalizedSticker]
    emoji: Optional[str] = None


@dataclass(frozen=True)
class StickerEntry:
    """A manifest entry, addressed by its pack-local id."""
    id: int
    emoji: Optional[str] = None


@dataclass
class PackManifest:
    """Manifest describing a pack before serialization."""
    title: str
    author: str
    cover: StickerEntry
    stickers: List[StickerEntry] = field(default_factory=list)


@dataclass(frozen=True)
class Credentials:
    """Account credentials used to authenticate uploads."""
    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class UploadResult:
    """Identifier and hex key of an uploaded pack."""
    pack_id: str
    key: str
