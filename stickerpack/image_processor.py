"""Validation and normalization of user images into sticker buffers."""

from __future__ import annotations

import asyncio
import base64
import io
import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import aiofiles
from PIL import Image, ImageOps, UnidentifiedImageError

from .common.constants import (
    ANIMATED_CONTENT_TYPE,
    MAX_STICKER_BYTE_LENGTH,
    MAX_STICKER_DIMENSION,
    MIN_STICKER_DIMENSION,
    STATIC_CONTENT_TYPE,
    STICKER_SIZE,
    WEBP_QUALITY,
)
from .common.types import ImageMeta, NormalizedSticker
from .core.apng import AnimatedPngData, get_animated_png_data
from .utils import (
    DecodeError,
    DimensionsTooLargeError,
    DimensionsTooSmallError,
    MustLoopForeverError,
    NotSquareError,
    TooLargeError,
)

logger = logging.getLogger(__name__)

TRANSPARENT = (0, 0, 0, 0)


class StaticStickerPolicy:
    """Resize onto a transparent square canvas and re-encode as WebP."""

    content_type = STATIC_CONTENT_TYPE

    def process(self, buffer: bytes, image: Image.Image, meta: ImageMeta) -> bytes:
        rgba = image.convert("RGBA")
        canvas = ImageOps.pad(
            rgba,
            (STICKER_SIZE, STICKER_SIZE),
            method=Image.Resampling.LANCZOS,
            color=TRANSPARENT,
        )
        output = io.BytesIO()
        canvas.save(output, format="WEBP", quality=WEBP_QUALITY)
        processed = output.getvalue()
        if len(processed) > MAX_STICKER_BYTE_LENGTH:
            raise TooLargeError("Sticker file was too large")
        return processed


class AnimatedPngPolicy:
    """Validate an animated PNG and pass it through unchanged.

    Animated PNGs are not re-encoded: resizing them would drop frames.
    """

    content_type = ANIMATED_CONTENT_TYPE

    def __init__(self, animation: AnimatedPngData) -> None:
        self.animation = animation

    def process(self, buffer: bytes, image: Image.Image, meta: ImageMeta) -> bytes:
        if len(buffer) > MAX_STICKER_BYTE_LENGTH:
            raise TooLargeError("Sticker file was too large")
        if meta.width != meta.height:
            raise NotSquareError("Sticker must be square")
        if meta.width > MAX_STICKER_DIMENSION:
            raise DimensionsTooLargeError("Sticker dimensions are too large")
        if meta.width < MIN_STICKER_DIMENSION:
            raise DimensionsTooSmallError("Sticker dimensions are too small")
        if not self.animation.loops_forever:
            raise MustLoopForeverError("Animated stickers must loop forever")
        return buffer


StickerPolicy = Union[StaticStickerPolicy, AnimatedPngPolicy]


def select_policy(buffer: bytes) -> StickerPolicy:
    """
    Pick the normalization policy by sniffing the raw bytes.

    Args:
        buffer: Raw image bytes.

    Returns:
        AnimatedPngPolicy for animated PNGs, StaticStickerPolicy otherwise.
    """
    animation = get_animated_png_data(buffer)
    if animation is not None:
        return AnimatedPngPolicy(animation)
    return StaticStickerPolicy()


def _read_meta(image: Image.Image) -> ImageMeta:
    width, height = image.size
    return ImageMeta(
        width=width,
        height=height,
        format=image.format,
        mode=image.mode,
        has_alpha="A" in image.getbands() or "transparency" in image.info,
        frame_count=getattr(image, "n_frames", 1),
    )


def _open_image(buffer: bytes) -> Tuple[Image.Image, ImageMeta]:
    try:
        image = Image.open(io.BytesIO(buffer))
        meta = _read_meta(image)
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as exc:
        raise DecodeError("Sticker height or width were falsy") from exc
    if not meta.width or not meta.height:
        image.close()
        raise DecodeError("Sticker height or width were falsy")
    return image, meta


def to_data_uri(content_type: str, buffer: bytes) -> str:
    """Build a base64 data URI for previews."""
    encoded = base64.b64encode(buffer).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


def process_sticker_image(buffer: bytes, path: Optional[str] = None) -> NormalizedSticker:
    """
    Validate and normalize a raw image into a sticker.

    Args:
        buffer: Raw image bytes.
        path: Optional source path or identifier, carried through.

    Returns:
        NormalizedSticker.

    Raises:
        StickerProcessingError: A subclass naming the rule the image broke.
    """
    image, meta = _open_image(buffer)
    policy = select_policy(buffer)
    try:
        processed = policy.process(buffer, image, meta)
    except (OSError, ValueError) as exc:
        raise DecodeError(f"Failed to process sticker image: {exc}") from exc
    finally:
        image.close()

    logger.debug(
        "Processed sticker %s: %sx%s %s -> %s (%s bytes)",
        path or "<buffer>",
        meta.width,
        meta.height,
        meta.format,
        policy.content_type,
        len(processed),
    )
    return NormalizedSticker(
        path=path,
        buffer=processed,
        content_type=policy.content_type,
        data_uri=to_data_uri(policy.content_type, processed),
        meta=meta,
    )


async def process_sticker_file(path: Union[str, Path]) -> NormalizedSticker:
    """
    Read an image file and normalize it (async).

    Args:
        path: Path to the image file.

    Returns:
        NormalizedSticker.
    """
    if not path:
        raise ValueError(f"Path {path!r} is not valid!")
    async with aiofiles.open(path, "rb") as infile:
        buffer = await infile.read()
    # Decoding and encoding are CPU-bound, offload to thread pool
    return await asyncio.to_thread(process_sticker_image, buffer, str(path))
