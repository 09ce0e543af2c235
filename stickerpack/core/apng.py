"""Animated PNG detection by scanning PNG chunks."""

import math
import struct
from dataclasses import dataclass
from typing import Optional

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
_CHUNK_HEADER = struct.Struct(">I4s")
_ACTL = struct.Struct(">II")


@dataclass(frozen=True)
class AnimatedPngData:
    """Animation control data from an ``acTL`` chunk."""
    frame_count: int
    num_plays: float

    @property
    def loops_forever(self) -> bool:
        return math.isinf(self.num_plays)


def get_animated_png_data(buffer: bytes) -> Optional[AnimatedPngData]:
    """
    Return animation data if the buffer is an animated PNG.

    A PNG is animated when an ``acTL`` chunk appears before the first
    ``IDAT`` chunk. A play count of 0 means the animation loops forever.

    Args:
        buffer: Raw file bytes.

    Returns:
        AnimatedPngData, or None for anything that is not an APNG.
    """
    if not buffer.startswith(PNG_SIGNATURE):
        return None

    offset = len(PNG_SIGNATURE)
    end = len(buffer)
    while offset + _CHUNK_HEADER.size <= end:
        length, chunk_type = _CHUNK_HEADER.unpack_from(buffer, offset)
        data_start = offset + _CHUNK_HEADER.size
        if chunk_type in (b"IDAT", b"IEND"):
            return None
        if chunk_type == b"acTL":
            if length < _ACTL.size or data_start + _ACTL.size > end:
                return None
            frame_count, num_plays = _ACTL.unpack_from(buffer, data_start)
            return AnimatedPngData(
                frame_count=frame_count,
                num_plays=num_plays or math.inf,
            )
        # chunk data is followed by a 4-byte CRC
        offset = data_start + length + 4
    return None
