"""Core pack logic (pure Python, no network code)."""

from .apng import AnimatedPngData, get_animated_png_data
from .crypto import (
    decrypt_attachment,
    derive_sticker_pack_key,
    encrypt,
    encrypt_attachment,
    generate_iv,
    generate_pack_key,
)
from .manifest import create_manifest, decode_manifest, encode_manifest

__all__ = [
    "AnimatedPngData",
    "get_animated_png_data",
    "decrypt_attachment",
    "derive_sticker_pack_key",
    "encrypt",
    "encrypt_attachment",
    "generate_iv",
    "generate_pack_key",
    "create_manifest",
    "decode_manifest",
    "encode_manifest",
]
