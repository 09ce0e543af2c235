"""Tests for utility helpers."""

from __future__ import annotations

import unittest

from stickerpack.utils import (
    AuthenticationError,
    DecodeError,
    StickerPackError,
    StickerProcessingError,
    TooLargeError,
    UploadError,
    build_install_url,
    describe_error,
    format_bytes,
)


class TestUtils(unittest.TestCase):
    def test_install_url(self) -> None:
        url = build_install_url("abc123", "ff" * 32)
        self.assertEqual(
            url, f"https://signal.art/addstickers/#pack_id=abc123&pack_key={'ff' * 32}"
        )

    def test_format_bytes(self) -> None:
        self.assertEqual(format_bytes(512), "512.00 B")
        self.assertEqual(format_bytes(300 * 1024), "300.00 KB")
        with self.assertRaises(ValueError):
            format_bytes(-1)

    def test_error_kinds_and_keys(self) -> None:
        error = TooLargeError("Sticker file was too large")
        self.assertIsInstance(error, StickerProcessingError)
        self.assertIsInstance(error, StickerPackError)
        self.assertEqual(error.kind, "too_large")
        self.assertEqual(error.message_key, "StickerCreator--Toasts--tooLarge")

        override = DecodeError("bad", message_key="custom-key")
        self.assertEqual(override.message_key, "custom-key")
        self.assertEqual(UploadError("x").kind, "upload")

    def test_describe_error(self) -> None:
        self.assertEqual(describe_error(TooLargeError("raw")), "The selected image is too large")
        self.assertIn("Signal", describe_error(AuthenticationError("raw")))
        self.assertEqual(describe_error(StickerPackError("plain message")), "plain message")
        self.assertEqual(describe_error(RuntimeError()), "RuntimeError")


if __name__ == "__main__":
    unittest.main()
