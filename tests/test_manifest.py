"""Tests for the binary pack manifest."""

from __future__ import annotations

import unittest

from stickerpack.common.types import PackInfo, StickerEntry
from stickerpack.core.manifest import (
    StickerPack,
    create_manifest,
    decode_manifest,
    encode_manifest,
)


class TestManifest(unittest.TestCase):
    def test_wire_bytes(self) -> None:
        manifest = create_manifest(
            PackInfo(title="T", author="A"),
            [StickerEntry(id=0, emoji="x")],
            StickerEntry(id=1),
        )
        expected = (
            b"\x0a\x01T"  # title
            b"\x12\x01A"  # author
            b"\x1a\x04\x08\x01\x12\x00"  # cover {id: 1, emoji: ""}
            b"\x22\x05\x08\x00\x12\x01x"  # stickers[0] {id: 0, emoji: "x"}
        )
        self.assertEqual(encode_manifest(manifest), expected)

    def test_emoji_is_omitted_when_absent(self) -> None:
        manifest = create_manifest(
            PackInfo(title="Cats", author="Me"),
            [StickerEntry(id=0, emoji="🐱"), StickerEntry(id=1)],
            StickerEntry(id=2),
        )
        proto = StickerPack()
        proto.ParseFromString(encode_manifest(manifest))
        self.assertTrue(proto.stickers[0].HasField("emoji"))
        self.assertFalse(proto.stickers[1].HasField("emoji"))
        self.assertTrue(proto.cover.HasField("emoji"))
        self.assertEqual(proto.cover.emoji, "")

    def test_decode_round_trip(self) -> None:
        manifest = create_manifest(
            PackInfo(title="Dogs", author="Someone"),
            [StickerEntry(id=0, emoji="🐶"), StickerEntry(id=1)],
            StickerEntry(id=1),
        )
        decoded = decode_manifest(encode_manifest(manifest))
        self.assertEqual(decoded.title, "Dogs")
        self.assertEqual(decoded.author, "Someone")
        self.assertEqual(decoded.stickers, [StickerEntry(0, "🐶"), StickerEntry(1, None)])
        self.assertEqual(decoded.cover, StickerEntry(1, ""))

    def test_ids_must_be_dense(self) -> None:
        with self.assertRaises(ValueError):
            create_manifest(
                PackInfo(title="T", author="A"),
                [StickerEntry(id=0), StickerEntry(id=2)],
                StickerEntry(id=0),
            )

    def test_decode_rejects_garbage(self) -> None:
        with self.assertRaises(ValueError):
            decode_manifest(b"\xff\xff\xff\xff")


if __name__ == "__main__":
    unittest.main()
