"""Tests for pack key derivation and attachment encryption."""

from __future__ import annotations

import hashlib
import unittest

from stickerpack.core.crypto import (
    _split_keys,
    decrypt_attachment,
    derive_sticker_pack_key,
    encrypt,
    encrypt_attachment,
    generate_iv,
    generate_pack_key,
    wipe,
)
from stickerpack.utils import EncryptionError


class TestKeyDerivation(unittest.TestCase):
    def test_generated_sizes(self) -> None:
        self.assertEqual(len(generate_pack_key()), 32)
        self.assertEqual(len(generate_iv()), 16)
        self.assertNotEqual(generate_pack_key(), generate_pack_key())

    def test_derivation_is_deterministic(self) -> None:
        pack_key = bytes(range(32))
        first = derive_sticker_pack_key(pack_key)
        second = derive_sticker_pack_key(pack_key)
        self.assertEqual(len(first), 64)
        self.assertEqual(first, second)
        self.assertNotEqual(first, derive_sticker_pack_key(bytes(32)))

    def test_rejects_wrong_pack_key_length(self) -> None:
        with self.assertRaises(EncryptionError):
            derive_sticker_pack_key(b"short")

    def test_wipe_zeroes_buffer(self) -> None:
        key = generate_pack_key()
        wipe(key)
        self.assertEqual(key, bytearray(32))

    def test_wipe_clears_split_key_halves(self) -> None:
        keys = derive_sticker_pack_key(generate_pack_key())
        aes_key, mac_key = _split_keys(keys)
        wipe(keys)
        self.assertEqual(bytes(aes_key), bytes(32))
        self.assertEqual(bytes(mac_key), bytes(32))


class TestAttachmentEncryption(unittest.TestCase):
    def setUp(self) -> None:
        self.keys = derive_sticker_pack_key(generate_pack_key())
        self.iv = generate_iv()

    def test_encrypt_decrypt_round_trip(self) -> None:
        for data in (b"", b"x", b"hello world" * 100, bytes(range(256)) * 64):
            with self.subTest(length=len(data)):
                encrypted = encrypt(data, self.keys, self.iv)
                self.assertEqual(decrypt_attachment(encrypted, self.keys), data)

    def test_layout_is_iv_ciphertext_mac(self) -> None:
        data = b"a" * 20
        result = encrypt_attachment(data, self.keys, self.iv)
        self.assertEqual(result.ciphertext[:16], self.iv)
        # 20 bytes pad to two AES blocks
        self.assertEqual(len(result.ciphertext), 16 + 32 + 32)
        self.assertEqual(result.digest, hashlib.sha256(result.ciphertext).digest())

    def test_encrypt_returns_only_ciphertext(self) -> None:
        data = b"sticker"
        self.assertEqual(
            encrypt(data, self.keys, self.iv),
            encrypt_attachment(data, self.keys, self.iv).ciphertext,
        )

    def test_shared_iv_across_assets(self) -> None:
        first = encrypt(b"manifest", self.keys, self.iv)
        second = encrypt(b"sticker", self.keys, self.iv)
        self.assertEqual(first[:16], second[:16])
        self.assertNotEqual(first, second)

    def test_tampered_data_fails_integrity_check(self) -> None:
        encrypted = bytearray(encrypt(b"hello", self.keys, self.iv))
        encrypted[20] ^= 0x01
        with self.assertRaises(EncryptionError):
            decrypt_attachment(bytes(encrypted), self.keys)

    def test_wrong_key_fails(self) -> None:
        encrypted = encrypt(b"hello", self.keys, self.iv)
        other = derive_sticker_pack_key(generate_pack_key())
        with self.assertRaises(EncryptionError):
            decrypt_attachment(encrypted, other)

    def test_short_data_fails(self) -> None:
        with self.assertRaises(EncryptionError):
            decrypt_attachment(b"\x00" * 40, self.keys)

    def test_rejects_bad_iv(self) -> None:
        with self.assertRaises(EncryptionError):
            encrypt(b"data", self.keys, b"\x00" * 8)


if __name__ == "__main__":
    unittest.main()
