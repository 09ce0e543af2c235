"""Pack key derivation and AES-256-CBC + HMAC-SHA256 attachment encryption."""

import hashlib
import hmac
import secrets
from dataclasses import dataclass

from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives import hmac as crypto_hmac
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from ..common.constants import DERIVED_KEY_LENGTH, IV_LENGTH, PACK_KEY_LENGTH
from ..utils import EncryptionError

STICKER_PACK_INFO = b"Sticker Pack"
AES_KEY_LENGTH = 32
MAC_LENGTH = 32


@dataclass(frozen=True)
class EncryptedAttachment:
    """Encrypted attachment blob plus its SHA-256 digest."""
    ciphertext: bytes
    digest: bytes


def generate_pack_key() -> bytearray:
    """
    Generate a fresh pack key.

    Returns:
        32 random bytes in a mutable buffer so callers can wipe it.
    """
    return bytearray(secrets.token_bytes(PACK_KEY_LENGTH))


def generate_iv() -> bytes:
    """Generate a 16-byte initialization vector."""
    return secrets.token_bytes(IV_LENGTH)


def derive_sticker_pack_key(pack_key: bytes) -> bytearray:
    """
    Expand a pack key into AES and HMAC keys using HKDF-SHA256.

    Args:
        pack_key: 32-byte pack key.

    Returns:
        64 bytes: AES-256 key followed by HMAC-SHA256 key.
    """
    if len(pack_key) != PACK_KEY_LENGTH:
        raise EncryptionError(f"Pack key must be {PACK_KEY_LENGTH} bytes.")
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=DERIVED_KEY_LENGTH,
        salt=bytes(32),
        info=STICKER_PACK_INFO,
    )
    return bytearray(hkdf.derive(bytes(pack_key)))


def _split_keys(keys: bytes) -> tuple[memoryview, memoryview]:
    if len(keys) != DERIVED_KEY_LENGTH:
        raise EncryptionError(f"Derived key must be {DERIVED_KEY_LENGTH} bytes.")
    # Views, not copies, so wipe() on the derived key clears both halves
    view = memoryview(keys)
    return view[:AES_KEY_LENGTH], view[AES_KEY_LENGTH:]


def _hmac_sha256(key: bytes, data: bytes) -> bytes:
    mac = crypto_hmac.HMAC(key, hashes.SHA256())
    mac.update(data)
    return mac.finalize()


def encrypt_attachment(data: bytes, keys: bytes, iv: bytes) -> EncryptedAttachment:
    """
    Encrypt one attachment.

    Args:
        data: Plaintext bytes.
        keys: 64-byte derived key.
        iv: 16-byte initialization vector.

    Returns:
        EncryptedAttachment whose ciphertext is IV + AES-CBC ciphertext + MAC.
    """
    if len(iv) != IV_LENGTH:
        raise EncryptionError(f"IV must be {IV_LENGTH} bytes.")
    aes_key, mac_key = _split_keys(keys)

    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(bytes(data)) + padder.finalize()
    encryptor = Cipher(algorithms.AES(aes_key), modes.CBC(iv)).encryptor()
    body = iv + encryptor.update(padded) + encryptor.finalize()

    encrypted = body + _hmac_sha256(mac_key, body)
    return EncryptedAttachment(
        ciphertext=encrypted,
        digest=hashlib.sha256(encrypted).digest(),
    )


def encrypt(data: bytes, keys: bytes, iv: bytes) -> bytes:
    """
    Encrypt data and keep only the ciphertext blob.

    Args:
        data: Plaintext bytes.
        keys: 64-byte derived key.
        iv: 16-byte initialization vector.

    Returns:
        Encrypted bytes.
    """
    return encrypt_attachment(data, keys, iv).ciphertext


def decrypt_attachment(data: bytes, keys: bytes) -> bytes:
    """
    Verify and decrypt an attachment produced by encrypt_attachment.

    Args:
        data: IV + ciphertext + MAC.
        keys: 64-byte derived key.

    Returns:
        Plaintext bytes.

    Raises:
        EncryptionError: If data is truncated, the MAC does not match, or
            padding is invalid.
    """
    aes_key, mac_key = _split_keys(keys)
    if len(data) < IV_LENGTH + algorithms.AES.block_size // 8 + MAC_LENGTH:
        raise EncryptionError("Data too short to be an encrypted attachment.")

    body, their_mac = data[:-MAC_LENGTH], data[-MAC_LENGTH:]
    if not hmac.compare_digest(_hmac_sha256(mac_key, body), their_mac):
        raise EncryptionError("Attachment integrity check failed.")

    iv, ciphertext = body[:IV_LENGTH], body[IV_LENGTH:]
    try:
        decryptor = Cipher(algorithms.AES(aes_key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as exc:
        raise EncryptionError("Failed to decrypt attachment.") from exc


def wipe(buffer: bytearray) -> None:
    """
    Overwrite key material in place.

    Best effort: copies made inside the crypto backend are not reached.
    """
    for index in range(len(buffer)):
        buffer[index] = 0
