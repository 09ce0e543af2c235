"""Sticker pack assembly, encryption and upload workflow."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, List, NamedTuple, Optional, Protocol, Sequence, Tuple

from .common.constants import (
    DEFAULT_MESSAGES,
    LEGACY_USERNAME_ITEM_ID,
    MESSAGE_KEY_AUTHENTICATION,
    PASSWORD_ITEM_ID,
    USERNAME_ITEM_ID,
)
from .common.types import (
    Credentials,
    NormalizedSticker,
    PackInfo,
    PackManifest,
    StickerEntry,
    StickerInput,
    UploadResult,
)
from .core.crypto import derive_sticker_pack_key, encrypt, generate_iv, generate_pack_key, wipe
from .core.manifest import create_manifest, encode_manifest
from .system_integration import show_message_box
from .utils import AuthenticationError, MissingImageDataError, UploadError
from .web_api import ProgressCallback, StickerService

logger = logging.getLogger(__name__)

Notifier = Callable[[str, str], None]


class CredentialStore(Protocol):
    def get_item(self, item_id: str) -> Optional[str]:
        """Return the stored value for an item id, if any."""


def resolve_credentials(store: CredentialStore) -> Optional[Credentials]:
    """
    Look up upload credentials, falling back to the legacy username item.

    Args:
        store: Item store.

    Returns:
        Credentials, or None when username or password is missing.
    """
    username = store.get_item(USERNAME_ITEM_ID) or store.get_item(LEGACY_USERNAME_ITEM_ID)
    password = store.get_item(PASSWORD_ITEM_ID)
    if not username or not password:
        return None
    return Credentials(username=username, password=password)


class DedupedStickers(NamedTuple):
    """Upload set after collapsing identical images."""
    stickers: List[StickerInput]
    cover_id: int
    cover_is_unique: bool


def _image_key(sticker: StickerInput) -> bytes:
    if sticker.image_data is None or not sticker.image_data.buffer:
        raise MissingImageDataError("encryptStickers: Missing image data on sticker")
    return bytes(sticker.image_data.buffer)


def dedupe_stickers(
    stickers: Sequence[StickerInput], cover: Optional[NormalizedSticker]
) -> DedupedStickers:
    """
    Collapse stickers and cover with byte-identical image data.

    The first occurrence keeps its position, so ids follow the original
    order and a unique cover lands last.

    Args:
        stickers: Stickers in pack order.
        cover: Cover image.

    Returns:
        DedupedStickers with the upload set and the cover id.

    Raises:
        MissingImageDataError: If any sticker or the cover has no buffer.
    """
    unique: List[StickerInput] = []
    positions: Dict[bytes, int] = {}
    for sticker in stickers:
        key = _image_key(sticker)
        if key not in positions:
            positions[key] = len(unique)
            unique.append(sticker)

    cover_key = _image_key(StickerInput(image_data=cover))
    if cover_key in positions:
        return DedupedStickers(unique, positions[cover_key], False)
    unique.append(StickerInput(image_data=cover, emoji=""))
    return DedupedStickers(unique, len(unique) - 1, True)


def build_pack_manifest(info: PackInfo, deduped: DedupedStickers) -> PackManifest:
    """
    Number the unique stickers and attach the cover reference.

    Args:
        info: Title and author.
        deduped: Result of dedupe_stickers.

    Returns:
        PackManifest.
    """
    regular = deduped.stickers[:-1] if deduped.cover_is_unique else deduped.stickers
    entries = [
        StickerEntry(id=sticker_id, emoji=sticker.emoji or None)
        for sticker_id, sticker in enumerate(regular)
    ]
    return create_manifest(info, entries, StickerEntry(id=deduped.cover_id, emoji=""))


class StickerPackUploader:
    """Encrypt a pack and upload it through the sticker service."""

    def __init__(
        self,
        store: CredentialStore,
        service: StickerService,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self._store = store
        self._service = service
        self._notifier = notifier or show_message_box

    async def _require_credentials(self) -> Credentials:
        credentials = await asyncio.to_thread(resolve_credentials, self._store)
        if credentials is None:
            message = DEFAULT_MESSAGES[MESSAGE_KEY_AUTHENTICATION]
            # The default notifier blocks until the dialog is dismissed
            await asyncio.to_thread(self._notifier, "warning", message)
            raise AuthenticationError(message)
        return credentials

    async def encrypt_and_upload(
        self,
        manifest: PackInfo,
        stickers: Sequence[StickerInput],
        cover: NormalizedSticker,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> UploadResult:
        """
        Encrypt and upload a sticker pack.

        Args:
            manifest: Pack title and author.
            stickers: Stickers in pack order with optional emoji.
            cover: Cover image; may equal one of the stickers.
            progress_callback: Called with (done, total) during upload.

        Returns:
            UploadResult with the pack id and hex pack key.

        Raises:
            AuthenticationError: If no credentials are stored.
            MissingImageDataError: If a sticker has no image data.
            UploadError: If connecting or uploading fails.
        """
        credentials = await self._require_credentials()

        pack_key = generate_pack_key()
        encryption_key = derive_sticker_pack_key(pack_key)
        iv = generate_iv()
        try:
            deduped = dedupe_stickers(stickers, cover)
            unique = deduped.stickers
            pack_manifest = build_pack_manifest(manifest, deduped)
            logger.info(
                "Prepared pack %r: %s stickers, %s to upload, cover id %s",
                manifest.title,
                len(stickers),
                len(unique),
                deduped.cover_id,
            )

            def _encrypt_all() -> Tuple[bytes, List[bytes]]:
                encrypted_manifest = encrypt(
                    encode_manifest(pack_manifest), encryption_key, iv
                )
                encrypted_stickers = [
                    encrypt(sticker.image_data.buffer, encryption_key, iv)
                    for sticker in unique
                ]
                return encrypted_manifest, encrypted_stickers

            # Encryption is CPU-bound, offload to thread pool
            encrypted_manifest, encrypted_stickers = await asyncio.to_thread(_encrypt_all)

            try:
                session = self._service.connect(
                    credentials.username, credentials.password, use_websocket=False
                )
                pack_id = await session.put_stickers(
                    encrypted_manifest, encrypted_stickers, progress_callback
                )
            except UploadError:
                logger.exception("Sticker pack upload failed")
                raise
            except Exception as exc:
                logger.exception("Sticker pack upload failed")
                raise UploadError(f"Sticker pack upload failed: {exc}") from exc

            hex_key = pack_key.hex()
        finally:
            wipe(pack_key)
            wipe(encryption_key)

        logger.info("Uploaded pack %s", pack_id)
        return UploadResult(pack_id=pack_id, key=hex_key)
