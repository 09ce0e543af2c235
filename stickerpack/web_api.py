"""Sticker service client: upload forms and CDN uploads over aiohttp."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

import aiohttp

from .common.constants import DEFAULT_UPLOAD_CONCURRENCY
from .utils import UploadError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

STICKER_FORM_PATH = "/v1/sticker/pack/form"
# Upload form fields as returned by the service, mapped to CDN form field names
FORM_FIELDS = (
    ("key", "key"),
    ("credential", "x-amz-credential"),
    ("acl", "acl"),
    ("algorithm", "x-amz-algorithm"),
    ("date", "x-amz-date"),
    ("policy", "policy"),
    ("signature", "x-amz-signature"),
)


class StickerSession(Protocol):
    async def put_stickers(
        self,
        encrypted_manifest: bytes,
        encrypted_stickers: Sequence[bytes],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> str:
        """Upload an encrypted pack and return the assigned pack id."""


class StickerService(Protocol):
    def connect(
        self, username: str, password: str, use_websocket: bool = False
    ) -> StickerSession:
        """Open an authenticated session."""


def make_put_params(form: Dict[str, Any], encrypted_bin: bytes) -> aiohttp.FormData:
    """
    Build the multipart body for one CDN upload.

    Args:
        form: Upload form from the service.
        encrypted_bin: Encrypted asset.

    Returns:
        aiohttp FormData.
    """
    data = aiohttp.FormData()
    try:
        for source, target in FORM_FIELDS:
            data.add_field(target, str(form[source]))
    except KeyError as exc:
        raise UploadError(f"Upload form is missing field {exc.args[0]!r}.") from exc
    data.add_field("Content-Type", "application/octet-stream")
    data.add_field(
        "file",
        encrypted_bin,
        content_type="application/octet-stream",
        filename="file",
    )
    return data


class StickerUploadSession:
    """An authenticated upload session (one per pack upload)."""

    def __init__(
        self,
        server_url: str,
        cdn_url: str,
        username: str,
        password: str,
        concurrency: int = DEFAULT_UPLOAD_CONCURRENCY,
        timeout: int = 120,
    ) -> None:
        self._server_url = server_url.rstrip("/")
        self._cdn_url = cdn_url.rstrip("/")
        self._auth = aiohttp.BasicAuth(username, password)
        self._concurrency = concurrency
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def _get_upload_forms(
        self, session: aiohttp.ClientSession, count: int
    ) -> Dict[str, Any]:
        url = f"{self._server_url}{STICKER_FORM_PATH}/{count}"
        # Credentials go to the service only, never to the CDN
        headers = {"Authorization": self._auth.encode()}
        async with session.get(url, headers=headers) as resp:
            if resp.status != 200:
                raise UploadError(f"Failed to get sticker upload forms: {resp.status}")
            payload = await resp.json()

        stickers = payload.get("stickers") if isinstance(payload, dict) else None
        if (
            not isinstance(payload, dict)
            or not payload.get("packId")
            or not isinstance(payload.get("manifest"), dict)
            or not isinstance(stickers, list)
            or len(stickers) != count
        ):
            raise UploadError("Sticker upload forms are malformed.")
        return payload

    async def _upload_to_cdn(
        self, session: aiohttp.ClientSession, form: Dict[str, Any], encrypted_bin: bytes
    ) -> None:
        data = make_put_params(form, encrypted_bin)
        async with session.post(f"{self._cdn_url}/", data=data) as resp:
            if resp.status >= 300:
                raise UploadError(f"CDN upload failed: {resp.status}")

    async def put_stickers(
        self,
        encrypted_manifest: bytes,
        encrypted_stickers: Sequence[bytes],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> str:
        """
        Upload an encrypted manifest and its stickers.

        Args:
            encrypted_manifest: Encrypted manifest bytes.
            encrypted_stickers: Encrypted sticker bytes, in id order.
            progress_callback: Called with (done, total) after each sticker.

        Returns:
            Pack id assigned by the service.

        Raises:
            UploadError: If any request fails.
        """
        total = len(encrypted_stickers)
        semaphore = asyncio.Semaphore(self._concurrency)
        done: List[int] = []

        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                forms = await self._get_upload_forms(session, total)
                pack_id = str(forms["packId"])
                logger.info("Uploading pack %s (%s stickers)", pack_id, total)

                await self._upload_to_cdn(session, forms["manifest"], encrypted_manifest)

                async def _upload(form: Dict[str, Any], encrypted_bin: bytes) -> None:
                    async with semaphore:
                        await self._upload_to_cdn(session, form, encrypted_bin)
                        done.append(1)
                        if progress_callback:
                            progress_callback(len(done), total)

                tasks = [
                    asyncio.create_task(_upload(form, encrypted_bin))
                    for form, encrypted_bin in zip(forms["stickers"], encrypted_stickers)
                ]
                try:
                    await asyncio.gather(*tasks)
                except BaseException:
                    for task in tasks:
                        task.cancel()
                    raise
        except UploadError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            raise UploadError(f"Sticker upload failed: {exc}") from exc
        return pack_id


class StickerServerClient:
    """Entry point to the sticker service.

    ``connect`` performs no I/O; every upload opens its own HTTP session.
    """

    def __init__(
        self,
        server_url: str,
        cdn_url: str,
        concurrency: int = DEFAULT_UPLOAD_CONCURRENCY,
        timeout: int = 120,
    ) -> None:
        self.server_url = server_url
        self.cdn_url = cdn_url
        self.concurrency = concurrency
        self.timeout = timeout

    def connect(
        self, username: str, password: str, use_websocket: bool = False
    ) -> StickerUploadSession:
        """
        Create an authenticated upload session.

        Args:
            username: Account username.
            password: Account password.
            use_websocket: Must be False; only plain HTTP is supported.

        Returns:
            StickerUploadSession.
        """
        if use_websocket:
            raise UploadError("Websocket transport is not supported for sticker uploads.")
        return StickerUploadSession(
            self.server_url,
            self.cdn_url,
            username,
            password,
            concurrency=self.concurrency,
            timeout=self.timeout,
        )
