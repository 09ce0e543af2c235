"""Tests for the sticker service client against a local aiohttp server."""

from __future__ import annotations

import asyncio
import base64
import unittest
import warnings
from typing import Any, Dict, List

from aiohttp import web
from aiohttp.test_utils import TestServer

from stickerpack.utils import UploadError
from stickerpack.web_api import StickerServerClient, make_put_params


def _form(key: str) -> Dict[str, str]:
    return {
        "key": key,
        "credential": "cred",
        "acl": "private",
        "algorithm": "AWS4-HMAC-SHA256",
        "date": "20240101T000000Z",
        "policy": "policy",
        "signature": "sig",
    }


class FakeBackend:
    def __init__(self, cdn_status: int = 204, forms_status: int = 200) -> None:
        self.cdn_status = cdn_status
        self.forms_status = forms_status
        self.auth_headers: List[str] = []
        self.cdn_auth_headers: List[str] = []
        self.uploads: Dict[str, bytes] = {}
        self.upload_fields: List[Dict[str, Any]] = []

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/v1/sticker/pack/form/{count}", self.get_forms)
        app.router.add_post("/cdn/", self.post_cdn)
        return app

    async def get_forms(self, request: web.Request) -> web.Response:
        self.auth_headers.append(request.headers.get("Authorization", ""))
        if self.forms_status != 200:
            return web.Response(status=self.forms_status)
        count = int(request.match_info["count"])
        return web.json_response(
            {
                "packId": "abc123",
                "manifest": _form("stickers/abc123/manifest.proto"),
                "stickers": [_form(f"stickers/abc123/full/{i}") for i in range(count)],
            }
        )

    async def post_cdn(self, request: web.Request) -> web.Response:
        self.cdn_auth_headers.append(request.headers.get("Authorization", ""))
        fields: Dict[str, Any] = {}
        reader = await request.multipart()
        async for part in reader:
            if part.name == "file":
                fields["file"] = await part.read()
            else:
                fields[part.name] = await part.text()
        self.upload_fields.append(fields)
        self.uploads[fields["key"]] = bytes(fields["file"])
        return web.Response(status=self.cdn_status)


class TestStickerServerClient(unittest.TestCase):
    def _run_upload(self, backend: FakeBackend, stickers: List[bytes], progress=None) -> str:
        async def _go() -> str:
            server = TestServer(backend.app())
            await server.start_server()
            try:
                base = str(server.make_url("")).rstrip("/")
                client = StickerServerClient(base, f"{base}/cdn", concurrency=2, timeout=10)
                session = client.connect("user", "pass")
                return await session.put_stickers(b"manifest-bytes", stickers, progress)
            finally:
                await server.close()

        return asyncio.run(_go())

    def test_put_stickers_uploads_everything(self) -> None:
        backend = FakeBackend()
        progress: List[tuple] = []
        pack_id = self._run_upload(
            backend,
            [b"s0", b"s1", b"s2"],
            lambda done, total: progress.append((done, total)),
        )

        self.assertEqual(pack_id, "abc123")
        expected_auth = "Basic " + base64.b64encode(b"user:pass").decode("ascii")
        self.assertEqual(backend.auth_headers, [expected_auth])
        self.assertEqual(backend.cdn_auth_headers, [""] * 4)
        self.assertEqual(backend.uploads["stickers/abc123/manifest.proto"], b"manifest-bytes")
        for index in range(3):
            self.assertEqual(backend.uploads[f"stickers/abc123/full/{index}"], f"s{index}".encode())
        self.assertEqual(progress, [(1, 3), (2, 3), (3, 3)])

        fields = backend.upload_fields[0]
        self.assertEqual(fields["x-amz-credential"], "cred")
        self.assertEqual(fields["x-amz-algorithm"], "AWS4-HMAC-SHA256")
        self.assertEqual(fields["Content-Type"], "application/octet-stream")

    def test_basic_auth_does_not_warn(self) -> None:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            self._run_upload(FakeBackend(), [b"s0"])
        messages = [str(item.message) for item in caught]
        self.assertFalse([text for text in messages if "auth" in text.lower()])

    def test_forms_failure_raises_upload_error(self) -> None:
        with self.assertRaises(UploadError):
            self._run_upload(FakeBackend(forms_status=401), [b"s0"])

    def test_cdn_failure_raises_upload_error(self) -> None:
        with self.assertRaises(UploadError):
            self._run_upload(FakeBackend(cdn_status=403), [b"s0", b"s1"])

    def test_unreachable_server_raises_upload_error(self) -> None:
        async def _go() -> str:
            client = StickerServerClient("http://127.0.0.1:9", "http://127.0.0.1:9", timeout=5)
            return await client.connect("user", "pass").put_stickers(b"m", [b"s"])

        with self.assertRaises(UploadError):
            asyncio.run(_go())

    def test_websocket_transport_is_rejected(self) -> None:
        client = StickerServerClient("https://example.com", "https://cdn.example.com")
        with self.assertRaises(UploadError):
            client.connect("user", "pass", use_websocket=True)

    def test_make_put_params_requires_all_fields(self) -> None:
        form = _form("key")
        del form["policy"]
        with self.assertRaises(UploadError):
            make_put_params(form, b"data")


if __name__ == "__main__":
    unittest.main()
