"""
Unit tests for the Telegram Bot API client.
Requests are served by httpx.MockTransport; no network calls are made.
"""

import json

import httpx
import pytest

from app.services.telegram_client import TelegramAPIError, TelegramClient

API_BASE = "https://api.telegram.test"
TOKEN = "123456:test-token"


def _make_client(handler) -> TelegramClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TelegramClient(TOKEN, api_base=API_BASE, http_client=http)


class TestSendMessage:

    @pytest.mark.asyncio
    async def test_posts_json_to_method_url(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"ok": True, "result": {"message_id": 7}})

        client = _make_client(handler)
        result = await client.send_message("42", "hello")

        assert result == {"message_id": 7}
        assert seen["url"].startswith(f"{API_BASE}/bot123456")
        assert seen["url"].endswith("/sendMessage")
        assert seen["body"] == {"chat_id": "42", "text": "hello"}

    @pytest.mark.asyncio
    async def test_includes_parse_mode_when_given(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"ok": True, "result": {}})

        client = _make_client(handler)
        await client.send_message("42", "<b>hi</b>", parse_mode="HTML")

        assert seen["body"]["parse_mode"] == "HTML"

    @pytest.mark.asyncio
    async def test_ok_false_raises_api_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                400,
                json={"ok": False, "error_code": 400, "description": "Bad Request: chat not found"},
            )

        client = _make_client(handler)
        with pytest.raises(TelegramAPIError) as exc_info:
            await client.send_message("42", "hello")

        assert exc_info.value.error_code == 400
        assert "chat not found" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_non_json_body_raises_api_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="<html>Bad Gateway</html>")

        client = _make_client(handler)
        with pytest.raises(TelegramAPIError) as exc_info:
            await client.send_message("42", "hello")

        assert "502" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = _make_client(handler)
        with pytest.raises(httpx.ConnectError):
            await client.send_message("42", "hello")


class TestCall:

    @pytest.mark.asyncio
    async def test_returns_body_even_when_not_ok(self):
        """call() leaves the ok-flag decision to the caller."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403, json={"ok": False, "description": "Forbidden"})

        client = _make_client(handler)
        body = await client.call("sendMessage", data={"chat_id": "42", "text": "x"})

        assert body == {"ok": False, "description": "Forbidden"}


class TestSendPhoto:

    @pytest.mark.asyncio
    async def test_uploads_multipart_with_caption(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["content_type"] = request.headers["content-type"]
            seen["body"] = request.content
            return httpx.Response(200, json={"ok": True, "result": {"message_id": 8}})

        client = _make_client(handler)
        result = await client.send_photo("42", b"\xff\xd8jpeg-bytes", caption="Front Image 1/4")

        assert result == {"message_id": 8}
        assert seen["url"].endswith("/sendPhoto")
        assert seen["content_type"].startswith("multipart/form-data")
        assert b'name="photo"' in seen["body"]
        assert b"\xff\xd8jpeg-bytes" in seen["body"]
        assert b"Front Image 1/4" in seen["body"]
        assert b'name="chat_id"' in seen["body"]


class TestGetUpdates:

    @pytest.mark.asyncio
    async def test_long_poll_sends_offset_and_stretches_timeout(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            seen["timeout"] = request.extensions["timeout"]
            return httpx.Response(200, json={"ok": True, "result": [{"update_id": 5}]})

        client = _make_client(handler)
        updates = await client.get_updates(offset=5, timeout=25)

        assert updates == [{"update_id": 5}]
        assert seen["url"].endswith("/getUpdates")
        assert seen["body"] == {"offset": 5, "timeout": 25, "allowed_updates": ["message"]}
        assert seen["timeout"]["read"] == 35

    @pytest.mark.asyncio
    async def test_conflict_raises_api_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                409,
                json={
                    "ok": False,
                    "error_code": 409,
                    "description": "Conflict: terminated by other getUpdates request",
                },
            )

        client = _make_client(handler)

        with pytest.raises(TelegramAPIError) as exc_info:
            await client.get_updates()

        assert exc_info.value.error_code == 409


class TestPing:

    @pytest.mark.asyncio
    async def test_follows_redirect_to_docs(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path in ("", "/"):
                return httpx.Response(302, headers={"location": f"{API_BASE}/bots/api"})
            return httpx.Response(200, text="docs")

        client = _make_client(handler)
        assert await client.ping() == 200

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        client = _make_client(handler)
        with pytest.raises(httpx.HTTPStatusError):
            await client.ping()

    @pytest.mark.asyncio
    async def test_api_base_trailing_slash_is_trimmed(self):
        client = TelegramClient(TOKEN, api_base=f"{API_BASE}/")
        assert client.api_base == API_BASE
        await client.aclose()
