"""
Telegram Bot API client.

Thin async wrapper over the Bot API methods this service needs
(sendMessage, sendPhoto, and getUpdates for the /start command poller) plus
a reachability ping for the health check.
One instance is built at startup (see app.main) and injected into request
handlers, so tests can swap it for a mock or point it at an
httpx.MockTransport.

Bot API conventions
-------------------
Every method is POST {api_base}/bot{token}/{method}. Responses are JSON:

  {"ok": true,  "result": {...}}
  {"ok": false, "error_code": 400, "description": "Bad Request: ..."}

Telegram reports most failures with ok=false *and* a 4xx status, so
``call`` returns the decoded body regardless of status and leaves the
ok-flag check to the caller. ``send_message`` / ``send_photo`` raise
TelegramAPIError when ok is false.
"""

import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.telegram.org"


class TelegramAPIError(Exception):
    """Raised when the Bot API answers with ok=false or a non-JSON body."""

    def __init__(self, method: str, description: str, error_code: Optional[int] = None):
        super().__init__(f"Telegram {method} failed: {description}")
        self.method = method
        self.description = description
        self.error_code = error_code


class TelegramClient:
    """Async Bot API client bound to one bot token."""

    def __init__(
        self,
        token: str,
        api_base: str = DEFAULT_API_BASE,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self._token = token
        self._api_base = api_base.rstrip("/")
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    @property
    def api_base(self) -> str:
        return self._api_base

    def _method_url(self, method: str) -> str:
        return f"{self._api_base}/bot{self._token}/{method}"

    async def call(
        self,
        method: str,
        data: Optional[dict] = None,
        files: Optional[dict] = None,
        timeout: Optional[float] = None,
    ) -> dict:
        """
        Invoke a Bot API method and return the decoded JSON body.

        JSON bodies are sent for plain calls; multipart form data when
        ``files`` is given. ``timeout`` overrides the client timeout for this
        call (long polls outlast it). Transport failures propagate as httpx
        errors.
        """
        url = self._method_url(method)
        extra: dict = {}
        if timeout is not None:
            extra["timeout"] = timeout
        if files:
            response = await self._http.post(url, data=data, files=files, **extra)
        else:
            response = await self._http.post(url, json=data or {}, **extra)

        try:
            body = response.json()
        except ValueError:
            raise TelegramAPIError(
                method,
                f"non-JSON response (HTTP {response.status_code})",
                response.status_code,
            )
        if not isinstance(body, dict):
            raise TelegramAPIError(method, "unexpected response shape", response.status_code)
        return body

    @staticmethod
    def _ensure_ok(method: str, body: dict) -> Any:
        if not body.get("ok"):
            description = body.get("description") or "unknown error"
            logger.error(f"Telegram API error on {method}: {description}")
            raise TelegramAPIError(method, description, body.get("error_code"))
        return body.get("result")

    async def send_message(
        self,
        chat_id: str,
        text: str,
        parse_mode: Optional[str] = None,
    ) -> Any:
        """Send a text message. Returns the Bot API ``result`` object."""
        payload: dict = {"chat_id": chat_id, "text": text}
        if parse_mode:
            payload["parse_mode"] = parse_mode
        body = await self.call("sendMessage", data=payload)
        return self._ensure_ok("sendMessage", body)

    async def send_photo(
        self,
        chat_id: str,
        photo: bytes,
        caption: str = "",
        filename: str = "image.jpg",
    ) -> Any:
        """Upload a photo with a caption. Returns the Bot API ``result`` object."""
        body = await self.call(
            "sendPhoto",
            data={"chat_id": chat_id, "caption": caption},
            files={"photo": (filename, photo)},
        )
        return self._ensure_ok("sendPhoto", body)

    async def get_updates(self, offset: Optional[int] = None, timeout: int = 25) -> list:
        """
        Long-poll for new message updates.

        Blocks up to ``timeout`` seconds on the Telegram side; the HTTP read
        timeout is stretched accordingly. Returns the list of Update objects
        (empty when the poll times out).
        """
        payload: dict = {"timeout": timeout, "allowed_updates": ["message"]}
        if offset is not None:
            payload["offset"] = offset
        body = await self.call("getUpdates", data=payload, timeout=timeout + 10)
        return self._ensure_ok("getUpdates", body) or []

    async def ping(self) -> int:
        """
        GET the API host root and return the final status code.

        The root redirects to the Bot API docs, so redirects are followed.
        Raises httpx.HTTPError when the host is unreachable or answers
        with an error status.
        """
        response = await self._http.get(self._api_base, follow_redirects=True)
        response.raise_for_status()
        return response.status_code

    async def aclose(self) -> None:
        await self._http.aclose()
