"""
Bot command poller.

Long-polls getUpdates in a background task and answers ``/start`` in the
chat that sent it with a short welcome. Every other update is acknowledged
(the offset moves past it) and ignored.

The task is started and cancelled by the app lifespan (see app.main).
"""

import asyncio
import logging
from typing import Any, Optional

import httpx

from app.services.relay import Sleep
from app.services.telegram_client import TelegramAPIError, TelegramClient

logger = logging.getLogger(__name__)

WELCOME_TEXT = "Welcome to device verification"

DEFAULT_POLL_TIMEOUT_SECONDS = 25
DEFAULT_ERROR_BACKOFF_SECONDS = 5.0


def parse_command(text: Any) -> Optional[str]:
    """
    Return the command name at the start of a message.

    "/start" and "/start@VerifyBot payload" both give "start"; text that
    does not begin with a slash gives None.
    """
    if not isinstance(text, str) or not text.startswith("/"):
        return None
    parts = text[1:].split(maxsplit=1)
    if not parts:
        return None
    return parts[0].split("@", 1)[0] or None


class BotCommandPoller:
    """Answers /start for one bot via getUpdates long polling."""

    def __init__(
        self,
        client: TelegramClient,
        poll_timeout: int = DEFAULT_POLL_TIMEOUT_SECONDS,
        error_backoff_seconds: float = DEFAULT_ERROR_BACKOFF_SECONDS,
        sleep: Sleep = asyncio.sleep,
    ):
        self._client = client
        self.poll_timeout = poll_timeout
        self.error_backoff_seconds = error_backoff_seconds
        self.sleep = sleep
        self.offset: Optional[int] = None

    async def handle_update(self, update: dict) -> bool:
        """Reply to a /start message. Returns True when a reply was sent."""
        message = update.get("message") or {}
        if parse_command(message.get("text")) != "start":
            return False

        chat_id = (message.get("chat") or {}).get("id")
        if chat_id is None:
            return False

        await self._client.send_message(str(chat_id), WELCOME_TEXT)
        return True

    async def poll_once(self) -> int:
        """
        Fetch one batch of updates and handle each.

        The offset advances before a reply is attempted, so an update whose
        reply fails is not delivered again.

        Returns:
            Number of updates received.
        """
        updates = await self._client.get_updates(offset=self.offset, timeout=self.poll_timeout)
        for update in updates:
            update_id = update.get("update_id")
            if isinstance(update_id, int):
                self.offset = update_id + 1
            try:
                await self.handle_update(update)
            except (httpx.HTTPError, TelegramAPIError) as exc:
                logger.warning(f"Failed to answer update {update_id}: {exc}")
        return len(updates)

    async def run(self) -> None:
        """Poll until cancelled. Poll failures are logged and retried after a pause."""
        logger.info("Bot command polling started")
        while True:
            try:
                await self.poll_once()
            except (httpx.HTTPError, TelegramAPIError) as exc:
                logger.warning(
                    f"getUpdates failed, retrying in {self.error_backoff_seconds:g}s: {exc}"
                )
                await self.sleep(self.error_backoff_seconds)
