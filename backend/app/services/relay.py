"""
Messaging relay: send one text or photo message to the configured chat,
retrying with linear backoff.

Attempt i (0-based) that fails is followed by a pause of
``backoff_seconds * (i + 1)`` (1s, 2s, 3s with the defaults) unless it
was the last attempt, in which case DeliveryError is raised with the final
underlying error attached. There is no jitter and no circuit breaker.

The pause goes through an injectable ``sleep`` coroutine function so tests
can record delays instead of waiting for them.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from app.errors import DeliveryError
from app.models.verification import PhotoMessage, RelayMessage, TextMessage
from app.services.telegram_client import TelegramClient

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]

DEFAULT_RETRIES = 3
DEFAULT_BACKOFF_SECONDS = 1.0


class MessageRelay:
    """Delivers RelayMessages to one chat through a TelegramClient."""

    def __init__(
        self,
        client: TelegramClient,
        chat_id: str,
        retries: int = DEFAULT_RETRIES,
        backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
        sleep: Sleep = asyncio.sleep,
    ):
        if retries < 1:
            raise ValueError("retries must be at least 1")
        self._client = client
        self._chat_id = chat_id
        self.retries = retries
        self.backoff_seconds = backoff_seconds
        self.sleep = sleep

    async def send_once(self, message: RelayMessage) -> Any:
        """Single delivery attempt; errors propagate unchanged."""
        if isinstance(message, PhotoMessage):
            return await self._client.send_photo(
                self._chat_id, message.binary_content, caption=message.caption
            )
        return await self._client.send_message(
            self._chat_id, message.content, parse_mode=message.parse_mode
        )

    async def send(self, message: RelayMessage) -> Any:
        """
        Deliver ``message``, retrying up to ``self.retries`` attempts in total.

        Returns:
            The Bot API result of the successful attempt.

        Raises:
            DeliveryError: every attempt failed. ``last_error`` holds the
                final underlying exception (also chained as __cause__).
        """
        for attempt in range(self.retries):
            try:
                return await self.send_once(message)
            except Exception as exc:
                if attempt == self.retries - 1:
                    raise DeliveryError(
                        f"Failed to deliver {message.kind} message after "
                        f"{self.retries} attempts: {exc}",
                        last_error=exc,
                        attempts=self.retries,
                    ) from exc
                delay = self.backoff_seconds * (attempt + 1)
                logger.warning(
                    f"Retry {attempt + 1} for {message.kind} message in {delay:g}s: {exc}"
                )
                await self.sleep(delay)

    async def send_text(self, text: str, parse_mode: Optional[str] = None) -> Any:
        return await self.send(TextMessage(content=text, parse_mode=parse_mode))

    async def send_photo(self, content: bytes, caption: str) -> Any:
        return await self.send(PhotoMessage(binary_content=content, caption=caption))
