"""
FastAPI dependencies that hand the shared Telegram client, settings and
delay function to route handlers.

Tests replace these through ``app.dependency_overrides`` (e.g. a mocked
client and a sleep that records delays instead of waiting).
"""

import asyncio

from fastapi import Request

from app.config import Settings
from app.errors import ConfigurationError
from app.services.relay import MessageRelay, Sleep
from app.services.telegram_client import TelegramClient


def get_telegram_client(request: Request) -> TelegramClient:
    """Return the client built at startup and stored on ``app.state``."""
    client = getattr(request.app.state, "telegram_client", None)
    if client is None:
        raise ConfigurationError("Telegram client is not initialised")
    return client


def get_sleep() -> Sleep:
    return asyncio.sleep


def build_relay(
    client: TelegramClient,
    settings: Settings,
    sleep: Sleep,
    retry_on_send: bool,
) -> MessageRelay:
    """
    Bind a relay to the configured chat.

    With ``retry_on_send`` off the relay makes exactly one attempt per send.

    Raises:
        ConfigurationError: bot token or chat id is missing.
    """
    settings.require_messaging_credentials()
    return MessageRelay(
        client,
        settings.telegram_chat_id,
        retries=settings.relay_retries if retry_on_send else 1,
        backoff_seconds=settings.relay_backoff_seconds,
        sleep=sleep,
    )
