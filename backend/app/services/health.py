"""
Health check against the Telegram Bot API host.
"""

from datetime import datetime, timezone

import httpx

from app.errors import NetworkError
from app.services.telegram_client import TelegramClient


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


async def check_telegram_reachable(client: TelegramClient) -> None:
    """
    Ping the Bot API host once (no retry).

    Raises:
        NetworkError: the host could not be reached or answered with an
            error status. The message is the underlying error text.
    """
    try:
        await client.ping()
    except httpx.HTTPError as exc:
        raise NetworkError(str(exc) or exc.__class__.__name__) from exc
