"""
Application configuration.
Reads the Telegram bot credentials and relay tuning knobs from the
environment (a .env file is loaded first when present).

Environment variables
---------------------
TELEGRAM_BOT_TOKEN          Bot token issued by @BotFather (required).
TELEGRAM_CHAT_ID            Chat that receives every relayed message (required).
PORT / HOST                 Where uvicorn listens (default 0.0.0.0:3000).
TELEGRAM_API_BASE           Bot API host (default https://api.telegram.org).
TELEGRAM_TIMEOUT_SECONDS    Per-request timeout for Bot API calls.
RELAY_RETRIES               Attempts per relayed message (default 3).
RELAY_BACKOFF_SECONDS       Linear backoff unit between attempts (default 1.0).
IMAGE_SEND_DELAY_SECONDS    Pause between consecutive photo sends (default 0.8).
MAX_IMAGES_PER_SIDE         Cap on front/back images per submission (default 4).
VERIFY_RETRY_ON_SEND        Route /verify sends through the retrying relay.
APPLICATION_RETRY_ON_SEND   Route /submit-application through the relay.
MAX_REQUEST_BYTES           Largest accepted request body (default 50 MB).
PUBLIC_DIR                  Directory holding the static form page.
CORS_ORIGINS                Comma-separated list of extra CORS origins.
BOT_POLLING_ENABLED         Answer /start via getUpdates long polling (default true).
BOT_POLL_TIMEOUT_SECONDS    Long-poll window per getUpdates call (default 25).
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from app.errors import ConfigurationError

load_dotenv()

DEFAULT_PUBLIC_DIR = Path(__file__).resolve().parent / "public"

_TRUTHY = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUTHY


def _env_list(name: str) -> List[str]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings(BaseModel):
    """Immutable snapshot of the service configuration."""

    model_config = {"frozen": True}

    telegram_bot_token: Optional[str] = None
    telegram_chat_id: Optional[str] = None
    telegram_api_base: str = "https://api.telegram.org"
    telegram_timeout_seconds: float = 30.0

    host: str = "0.0.0.0"
    port: int = 3000

    relay_retries: int = 3
    relay_backoff_seconds: float = 1.0
    image_send_delay_seconds: float = 0.8
    max_images_per_side: int = 4

    # The verification path has always retried while the application path
    # has not; both are kept as explicit switches.
    verify_retry_on_send: bool = True
    application_retry_on_send: bool = False

    max_request_bytes: int = 50 * 1024 * 1024
    public_dir: Path = DEFAULT_PUBLIC_DIR
    cors_origins: List[str] = []

    bot_polling_enabled: bool = True
    bot_poll_timeout_seconds: int = 25

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the current process environment."""
        return cls(
            telegram_bot_token=os.getenv("TELEGRAM_BOT_TOKEN") or None,
            telegram_chat_id=os.getenv("TELEGRAM_CHAT_ID") or None,
            telegram_api_base=os.getenv("TELEGRAM_API_BASE", "https://api.telegram.org"),
            telegram_timeout_seconds=float(os.getenv("TELEGRAM_TIMEOUT_SECONDS", "30")),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "3000")),
            relay_retries=int(os.getenv("RELAY_RETRIES", "3")),
            relay_backoff_seconds=float(os.getenv("RELAY_BACKOFF_SECONDS", "1.0")),
            image_send_delay_seconds=float(os.getenv("IMAGE_SEND_DELAY_SECONDS", "0.8")),
            max_images_per_side=int(os.getenv("MAX_IMAGES_PER_SIDE", "4")),
            verify_retry_on_send=_env_bool("VERIFY_RETRY_ON_SEND", True),
            application_retry_on_send=_env_bool("APPLICATION_RETRY_ON_SEND", False),
            max_request_bytes=int(os.getenv("MAX_REQUEST_BYTES", str(50 * 1024 * 1024))),
            public_dir=Path(os.getenv("PUBLIC_DIR") or DEFAULT_PUBLIC_DIR),
            cors_origins=_env_list("CORS_ORIGINS"),
            bot_polling_enabled=_env_bool("BOT_POLLING_ENABLED", True),
            bot_poll_timeout_seconds=int(os.getenv("BOT_POLL_TIMEOUT_SECONDS", "25")),
        )

    @property
    def bot_id(self) -> str:
        """The numeric bot id: the part of the token before the colon."""
        if not self.telegram_bot_token:
            return ""
        return self.telegram_bot_token.split(":")[0]

    def require_messaging_credentials(self) -> None:
        """
        Raise ConfigurationError unless both the bot token and chat id are set.

        Called once at startup (fatal there) and again by request handlers
        that talk to the Bot API directly.
        """
        missing = [
            name
            for name, value in (
                ("TELEGRAM_BOT_TOKEN", self.telegram_bot_token),
                ("TELEGRAM_CHAT_ID", self.telegram_chat_id),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, read from the environment once."""
    return Settings.from_env()
