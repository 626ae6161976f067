"""
Verification Relay API
FastAPI application that relays device verification submissions and job
applications to a Telegram chat.
"""

import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from typing import List

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from app.config import get_settings
from app.dependencies import get_telegram_client
from app.errors import NetworkError, RelayServiceError
from app.models.health import HealthResponse
from app.routers import application, verification
from app.services.bot_commands import BotCommandPoller
from app.services.health import check_telegram_reachable, utc_timestamp
from app.services.telegram_client import TelegramClient

# Configure logging to output to console
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

FORM_PAGE = "next-step.html"

settings = get_settings()


async def start_telegram_client() -> None:
    """
    Build the shared Telegram client, start the /start command poller and
    log where the API is listening.

    Missing TELEGRAM_BOT_TOKEN / TELEGRAM_CHAT_ID raises ConfigurationError
    here, which aborts startup.
    """
    settings.require_messaging_credentials()
    app.state.telegram_client = TelegramClient(
        settings.telegram_bot_token,
        api_base=settings.telegram_api_base,
        timeout=settings.telegram_timeout_seconds,
    )
    if settings.bot_polling_enabled:
        poller = BotCommandPoller(
            app.state.telegram_client,
            poll_timeout=settings.bot_poll_timeout_seconds,
        )
        app.state.bot_poller = asyncio.create_task(poller.run())
    logger.info(
        "Server running on port %s\n"
        "  Telegram bot: @%s",
        settings.port,
        settings.bot_id,
    )


async def close_telegram_client() -> None:
    """Cancel the command poller and close the shared client."""
    task = getattr(app.state, "bot_poller", None)
    if task is not None:
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task
        del app.state.bot_poller

    client = getattr(app.state, "telegram_client", None)
    if client is not None:
        await client.aclose()
        del app.state.telegram_client


@asynccontextmanager
async def lifespan(app: FastAPI):
    await start_telegram_client()
    yield
    await close_telegram_client()


app = FastAPI(
    title="Verification Relay API",
    description="Relays device verification submissions and job applications to Telegram",
    version="0.1.0",
    lifespan=lifespan,
)


def get_cors_origins() -> List[str]:
    """
    Build the list of allowed CORS origins.

    The form page is served by this app, so same-origin requests need no
    entry. Extra origins come from the CORS_ORIGINS environment variable as
    a comma-separated list, e.g.:
        CORS_ORIGINS=https://verify.example.com,https://careers.example.com

    Duplicates are removed while preserving order.
    """
    seen: set = set()
    origins: List[str] = []
    for origin in settings.cors_origins:
        if origin not in seen:
            seen.add(origin)
            origins.append(origin)
    return origins


app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@app.middleware("http")
async def limit_request_body(request: Request, call_next):
    """Reject bodies above MAX_REQUEST_BYTES before they are read."""
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit():
        if int(content_length) > settings.max_request_bytes:
            return JSONResponse(
                status_code=413,
                content={"success": False, "message": "Request body too large"},
            )
    return await call_next(request)


@app.exception_handler(RelayServiceError)
async def relay_service_error_handler(request: Request, exc: RelayServiceError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message},
    )


app.include_router(verification.router, tags=["verification"])
app.include_router(application.router, tags=["application"])


@app.get("/", include_in_schema=False)
async def root():
    """Serve the job application form."""
    page = settings.public_dir / FORM_PAGE
    if not page.is_file():
        return JSONResponse(status_code=404, content={"success": False, "message": "Not found"})
    return FileResponse(page)


@app.get("/health", response_model=HealthResponse, response_model_exclude_none=True)
async def health(client: TelegramClient = Depends(get_telegram_client)):
    """
    Check that the Telegram Bot API host is reachable.

    Single attempt, no retry. Returns 500 with the transport error text when
    the host cannot be reached.
    """
    try:
        await check_telegram_reachable(client)
    except NetworkError as exc:
        logger.error(f"Telegram health check failed: {exc}")
        return JSONResponse(
            status_code=500,
            content=HealthResponse(
                status="unhealthy",
                error=exc.message,
                timestamp=utc_timestamp(),
            ).model_dump(exclude_none=True),
        )

    return HealthResponse(status="healthy", telegram="reachable", timestamp=utc_timestamp())


# Static assets (stylesheets, scripts, images) for the form pages. Mounted
# last so the API routes above take precedence.
app.mount("/", StaticFiles(directory=settings.public_dir, check_dir=False), name="public")


def run() -> None:
    """Console entry point: serve the app with uvicorn on HOST:PORT."""
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port, log_level="info")


if __name__ == "__main__":
    run()
