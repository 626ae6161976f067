"""
Job application endpoint.

POST /submit-application: validate the careers form and forward it to the
operator chat as one HTML-formatted message.

By default this path does not retry: it makes a single sendMessage call and
reports Telegram's ``ok`` flag. Set APPLICATION_RETRY_ON_SEND=true to route
it through the retrying relay instead.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from app.config import Settings, get_settings
from app.dependencies import build_relay, get_sleep, get_telegram_client
from app.errors import ConfigurationError, DeliveryError
from app.models.application import ApplicationResponse
from app.services.application import format_application_message, validate_application
from app.services.relay import Sleep
from app.services.telegram_client import TelegramClient

logger = logging.getLogger(__name__)

router = APIRouter()

PARSE_MODE = "HTML"


def _server_error(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"success": False, "message": message})


@router.post(
    "/submit-application",
    response_model=ApplicationResponse,
    responses={
        400: {"description": "A form field failed validation (first failure only)"},
        500: {"description": "Missing bot configuration or Telegram rejected the message"},
    },
)
async def submit_application(
    payload: Any = Body(None),
    client: TelegramClient = Depends(get_telegram_client),
    settings: Settings = Depends(get_settings),
    sleep: Sleep = Depends(get_sleep),
):
    if not isinstance(payload, dict):
        payload = {}

    # ValidationError is rendered as a 400 by the app-level handler
    form = validate_application(payload)

    try:
        settings.require_messaging_credentials()
    except ConfigurationError as exc:
        logger.error(f"Missing environment variables: {exc}")
        return _server_error("Server configuration error")

    text = format_application_message(form)

    try:
        if settings.application_retry_on_send:
            relay = build_relay(client, settings, sleep, retry_on_send=True)
            await relay.send_text(text, parse_mode=PARSE_MODE)
        else:
            body = await client.call(
                "sendMessage",
                data={
                    "chat_id": settings.telegram_chat_id,
                    "text": text,
                    "parse_mode": PARSE_MODE,
                },
            )
            if not body.get("ok"):
                logger.error(f"Telegram API error: {body}")
                return _server_error("Error sending to Telegram")
    except DeliveryError as exc:
        logger.error(f"Telegram API error: {exc}")
        return _server_error("Error sending to Telegram")
    except Exception as exc:
        logger.exception(f"Server error while submitting application: {exc}")
        return _server_error("Server error")

    logger.info(f"Application submitted for position {form.job.value!r}")
    return ApplicationResponse(success=True, message="Application submitted successfully")
