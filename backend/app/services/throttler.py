"""
Batch throttler: forward a list of images through the relay one at a time,
pausing between sends so the Bot API's per-chat rate limit is not tripped.
"""

import logging
from typing import Optional, Sequence

from app.models.verification import DecodedImage
from app.services.relay import MessageRelay, Sleep

logger = logging.getLogger(__name__)

DEFAULT_SEND_DELAY_SECONDS = 0.8


async def send_image_batch(
    relay: MessageRelay,
    images: Sequence[DecodedImage],
    label: str,
    delay_seconds: float = DEFAULT_SEND_DELAY_SECONDS,
    sleep: Optional[Sleep] = None,
) -> int:
    """
    Send ``images`` in order, captioned "{label} Image {i}/{n}".

    Each send fully resolves (including its retries) before the next starts.
    The pause happens between sends only, never after the last one. A
    DeliveryError from any send aborts the rest of the batch.

    Returns:
        Number of images sent.
    """
    pause = sleep or relay.sleep
    total = len(images)

    for index, image in enumerate(images):
        await relay.send_photo(
            image.binary_content,
            caption=f"{label} Image {index + 1}/{total}",
        )
        if index < total - 1:
            await pause(delay_seconds)

    logger.info(f"Sent {total} {label.lower()} image(s)")
    return total
