"""
Inline image decoder.

Turns the data-URI strings posted by the verification page
(``data:image/jpeg;base64,/9j/4AAQ...``) into raw bytes ready for upload.
Invalid entries are dropped silently: a partly broken submission still
relays whatever images are usable.
"""

import base64
import binascii
import re
from typing import Any

from app.models.verification import DecodedImage

DEFAULT_MAX_IMAGES = 4

IMAGE_MARKER = "data:image"

# data:image/<subtype>;base64,<payload>
_DATA_URI_RE = re.compile(r"^data:image/[\w.+-]+;base64,")


def _decode_one(candidate: Any) -> DecodedImage | None:
    if not isinstance(candidate, str) or not candidate.startswith(IMAGE_MARKER):
        return None

    match = _DATA_URI_RE.match(candidate)
    if not match:
        return None

    payload = candidate[match.end():]
    # Browsers and some encoders omit the trailing "=" padding
    padded = payload + "=" * (-len(payload) % 4)
    try:
        content = base64.b64decode(padded, validate=False)
    except (binascii.Error, ValueError):
        return None
    if not content:
        return None

    return DecodedImage(raw_encoded=payload, binary_content=content)


def decode_images(candidates: Any, max_images: int = DEFAULT_MAX_IMAGES) -> list[DecodedImage]:
    """
    Decode up to ``max_images`` data-URI images, preserving input order.

    Args:
        candidates: The raw JSON value from the request. Anything other than
            a list/tuple yields an empty result.
        max_images: Cap on the number of returned images.

    Returns:
        DecodedImage entries. Non-strings, strings without the data:image
        marker, and payloads that are not valid base64 are skipped and do
        not count toward the cap.
    """
    if not isinstance(candidates, (list, tuple)):
        return []

    decoded: list[DecodedImage] = []
    for candidate in candidates:
        if len(decoded) >= max_images:
            break
        image = _decode_one(candidate)
        if image is not None:
            decoded.append(image)
    return decoded
