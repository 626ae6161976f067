"""
Pydantic models for the health endpoint.
"""

from typing import Optional

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Reachability of the Telegram Bot API host at a point in time."""

    status: str                       # "healthy" or "unhealthy"
    telegram: Optional[str] = None    # "reachable" when healthy
    error: Optional[str] = None       # transport error text when unhealthy
    timestamp: str                    # ISO-8601 UTC, "Z" suffix
