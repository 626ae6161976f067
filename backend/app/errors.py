"""
Error taxonomy shared by the services and routers.

Every error carries the HTTP status it should surface as, so the app-level
exception handler in app.main can render it without knowing the subtype.
"""

from typing import Optional


class RelayServiceError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(RelayServiceError):
    """Client input is missing or malformed."""

    status_code = 400


class ConfigurationError(RelayServiceError):
    """A required secret (bot token, chat id) is not configured."""


class DeliveryError(RelayServiceError):
    """
    The messaging API could not be reached or rejected the message after
    the relay's retry budget was spent.
    """

    def __init__(self, message: str, last_error: Optional[BaseException] = None, attempts: int = 0):
        super().__init__(message)
        self.last_error = last_error
        self.attempts = attempts


class NetworkError(RelayServiceError):
    """The health check target could not be reached."""
