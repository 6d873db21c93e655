"""
Exception hierarchy shared by every layer of the SDK.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "InitCancelledError",
    "LinkGenerationError",
    "NetworkError",
    "NotInitializedError",
    "PasarelaError",
    "RequestTimeoutError",
    "UnsupportedModeError",
]


class PasarelaError(Exception):
    """Base class for every error raised by the SDK."""


class ConfigurationError(PasarelaError):
    """Raised when the supplied configuration is invalid."""


class NetworkError(PasarelaError):
    """Raised when a gateway request fails before a usable JSON body is read."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class RequestTimeoutError(NetworkError, TimeoutError):
    """Raised when a gateway request exceeds the configured timeout."""


class AuthenticationError(PasarelaError):
    """The authenticate endpoint rejected the key or answered with a malformed payload."""


class LinkGenerationError(PasarelaError):
    """The generate-link endpoint failed or answered with a malformed payload."""


class NotInitializedError(PasarelaError):
    """Session data was requested before the session reached the ready state."""


class UnsupportedModeError(PasarelaError):
    """The requested render mode is not available on the current host."""


class InitCancelledError(PasarelaError):
    """An in-flight initialization was abandoned because the session was destroyed."""
