"""Typed failures raised by the chat completion gateway."""

from __future__ import annotations

from typing import Any


class GatewayError(RuntimeError):
    """Base class for every gateway failure."""

    retryable = False

    def __init__(self, message: str, status: int | None = None, raw: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.raw = raw


class GatewayConfigurationError(GatewayError):
    """Raised when the gateway cannot be built, e.g. the API key is empty."""


class BadRequestError(GatewayError):
    """HTTP 400 from the provider."""

    def __init__(self, message: str, raw: Any = None) -> None:
        super().__init__(message, 400, raw)


class AuthError(GatewayError):
    """HTTP 401/403 from the provider."""

    def __init__(self, message: str, status: int = 401, raw: Any = None) -> None:
        super().__init__(message, status, raw)


class RateLimitError(GatewayError):
    """HTTP 429 from the provider."""

    retryable = True

    def __init__(self, message: str, retry_after: int | None = None, raw: Any = None) -> None:
        super().__init__(message, 429, raw)
        self.retry_after = retry_after


class ServerError(GatewayError):
    """HTTP 5xx from the provider."""

    retryable = True


class NetworkError(GatewayError):
    """Transport failure or timeout before a response was received."""

    def __init__(self, message: str, raw: Any = None) -> None:
        super().__init__(message, None, raw)
