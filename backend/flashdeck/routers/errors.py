"""Translate service and gateway failures into HTTP errors."""

import logging

from fastapi import HTTPException, status

from flashdeck.generation.flashcard_generator import GenerationParseError
from flashdeck.llm.errors import (
    GatewayConfigurationError,
    GatewayError,
    NetworkError,
    RateLimitError,
)
from flashdeck.services.errors import NotFoundError

logger = logging.getLogger(__name__)


def to_http_exception(exc: Exception) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, GenerationParseError):
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Generation failed: {exc}")
    if isinstance(exc, RateLimitError):
        headers = None
        if exc.retry_after is not None:
            headers = {"Retry-After": str(int(round(exc.retry_after)))}
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="AI service rate limit exceeded, please retry later",
            headers=headers,
        )
    if isinstance(exc, (NetworkError, GatewayConfigurationError)):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=f"AI service unavailable: {exc}")
    if isinstance(exc, GatewayError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"AI service error: {exc}")
    logger.error("http.unmapped_error error=%s", exc.__class__.__name__)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")
