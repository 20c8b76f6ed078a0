"""Chat completion gateway package exports."""

from flashdeck.llm.client import OpenRouterClient
from flashdeck.llm.errors import (
    AuthError,
    BadRequestError,
    GatewayConfigurationError,
    GatewayError,
    NetworkError,
    RateLimitError,
    ServerError,
)
from flashdeck.llm.types import ChatMessage, ChatRequest, ChatResult, ModelInfo, RetryPolicy, TokenUsage

__all__ = [
    "AuthError",
    "BadRequestError",
    "ChatMessage",
    "ChatRequest",
    "ChatResult",
    "GatewayConfigurationError",
    "GatewayError",
    "ModelInfo",
    "NetworkError",
    "OpenRouterClient",
    "RateLimitError",
    "RetryPolicy",
    "ServerError",
    "TokenUsage",
]
