"""Request and response types for the chat completion gateway."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

MessageRole = Literal["system", "user", "assistant", "tool"]


class ChatMessage(BaseModel):
    """One message in a chat completion request."""

    role: MessageRole
    content: str
    name: str | None = None


class ChatRequest(BaseModel):
    """Validated chat completion request."""

    model: str = Field(min_length=1)
    messages: list[ChatMessage] = Field(min_length=1)
    temperature: float | None = Field(default=None, ge=0, le=2)
    max_tokens: int | None = Field(default=None, ge=0)
    response_format: dict[str, Any] | None = None
    metadata: dict[str, Any] | None = None

    @field_validator("model")
    @classmethod
    def validate_model(cls, value: str) -> str:
        clean = value.strip()
        if not clean:
            raise ValueError("Model identifier is required")
        return clean


@dataclass(slots=True)
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass(slots=True)
class ChatResult:
    """Parsed completion returned by the gateway."""

    id: str | None
    model: str
    content: str
    usage: TokenUsage = field(default_factory=TokenUsage)
    finish_reason: str | None = None


@dataclass(slots=True)
class ModelInfo:
    """Catalog entry from the provider's model list."""

    id: str
    name: str
    description: str | None = None
    context_length: int | None = None
    pricing: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Bounded exponential backoff applied to transient gateway errors."""

    max_attempts: int = 3
    initial_delay_seconds: float = 1.0
    max_delay_seconds: float = 10.0
    backoff_multiplier: float = 2.0
