"""Typed generation outputs independent of persistence."""

from dataclasses import dataclass, field

from flashdeck.llm.types import TokenUsage


@dataclass(slots=True)
class GeneratedCandidate:
    """Flashcard proposal returned by the model."""

    front: str
    back: str
    prompt: str


@dataclass(slots=True)
class GenerationOutput:
    """Container for generator outputs."""

    model: str
    candidates: list[GeneratedCandidate] = field(default_factory=list)
    dropped_count: int = 0
    usage: TokenUsage = field(default_factory=TokenUsage)
    prompt_version: str | None = None
