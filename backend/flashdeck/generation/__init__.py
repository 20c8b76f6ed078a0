"""Flashcard candidate generation package exports."""

from flashdeck.generation.catalog import ALLOWED_MODELS, DEFAULT_MODEL, resolve_model
from flashdeck.generation.flashcard_generator import (
    DEFAULT_CANDIDATE_PROMPT,
    FlashcardGenerator,
    GenerationParseError,
    build_generation_messages,
    parse_candidates,
)
from flashdeck.generation.generator_interface import CandidateGenerator
from flashdeck.generation.types import GeneratedCandidate, GenerationOutput

__all__ = [
    "ALLOWED_MODELS",
    "DEFAULT_CANDIDATE_PROMPT",
    "DEFAULT_MODEL",
    "CandidateGenerator",
    "FlashcardGenerator",
    "GeneratedCandidate",
    "GenerationOutput",
    "GenerationParseError",
    "build_generation_messages",
    "parse_candidates",
    "resolve_model",
]
