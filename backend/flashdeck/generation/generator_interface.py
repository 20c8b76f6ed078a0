"""Generator interface for pluggable candidate generation implementations."""

from abc import ABC, abstractmethod

from flashdeck.generation.types import GenerationOutput


class CandidateGenerator(ABC):
    """Abstract flashcard candidate generator."""

    @abstractmethod
    def generate(self, input_text: str, model: str, custom_prompt: str | None = None) -> GenerationOutput:
        """Turn source text into validated flashcard candidates."""
