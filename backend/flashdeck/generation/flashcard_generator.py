"""LLM-backed flashcard candidate generator."""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Protocol

from pydantic import BaseModel, ValidationError

from flashdeck.generation.generator_interface import CandidateGenerator
from flashdeck.generation.types import GeneratedCandidate, GenerationOutput
from flashdeck.llm.client import OpenRouterClient
from flashdeck.llm.types import ChatMessage, ChatRequest, ChatResult
from flashdeck.models.flashcard import BACK_MAX_LENGTH, FRONT_MAX_LENGTH

logger = logging.getLogger(__name__)

FLASHCARD_PROMPT_VERSION = "flashcards.v1"
_PROMPT_FILES: dict[str, Path] = {
    "flashcards.v1": Path(__file__).resolve().parent / "prompts" / "flashcards_v1.txt",
}
DEFAULT_CANDIDATE_PROMPT = "Flashcard generated from input text"
_RESPONSE_FORMAT: dict[str, Any] = {"type": "json_object"}
_CANDIDATE_ARRAY_KEYS = ("flashcards", "candidates")


class GenerationParseError(RuntimeError):
    """Raised when the model reply is not valid JSON or holds no usable candidate."""


class ChatClient(Protocol):
    """Protocol for chat clients used by the generator."""

    def chat(self, request: ChatRequest) -> ChatResult:
        """Run one chat completion."""


class _RawCandidate(BaseModel):
    front: str
    back: str
    prompt: Any = None


@lru_cache(maxsize=8)
def get_system_prompt(version: str = FLASHCARD_PROMPT_VERSION) -> str:
    prompt_file = _PROMPT_FILES.get(version)
    if prompt_file is None:
        raise GenerationParseError(f"Flashcard prompt version is not registered: {version}")
    try:
        prompt_text = prompt_file.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise GenerationParseError(f"Failed to load flashcard prompt file: {prompt_file}") from exc
    if not prompt_text:
        raise GenerationParseError(f"Flashcard prompt file is empty: {prompt_file}")
    return prompt_text


def build_generation_messages(input_text: str, custom_prompt: str | None = None) -> list[ChatMessage]:
    """Return the system instruction and the user message holding the source text."""

    user_prompt = f"Generate flashcards from this text:\n\n{input_text}"
    guidance = (custom_prompt or "").strip()
    if guidance:
        user_prompt = f"{user_prompt}\n\nAdditional guidance from the user:\n{guidance}"
    return OpenRouterClient.build_messages(get_system_prompt(), user_prompt)


def parse_candidates(content: str) -> tuple[list[GeneratedCandidate], int]:
    """Parse the model reply into candidates.

    Entries missing ``front``/``back`` or exceeding the card length limits are
    dropped. Returns the surviving candidates and the number dropped.

    Raises:
        GenerationParseError: the reply is not a JSON object with a candidate
            array, or no entry survives validation.
    """

    try:
        payload = json.loads(content)
    except (TypeError, json.JSONDecodeError) as exc:
        raise GenerationParseError(f"Model reply is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise GenerationParseError("Model reply must be a JSON object")

    entries = next(
        (payload[key] for key in _CANDIDATE_ARRAY_KEYS if isinstance(payload.get(key), list)),
        None,
    )
    if not entries:
        raise GenerationParseError("Model reply did not contain a flashcards array")

    candidates: list[GeneratedCandidate] = []
    dropped = 0
    for entry in entries:
        candidate = _normalize_entry(entry)
        if candidate is None:
            dropped += 1
            continue
        candidates.append(candidate)

    if not candidates:
        raise GenerationParseError(f"No valid flashcards in model reply ({dropped} entries dropped)")
    return candidates, dropped


def _normalize_entry(entry: Any) -> GeneratedCandidate | None:
    try:
        raw = _RawCandidate.model_validate(entry)
    except ValidationError:
        return None
    front = raw.front.strip()
    back = raw.back.strip()
    if not front or not back:
        return None
    if len(front) > FRONT_MAX_LENGTH or len(back) > BACK_MAX_LENGTH:
        return None
    prompt = raw.prompt.strip() if isinstance(raw.prompt, str) else ""
    return GeneratedCandidate(front=front, back=back, prompt=prompt or DEFAULT_CANDIDATE_PROMPT)


class FlashcardGenerator(CandidateGenerator):
    """Generator that asks a chat model for flashcards and normalizes the reply."""

    def __init__(self, client: ChatClient, *, temperature: float = 0.7, max_tokens: int = 2000) -> None:
        self._client = client
        self._temperature = temperature
        self._max_tokens = max_tokens

    @property
    def prompt_version(self) -> str:
        return FLASHCARD_PROMPT_VERSION

    def generate(self, input_text: str, model: str, custom_prompt: str | None = None) -> GenerationOutput:
        request = ChatRequest(
            model=model,
            messages=build_generation_messages(input_text, custom_prompt),
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            response_format=_RESPONSE_FORMAT,
            metadata={"service": "flashcard-generation", "input_length": len(input_text)},
        )
        result = self._client.chat(request)
        candidates, dropped = parse_candidates(result.content)
        if dropped:
            logger.warning("generation.candidates_dropped model=%s dropped=%d kept=%d", model, dropped, len(candidates))
        return GenerationOutput(
            model=result.model or model,
            candidates=candidates,
            dropped_count=dropped,
            usage=result.usage,
            prompt_version=self.prompt_version,
        )
