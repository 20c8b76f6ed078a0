"""Generation orchestration and persistence services."""

from __future__ import annotations

import hashlib
import logging
from functools import lru_cache
from time import perf_counter

from sqlalchemy import select
from sqlalchemy.orm import Session

from flashdeck.config import get_settings
from flashdeck.generation.catalog import ALLOWED_MODELS, resolve_model
from flashdeck.generation.flashcard_generator import FlashcardGenerator, GenerationParseError
from flashdeck.generation.generator_interface import CandidateGenerator
from flashdeck.llm.client import OpenRouterClient
from flashdeck.llm.errors import GatewayError
from flashdeck.models.flashcard import Flashcard
from flashdeck.models.generation_session import GenerationSession
from flashdeck.schemas.generation import (
    CUSTOM_PROMPT_MAX_LENGTH,
    INPUT_TEXT_MAX_LENGTH,
    INPUT_TEXT_MIN_LENGTH,
    CandidateProposal,
    GenerationSessionCreated,
)
from flashdeck.services.errors import FieldIssue, NotFoundError, ServiceValidationError
from flashdeck.services.event_log import log_event

logger = logging.getLogger(__name__)


@lru_cache
def get_gateway_client() -> OpenRouterClient:
    """Return the process-wide gateway client so its model cache is shared."""

    return OpenRouterClient.from_settings(get_settings())


def get_default_generator() -> CandidateGenerator:
    """Return the LLM-backed generator."""

    settings = get_settings()
    return FlashcardGenerator(
        get_gateway_client(),
        temperature=settings.generation_temperature,
        max_tokens=settings.generation_max_tokens,
    )


def hash_input_text(text: str) -> str:
    """SHA-256 hex digest of the stripped source text."""

    return hashlib.sha256(text.strip().encode("utf-8")).hexdigest()


def create_generation_session(
    db: Session,
    owner_id: str,
    input_text: str,
    model: str | None = None,
    custom_prompt: str | None = None,
    *,
    generator: CandidateGenerator | None = None,
) -> GenerationSessionCreated:
    """Generate candidates for ``input_text`` and persist the session with its candidates.

    Input is validated before the generator is built or called. A session is
    stored only when generation succeeds; failures are recorded in the event
    log and re-raised.
    """

    model_id = _validate_generation_input(input_text, model, custom_prompt)
    clean_prompt = custom_prompt.strip() if custom_prompt and custom_prompt.strip() else None
    active_generator = generator or get_default_generator()

    total_started = perf_counter()
    started = perf_counter()
    try:
        output = active_generator.generate(input_text, model_id, clean_prompt)
    except (GatewayError, GenerationParseError) as exc:
        logger.exception(
            "generation.failed owner_id=%s model=%s error=%s elapsed_ms=%.2f",
            owner_id,
            model_id,
            exc.__class__.__name__,
            (perf_counter() - started) * 1000.0,
        )
        log_event(db, owner_id, "generation_session_failed")
        db.commit()
        raise
    llm_ms = (perf_counter() - started) * 1000.0

    input_text_hash = hash_input_text(input_text)
    session = GenerationSession(
        owner_id=owner_id,
        input_text=input_text,
        input_text_hash=input_text_hash,
        model_id=model_id,
        custom_prompt=clean_prompt,
        generation_duration_ms=int(round(llm_ms)),
        accepted_unedited_count=0,
        accepted_edited_count=0,
    )
    db.add(session)
    db.flush()

    rows = [
        Flashcard(
            owner_id=owner_id,
            session_id=session.id,
            front=candidate.front,
            back=candidate.back,
            prompt=candidate.prompt,
            source="ai",
            model=model_id,
        )
        for candidate in output.candidates
    ]
    db.add_all(rows)
    log_event(db, owner_id, "generation_session_created", session_id=session.id)
    db.flush()

    result = GenerationSessionCreated(
        id=session.id,
        candidates=[
            CandidateProposal(id=row.id, front=row.front, back=row.back, prompt=row.prompt) for row in rows
        ],
        input_text_hash=input_text_hash,
    )
    db.commit()

    logger.info(
        (
            "generation.completed owner_id=%s session_id=%s model=%s prompt_version=%s candidates=%d dropped=%d "
            "prompt_tokens=%d completion_tokens=%d llm_ms=%.2f total_ms=%.2f"
        ),
        owner_id,
        result.id,
        model_id,
        output.prompt_version or "-",
        len(rows),
        output.dropped_count,
        output.usage.prompt_tokens,
        output.usage.completion_tokens,
        llm_ms,
        (perf_counter() - total_started) * 1000.0,
    )
    return result


def get_generation_session(db: Session, owner_id: str, session_id: str) -> GenerationSession:
    """Return one owned session or raise ``NotFoundError``."""

    session = db.scalar(
        select(GenerationSession).where(
            GenerationSession.id == session_id,
            GenerationSession.owner_id == owner_id,
        )
    )
    if session is None:
        raise NotFoundError("Session")
    return session


def _validate_generation_input(input_text: str, model: str | None, custom_prompt: str | None) -> str:
    issues: list[FieldIssue] = []
    text_length = len(input_text or "")
    if text_length < INPUT_TEXT_MIN_LENGTH:
        issues.append(FieldIssue(("input_text",), f"input_text must be at least {INPUT_TEXT_MIN_LENGTH} characters"))
    elif text_length > INPUT_TEXT_MAX_LENGTH:
        issues.append(FieldIssue(("input_text",), f"input_text must be at most {INPUT_TEXT_MAX_LENGTH} characters"))
    elif not input_text.strip():
        issues.append(FieldIssue(("input_text",), "input_text cannot be empty or whitespace only"))

    model_id = resolve_model(model)
    if model_id is None:
        issues.append(FieldIssue(("model",), f"Invalid model. Allowed models: {', '.join(ALLOWED_MODELS)}"))

    if custom_prompt is not None and len(custom_prompt) > CUSTOM_PROMPT_MAX_LENGTH:
        issues.append(
            FieldIssue(("custom_prompt",), f"custom_prompt must be at most {CUSTOM_PROMPT_MAX_LENGTH} characters")
        )

    if issues or model_id is None:
        raise ServiceValidationError("Validation failed", issues)
    return model_id
