"""Generation session and candidate review routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.orm import Session

from flashdeck.auth import get_current_owner_id
from flashdeck.db.dependencies import get_db
from flashdeck.generation.flashcard_generator import GenerationParseError
from flashdeck.generation.generator_interface import CandidateGenerator
from flashdeck.llm.errors import GatewayError
from flashdeck.routers.errors import to_http_exception
from flashdeck.schemas.candidate import CandidateActionsRequest, CandidateActionsResult, CandidateRead
from flashdeck.schemas.generation import GenerationSessionCreate, GenerationSessionCreated, GenerationSessionRead
from flashdeck.services.candidate_actions import apply_candidate_actions
from flashdeck.services.candidates import list_session_candidates
from flashdeck.services.errors import NotFoundError
from flashdeck.services.generation import create_generation_session, get_generation_session

router = APIRouter(prefix="/ai-sessions")


def get_candidate_generator() -> CandidateGenerator | None:
    """Generator used by ``POST /ai-sessions``; None selects the configured LLM generator."""

    return None


@router.post("", response_model=GenerationSessionCreated, status_code=status.HTTP_201_CREATED)
def create_session(
    payload: GenerationSessionCreate,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
    generator: CandidateGenerator | None = Depends(get_candidate_generator),
) -> GenerationSessionCreated:
    """Generate flashcard candidates from the submitted text."""

    try:
        return create_generation_session(
            db,
            owner_id,
            payload.input_text,
            payload.model,
            payload.custom_prompt,
            generator=generator,
        )
    except (GatewayError, GenerationParseError) as exc:
        raise to_http_exception(exc) from exc


@router.get("/{session_id}", response_model=GenerationSessionRead)
def read_session(
    session_id: UUID = Path(...),
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
) -> GenerationSessionRead:
    try:
        session = get_generation_session(db, owner_id, str(session_id))
    except NotFoundError as exc:
        raise to_http_exception(exc) from exc
    return GenerationSessionRead.model_validate(session)


@router.get("/{session_id}/candidates", response_model=list[CandidateRead])
def read_session_candidates(
    session_id: UUID = Path(...),
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
) -> list[CandidateRead]:
    """List the still-pending candidates of one session."""

    try:
        rows = list_session_candidates(db, owner_id, str(session_id))
    except NotFoundError as exc:
        raise to_http_exception(exc) from exc
    return [CandidateRead.model_validate(row) for row in rows]


@router.post("/{session_id}/candidates/actions", response_model=CandidateActionsResult)
def submit_candidate_actions(
    payload: CandidateActionsRequest,
    session_id: UUID = Path(...),
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
) -> CandidateActionsResult:
    """Accept, edit, or reject candidates of one session in a single batch."""

    try:
        return apply_candidate_actions(db, owner_id, str(session_id), payload.actions)
    except NotFoundError as exc:
        raise to_http_exception(exc) from exc
