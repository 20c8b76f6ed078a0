"""Bulk accept/edit/reject processing for generation candidates."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from time import perf_counter
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from flashdeck.models.base import utcnow
from flashdeck.models.flashcard import BACK_MAX_LENGTH, FRONT_MAX_LENGTH, Flashcard
from flashdeck.models.generation_session import GenerationSession
from flashdeck.schemas.candidate import CandidateAction, CandidateActionsResult
from flashdeck.services.errors import FieldIssue, NotFoundError, ServiceValidationError
from flashdeck.services.event_log import log_event

logger = logging.getLogger(__name__)


class _StaleCandidatesError(Exception):
    def __init__(self, candidate_ids: list[str]) -> None:
        super().__init__(", ".join(candidate_ids))
        self.candidate_ids = candidate_ids


def apply_candidate_actions(
    db: Session,
    owner_id: str,
    session_id: str,
    actions: Sequence[CandidateAction],
) -> CandidateActionsResult:
    """Apply one batch of review actions to pending candidates of a session.

    Validation is all-or-nothing: an unknown session, an empty batch, an
    incomplete edit, or any candidate that is not a pending, owned member of
    the session rejects the whole batch before a row changes. Candidate
    updates are conditional on the row still being pending, so a concurrent
    batch that resolved the same candidate first makes this one fail with
    ``NotFoundError`` instead of counting it twice.
    """

    started = perf_counter()
    session_exists = db.scalar(
        select(GenerationSession.id).where(
            GenerationSession.id == session_id,
            GenerationSession.owner_id == owner_id,
        )
    )
    if session_exists is None:
        raise NotFoundError("Session")

    _validate_actions(actions)

    candidate_ids = [str(item.candidate_id) for item in actions]
    found_ids = set(
        db.scalars(
            select(Flashcard.id).where(
                Flashcard.id.in_(candidate_ids),
                *_pending_filter(owner_id, session_id),
            )
        ).all()
    )
    missing = [candidate_id for candidate_id in candidate_ids if candidate_id not in found_ids]
    if missing:
        raise NotFoundError("Candidates", missing)

    accept_ids: list[str] = []
    edits: list[tuple[str, str, str]] = []
    reject_ids: list[str] = []
    for item in actions:
        candidate_id = str(item.candidate_id)
        if item.action == "accept":
            accept_ids.append(candidate_id)
        elif item.action == "edit":
            edits.append((candidate_id, (item.edited_front or "").strip(), (item.edited_back or "").strip()))
        else:
            reject_ids.append(candidate_id)

    now = utcnow()
    try:
        if accept_ids:
            _resolve_pending(db, owner_id, session_id, accept_ids, {"session_id": None, "updated_at": now})
        for candidate_id, front, back in edits:
            _resolve_pending(
                db,
                owner_id,
                session_id,
                [candidate_id],
                {"front": front, "back": back, "session_id": None, "updated_at": now},
            )
        if reject_ids:
            _resolve_pending(db, owner_id, session_id, reject_ids, {"deleted_at": now})

        if accept_ids or edits:
            db.execute(
                update(GenerationSession)
                .where(GenerationSession.id == session_id, GenerationSession.owner_id == owner_id)
                .values(
                    accepted_unedited_count=GenerationSession.accepted_unedited_count + len(accept_ids),
                    accepted_edited_count=GenerationSession.accepted_edited_count + len(edits),
                )
                .execution_options(synchronize_session=False)
            )

        for event_type, count in (
            ("candidates_accepted_unedited", len(accept_ids)),
            ("candidates_accepted_edited", len(edits)),
            ("candidates_rejected", len(reject_ids)),
        ):
            if count:
                log_event(db, owner_id, f"{event_type}:{count}", session_id=session_id)
        log_event(db, owner_id, f"candidate_actions_processed:total={len(actions)}", session_id=session_id)
        db.commit()
    except _StaleCandidatesError as exc:
        db.rollback()
        logger.warning(
            "candidates.actions_conflict owner_id=%s session_id=%s candidate_ids=%s",
            owner_id,
            session_id,
            ",".join(exc.candidate_ids),
        )
        raise NotFoundError("Candidates", exc.candidate_ids) from exc
    except Exception:
        db.rollback()
        logger.exception("candidates.actions_failed owner_id=%s session_id=%s", owner_id, session_id)
        raise

    result = CandidateActionsResult(
        accepted=accept_ids,
        edited=[candidate_id for candidate_id, _, _ in edits],
        rejected=reject_ids,
    )
    logger.info(
        "candidates.actions_applied owner_id=%s session_id=%s accepted=%d edited=%d rejected=%d elapsed_ms=%.2f",
        owner_id,
        session_id,
        len(result.accepted),
        len(result.edited),
        len(result.rejected),
        (perf_counter() - started) * 1000.0,
    )
    return result


def _pending_filter(owner_id: str, session_id: str) -> tuple[Any, ...]:
    return (
        Flashcard.owner_id == owner_id,
        Flashcard.session_id == session_id,
        Flashcard.deleted_at.is_(None),
    )


def _resolve_pending(
    db: Session,
    owner_id: str,
    pending_session_id: str,
    candidate_ids: list[str],
    values: dict[str, Any],
) -> None:
    result = db.execute(
        update(Flashcard)
        .where(Flashcard.id.in_(candidate_ids), *_pending_filter(owner_id, pending_session_id))
        .values(values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != len(candidate_ids):
        raise _StaleCandidatesError(candidate_ids)


def _validate_actions(actions: Sequence[CandidateAction]) -> None:
    if not actions:
        raise ServiceValidationError(
            "At least one action is required",
            [FieldIssue(("actions",), "At least one action is required")],
        )

    issues: list[FieldIssue] = []
    seen: set[str] = set()
    for index, item in enumerate(actions):
        candidate_id = str(item.candidate_id)
        if candidate_id in seen:
            issues.append(FieldIssue(("actions", index, "candidate_id"), f"Duplicate candidate_id {candidate_id}"))
        seen.add(candidate_id)
        if item.action != "edit":
            continue
        for field_name, value, limit in (
            ("edited_front", item.edited_front, FRONT_MAX_LENGTH),
            ("edited_back", item.edited_back, BACK_MAX_LENGTH),
        ):
            if not (value and value.strip()):
                issues.append(FieldIssue(("actions", index, field_name), f"{field_name} is required when action is edit"))
            elif len(value) > limit:
                issues.append(
                    FieldIssue(("actions", index, field_name), f"{field_name} must be at most {limit} characters")
                )
    if issues:
        raise ServiceValidationError("Validation failed", issues)
