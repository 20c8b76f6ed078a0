"""Pending candidate queries across generation sessions."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from flashdeck.config import get_settings
from flashdeck.models.base import utcnow
from flashdeck.models.flashcard import Flashcard
from flashdeck.models.generation_session import GenerationSession
from flashdeck.services.event_log import log_event
from flashdeck.services.generation import get_generation_session

logger = logging.getLogger(__name__)


def _pending_query(owner_id: str):
    return (
        select(Flashcard)
        .where(
            Flashcard.owner_id == owner_id,
            Flashcard.session_id.is_not(None),
            Flashcard.deleted_at.is_(None),
        )
        .order_by(Flashcard.created_at.asc(), Flashcard.id.asc())
    )


def list_pending(db: Session, owner_id: str, session_id: str) -> list[Flashcard]:
    """Pending candidates of one session."""

    return list(db.scalars(_pending_query(owner_id).where(Flashcard.session_id == session_id)).all())


def list_session_candidates(db: Session, owner_id: str, session_id: str) -> list[Flashcard]:
    """Pending candidates of an owned session; raises ``NotFoundError`` for unknown sessions."""

    get_generation_session(db, owner_id, session_id)
    return list_pending(db, owner_id, session_id)


def list_all_pending(db: Session, owner_id: str) -> list[Flashcard]:
    return list(db.scalars(_pending_query(owner_id)).all())


def list_other_pending(db: Session, owner_id: str, exclude_session_id: str | None = None) -> list[Flashcard]:
    """Pending candidates from every session except ``exclude_session_id``."""

    stmt = _pending_query(owner_id)
    if exclude_session_id is not None:
        stmt = stmt.where(Flashcard.session_id != exclude_session_id)
    return list(db.scalars(stmt).all())


def orphan_cutoff(older_than: timedelta | None = None, *, now: datetime | None = None) -> datetime:
    if older_than is None:
        older_than = timedelta(days=get_settings().orphaned_candidate_max_age_days)
    return (now or utcnow()) - older_than


def list_orphaned(
    db: Session,
    owner_id: str,
    older_than: timedelta | None = None,
    *,
    now: datetime | None = None,
) -> list[Flashcard]:
    """Pending candidates whose session was created before the orphan cutoff."""

    cutoff = orphan_cutoff(older_than, now=now)
    stmt = (
        _pending_query(owner_id)
        .join(GenerationSession, GenerationSession.id == Flashcard.session_id)
        .where(GenerationSession.owner_id == owner_id, GenerationSession.created_at < cutoff)
    )
    return list(db.scalars(stmt).all())


def discard_orphaned(
    db: Session,
    owner_id: str,
    older_than: timedelta | None = None,
    *,
    now: datetime | None = None,
) -> int:
    """Soft-delete every orphaned candidate and return how many were discarded."""

    orphan_ids = [row.id for row in list_orphaned(db, owner_id, older_than, now=now)]
    if not orphan_ids:
        return 0

    try:
        result = db.execute(
            update(Flashcard)
            .where(
                Flashcard.id.in_(orphan_ids),
                Flashcard.owner_id == owner_id,
                Flashcard.session_id.is_not(None),
                Flashcard.deleted_at.is_(None),
            )
            .values(deleted_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        deleted = int(result.rowcount or 0)
        if deleted:
            log_event(db, owner_id, f"orphaned_candidates_discarded:{deleted}")
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("candidates.orphan_discard_failed owner_id=%s", owner_id)
        raise

    logger.info("candidates.orphans_discarded owner_id=%s deleted=%d", owner_id, deleted)
    return deleted
