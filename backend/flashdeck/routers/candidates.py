"""Cross-session pending candidate routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from flashdeck.auth import get_current_owner_id
from flashdeck.db.dependencies import get_db
from flashdeck.schemas.candidate import CandidateRead, OrphanedCandidates, OrphanedDiscardResult
from flashdeck.services.candidates import discard_orphaned, list_all_pending, list_orphaned, list_other_pending

router = APIRouter(prefix="/candidates")


@router.get("/pending", response_model=list[CandidateRead])
def read_pending_candidates(
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
) -> list[CandidateRead]:
    return [CandidateRead.model_validate(row) for row in list_all_pending(db, owner_id)]


@router.get("/other-pending", response_model=list[CandidateRead])
def read_other_pending_candidates(
    exclude_session_id: UUID | None = Query(default=None, alias="excludeSessionId"),
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
) -> list[CandidateRead]:
    """Pending candidates from every session except the one being reviewed."""

    excluded = str(exclude_session_id) if exclude_session_id is not None else None
    return [CandidateRead.model_validate(row) for row in list_other_pending(db, owner_id, excluded)]


@router.get("/orphaned", response_model=OrphanedCandidates)
def read_orphaned_candidates(
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
) -> OrphanedCandidates:
    rows = list_orphaned(db, owner_id)
    return OrphanedCandidates(count=len(rows), candidates=[CandidateRead.model_validate(row) for row in rows])


@router.delete("/orphaned", response_model=OrphanedDiscardResult)
def delete_orphaned_candidates(
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
) -> OrphanedDiscardResult:
    """Soft-delete candidates left pending in stale sessions."""

    deleted = discard_orphaned(db, owner_id)
    suffix = "" if deleted == 1 else "s"
    return OrphanedDiscardResult(deleted=deleted, message=f"Deleted {deleted} orphaned candidate{suffix}")
