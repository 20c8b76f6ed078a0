"""Append-only event log writes."""

from typing import Literal

from sqlalchemy.orm import Session

from flashdeck.models.event_log import EventLog


def log_event(
    db: Session,
    owner_id: str,
    event_type: str,
    *,
    session_id: str | None = None,
    event_source: Literal["ai", "manual"] = "ai",
) -> EventLog:
    """Stage one event row in the caller's unit of work."""

    event = EventLog(
        owner_id=owner_id,
        session_id=session_id,
        event_type=event_type,
        event_source=event_source,
    )
    db.add(event)
    return event
