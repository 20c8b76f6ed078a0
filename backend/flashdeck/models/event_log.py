"""Append-only event log model."""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from flashdeck.models.base import Base, CreatedAtMixin, IdMixin


class EventLog(Base, IdMixin, CreatedAtMixin):
    """Event emitted by generation and candidate review flows."""

    __tablename__ = "event_logs"

    owner_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    session_id: Mapped[str | None] = mapped_column(
        ForeignKey("generation_sessions.id", ondelete="SET NULL"),
        index=True,
        nullable=True,
    )
    event_type: Mapped[str] = mapped_column(String(128), nullable=False)
    event_source: Mapped[str] = mapped_column(String(16), default="ai", nullable=False)
