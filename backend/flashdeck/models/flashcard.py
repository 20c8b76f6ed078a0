"""Flashcard ORM model.

A row linked to a generation session (``session_id`` set, ``deleted_at`` null)
is a pending candidate. Accepting it clears the link; rejecting it sets
``deleted_at``.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from flashdeck.models.base import Base, CreatedAtMixin, IdMixin, UpdatedAtMixin

FRONT_MAX_LENGTH = 200
BACK_MAX_LENGTH = 500


class Flashcard(Base, IdMixin, CreatedAtMixin, UpdatedAtMixin):
    """Flashcard or pending flashcard candidate."""

    __tablename__ = "flashcards"

    owner_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    session_id: Mapped[str | None] = mapped_column(
        ForeignKey("generation_sessions.id", ondelete="SET NULL"),
        index=True,
        nullable=True,
    )
    front: Mapped[str] = mapped_column(String(FRONT_MAX_LENGTH), nullable=False)
    back: Mapped[str] = mapped_column(String(BACK_MAX_LENGTH), nullable=False)
    prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
    source: Mapped[str] = mapped_column(String(16), default="manual", nullable=False)
    model: Mapped[str | None] = mapped_column(String(128), nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, index=True)
