"""Generation session ORM model."""

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from flashdeck.models.base import Base, CreatedAtMixin, IdMixin


class GenerationSession(Base, IdMixin, CreatedAtMixin):
    """One LLM generation request and its acceptance counters."""

    __tablename__ = "generation_sessions"

    owner_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    input_text: Mapped[str] = mapped_column(Text, nullable=False)
    input_text_hash: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    model_id: Mapped[str] = mapped_column(String(128), nullable=False)
    custom_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
    generation_duration_ms: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    accepted_unedited_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    accepted_edited_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
