"""SQLAlchemy metadata registry import for Alembic."""

from flashdeck.models import EventLog, Flashcard, GenerationSession
from flashdeck.models.base import Base

__all__ = ["Base", "EventLog", "Flashcard", "GenerationSession"]
