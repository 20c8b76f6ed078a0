"""ORM models package exports."""

from flashdeck.models.event_log import EventLog
from flashdeck.models.flashcard import Flashcard
from flashdeck.models.generation_session import GenerationSession

__all__ = [
    "EventLog",
    "Flashcard",
    "GenerationSession",
]
