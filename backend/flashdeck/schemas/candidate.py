"""Candidate listing and review action schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from flashdeck.models.flashcard import BACK_MAX_LENGTH, FRONT_MAX_LENGTH

MAX_ACTIONS_PER_BATCH = 100

CandidateActionType = Literal["accept", "edit", "reject"]


class CandidateRead(BaseModel):
    """Serialized pending candidate."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    session_id: str | None
    front: str
    back: str
    prompt: str | None
    source: str
    created_at: datetime
    updated_at: datetime


class CandidateAction(BaseModel):
    """One review decision for a candidate."""

    candidate_id: UUID
    action: CandidateActionType
    edited_front: str | None = Field(default=None, max_length=FRONT_MAX_LENGTH)
    edited_back: str | None = Field(default=None, max_length=BACK_MAX_LENGTH)

    @model_validator(mode="after")
    def validate_edit_fields(self) -> "CandidateAction":
        if self.action == "edit":
            missing = [
                name
                for name, value in (("edited_front", self.edited_front), ("edited_back", self.edited_back))
                if not (value and value.strip())
            ]
            if missing:
                raise ValueError(f"{' and '.join(missing)} required when action is edit")
        return self


class CandidateActionsRequest(BaseModel):
    """Bulk review actions for one generation session."""

    actions: list[CandidateAction] = Field(max_length=MAX_ACTIONS_PER_BATCH)

    @model_validator(mode="after")
    def validate_actions(self) -> "CandidateActionsRequest":
        if not self.actions:
            raise ValueError("At least one action is required")
        seen: set[UUID] = set()
        duplicates: list[str] = []
        for item in self.actions:
            if item.candidate_id in seen:
                duplicates.append(str(item.candidate_id))
            seen.add(item.candidate_id)
        if duplicates:
            raise ValueError(f"Duplicate candidate_id in actions: {', '.join(duplicates)}")
        return self


class CandidateActionsResult(BaseModel):
    """Ids grouped by the action applied to them."""

    accepted: list[str] = Field(default_factory=list)
    edited: list[str] = Field(default_factory=list)
    rejected: list[str] = Field(default_factory=list)


class OrphanedCandidates(BaseModel):
    count: int
    candidates: list[CandidateRead]


class OrphanedDiscardResult(BaseModel):
    deleted: int
    message: str
