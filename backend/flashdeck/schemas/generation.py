"""Generation session request/response schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from flashdeck.generation.catalog import ALLOWED_MODELS, resolve_model

INPUT_TEXT_MIN_LENGTH = 1000
INPUT_TEXT_MAX_LENGTH = 10000
CUSTOM_PROMPT_MAX_LENGTH = 1000


class GenerationSessionCreate(BaseModel):
    """Payload for starting a generation session."""

    input_text: str = Field(min_length=INPUT_TEXT_MIN_LENGTH, max_length=INPUT_TEXT_MAX_LENGTH)
    model: str | None = None
    custom_prompt: str | None = Field(default=None, max_length=CUSTOM_PROMPT_MAX_LENGTH)

    @field_validator("input_text")
    @classmethod
    def validate_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("input_text cannot be empty or whitespace only")
        return value

    @field_validator("model")
    @classmethod
    def validate_model(cls, value: str | None) -> str | None:
        if value is not None and resolve_model(value) is None:
            raise ValueError(f"Invalid model. Allowed models: {', '.join(ALLOWED_MODELS)}")
        return value


class CandidateProposal(BaseModel):
    """Candidate as returned right after generation."""

    id: str
    front: str
    back: str
    prompt: str | None = None


class GenerationSessionCreated(BaseModel):
    """Response for a successful generation."""

    id: str
    candidates: list[CandidateProposal]
    input_text_hash: str


class GenerationSessionRead(BaseModel):
    """Serialized generation session with acceptance counters."""

    model_config = ConfigDict(from_attributes=True, protected_namespaces=())

    id: str
    model_id: str
    custom_prompt: str | None
    input_text_hash: str
    generation_duration_ms: int
    accepted_unedited_count: int
    accepted_edited_count: int
    created_at: datetime
