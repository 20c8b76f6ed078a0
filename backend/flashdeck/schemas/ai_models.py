"""Model allow-list and catalog schemas."""

from typing import Any

from pydantic import BaseModel


class AllowedModelsRead(BaseModel):
    default: str
    allowed: list[str]


class ModelCatalogEntry(BaseModel):
    """Provider catalog entry."""

    id: str
    name: str
    description: str | None = None
    context_length: int | None = None
    pricing: dict[str, Any] | None = None
