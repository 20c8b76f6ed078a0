"""Completion model allow-list and catalog routes."""

from fastapi import APIRouter, Depends

from flashdeck.generation.catalog import ALLOWED_MODELS, DEFAULT_MODEL
from flashdeck.llm.client import OpenRouterClient
from flashdeck.llm.errors import GatewayError
from flashdeck.routers.errors import to_http_exception
from flashdeck.schemas.ai_models import AllowedModelsRead, ModelCatalogEntry
from flashdeck.services.generation import get_gateway_client

router = APIRouter(prefix="/ai-models")


def get_catalog_client() -> OpenRouterClient | None:
    """Client used for the catalog; None selects the configured gateway client."""

    return None


@router.get("", response_model=AllowedModelsRead)
def read_allowed_models() -> AllowedModelsRead:
    return AllowedModelsRead(default=DEFAULT_MODEL, allowed=list(ALLOWED_MODELS))


@router.get("/catalog", response_model=list[ModelCatalogEntry])
def read_model_catalog(client: OpenRouterClient | None = Depends(get_catalog_client)) -> list[ModelCatalogEntry]:
    """Provider model catalog, served from the gateway's short-lived cache."""

    try:
        models = (client or get_gateway_client()).list_models()
    except GatewayError as exc:
        raise to_http_exception(exc) from exc
    return [
        ModelCatalogEntry(
            id=model.id,
            name=model.name,
            description=model.description,
            context_length=model.context_length,
            pricing=model.pricing,
        )
        for model in models
    ]
