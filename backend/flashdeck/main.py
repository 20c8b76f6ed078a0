"""FastAPI application entrypoint."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from flashdeck.config import get_settings
from flashdeck.routers import ai_models, ai_sessions, candidates
from flashdeck.services.errors import ServiceValidationError

settings = get_settings()
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]
    logger.info("http.validation_failed path=%s errors=%d", request.url.path, len(details))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({"error": "Validation failed", "details": details}),
    )


async def _service_validation_handler(request: Request, exc: ServiceValidationError) -> JSONResponse:
    logger.info("http.service_validation_failed path=%s error=%s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": str(exc), "details": exc.details()},
    )


app = FastAPI(title=settings.app_name, version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_exception_handler(RequestValidationError, _request_validation_handler)
app.add_exception_handler(ServiceValidationError, _service_validation_handler)

app.include_router(ai_sessions.router, tags=["ai-sessions"])
app.include_router(candidates.router, tags=["candidates"])
app.include_router(ai_models.router, tags=["ai-models"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
