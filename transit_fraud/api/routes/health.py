"""Health check routes."""

from fastapi import APIRouter
from pydantic import BaseModel

from transit_fraud import __version__
from transit_fraud.core.dependencies import AppSettings, Store

router = APIRouter(prefix="/health", tags=["Health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str


class ReadyResponse(BaseModel):
    """Readiness of the transaction store."""

    status: str
    store: str
    backend: str


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the service is running.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="healthy", version=__version__)


@router.get(
    "/ready",
    response_model=ReadyResponse,
    summary="Readiness check",
    description="Check that the configured transaction store answers a ping.",
)
async def readiness_check(store: Store, settings: AppSettings) -> ReadyResponse:
    backend = settings.store.backend.value
    if await store.ping():
        return ReadyResponse(status="ready", store="connected", backend=backend)
    return ReadyResponse(status="degraded", store="disconnected", backend=backend)


@router.get(
    "/live",
    summary="Liveness check",
    description="Kubernetes liveness probe endpoint.",
)
async def liveness_check() -> dict:
    return {"status": "alive"}
