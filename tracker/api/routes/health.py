"""Liveness and readiness endpoints."""

from fastapi import APIRouter, Depends

from tracker import __version__
from tracker.api.dependencies.services import TrackerServices, get_services
from tracker.api.models.responses import HealthResponse, ReadinessResponse
from tracker.application.ports.store import PROJECTS

router = APIRouter(prefix="/v1", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(status="healthy", version=__version__)


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(
    services: TrackerServices = Depends(get_services),
) -> ReadinessResponse:
    """Probe the document store with a one-item listing.

    A store that times out or refuses the connection surfaces as 503 with
    Retry-After through the UnavailableError mapping.
    """
    await services.store.list(PROJECTS, limit=1)
    return ReadinessResponse(status="ready", version=__version__)
