"""Sprint routes."""

from typing import Any

from fastapi import APIRouter, Depends

from tracker.api.dependencies.actor import get_actor_id
from tracker.api.dependencies.services import TrackerServices, get_services
from tracker.api.models.responses import SprintDeletionResponse
from tracker.api.models.sprints import CreateSprintRequest, UpdateSprintRequest

router = APIRouter(prefix="/v1", tags=["sprints"])


@router.post("/projects/{project_id}/sprints", status_code=201)
async def create_sprint(
    project_id: str,
    request_data: CreateSprintRequest,
    actor_id: str | None = Depends(get_actor_id),
    services: TrackerServices = Depends(get_services),
) -> dict[str, Any]:
    return await services.sprints.create_sprint(actor_id, project_id, request_data.supplied())


@router.patch("/sprints/{sprint_id}")
async def update_sprint(
    sprint_id: str,
    request_data: UpdateSprintRequest,
    actor_id: str | None = Depends(get_actor_id),
    services: TrackerServices = Depends(get_services),
) -> dict[str, Any]:
    return await services.sprints.update_sprint(actor_id, sprint_id, request_data.supplied())


@router.post("/sprints/{sprint_id}/start")
async def start_sprint(
    sprint_id: str,
    actor_id: str | None = Depends(get_actor_id),
    services: TrackerServices = Depends(get_services),
) -> dict[str, Any]:
    """Start a sprint; 409 if another sprint is already active."""
    return await services.sprints.start(actor_id, sprint_id)


@router.post("/sprints/{sprint_id}/complete")
async def complete_sprint(
    sprint_id: str,
    actor_id: str | None = Depends(get_actor_id),
    services: TrackerServices = Depends(get_services),
) -> dict[str, Any]:
    return await services.sprints.complete(actor_id, sprint_id)


@router.delete("/sprints/{sprint_id}", response_model=SprintDeletionResponse)
async def delete_sprint(
    sprint_id: str,
    actor_id: str | None = Depends(get_actor_id),
    services: TrackerServices = Depends(get_services),
) -> SprintDeletionResponse:
    """Delete a sprint; its tickets are kept with the sprint reference cleared."""
    orphaned = await services.sprints.delete(actor_id, sprint_id)
    return SprintDeletionResponse(tickets_orphaned=orphaned)
