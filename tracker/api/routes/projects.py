"""Project and membership routes."""

from typing import Any

from fastapi import APIRouter, Depends, Response

from tracker.api.dependencies.actor import get_actor_id
from tracker.api.dependencies.services import TrackerServices, get_services
from tracker.api.models.projects import (
    ChangeRoleRequest,
    CreateProjectRequest,
    InviteMemberRequest,
    UpdateProjectRequest,
)

router = APIRouter(prefix="/v1/projects", tags=["projects"])


@router.post("", status_code=201)
async def create_project(
    request_data: CreateProjectRequest,
    actor_id: str | None = Depends(get_actor_id),
    services: TrackerServices = Depends(get_services),
) -> dict[str, Any]:
    """Create a project owned by the caller."""
    return await services.projects.create_project(
        actor_id, request_data.name, request_data.key, request_data.description
    )


@router.patch("/{project_id}")
async def update_project(
    project_id: str,
    request_data: UpdateProjectRequest,
    actor_id: str | None = Depends(get_actor_id),
    services: TrackerServices = Depends(get_services),
) -> dict[str, Any]:
    return await services.projects.update_project(actor_id, project_id, request_data.supplied())


@router.post("/{project_id}/archive")
async def archive_project(
    project_id: str,
    actor_id: str | None = Depends(get_actor_id),
    services: TrackerServices = Depends(get_services),
) -> dict[str, Any]:
    return await services.projects.archive_project(actor_id, project_id)


@router.post("/{project_id}/restore")
async def restore_project(
    project_id: str,
    actor_id: str | None = Depends(get_actor_id),
    services: TrackerServices = Depends(get_services),
) -> dict[str, Any]:
    return await services.projects.restore_project(actor_id, project_id)


@router.delete("/{project_id}", status_code=204)
async def delete_project(
    project_id: str,
    actor_id: str | None = Depends(get_actor_id),
    services: TrackerServices = Depends(get_services),
) -> Response:
    """Delete a project and everything it owns. Safe to retry."""
    await services.projects.delete_project(actor_id, project_id)
    return Response(status_code=204)


@router.post("/{project_id}/members", status_code=201)
async def invite_member(
    project_id: str,
    request_data: InviteMemberRequest,
    actor_id: str | None = Depends(get_actor_id),
    services: TrackerServices = Depends(get_services),
) -> dict[str, Any]:
    return await services.members.invite_member(
        actor_id, project_id, request_data.user_id, request_data.role
    )


@router.patch("/{project_id}/members/{member_id}")
async def change_member_role(
    project_id: str,
    member_id: str,
    request_data: ChangeRoleRequest,
    actor_id: str | None = Depends(get_actor_id),
    services: TrackerServices = Depends(get_services),
) -> dict[str, Any]:
    return await services.members.change_member_role(
        actor_id, project_id, member_id, request_data.role
    )


@router.delete("/{project_id}/members/{member_id}", status_code=204)
async def remove_member(
    project_id: str,
    member_id: str,
    actor_id: str | None = Depends(get_actor_id),
    services: TrackerServices = Depends(get_services),
) -> Response:
    await services.members.remove_member(actor_id, project_id, member_id)
    return Response(status_code=204)


@router.post("/{project_id}/leave", status_code=204)
async def leave_project(
    project_id: str,
    actor_id: str | None = Depends(get_actor_id),
    services: TrackerServices = Depends(get_services),
) -> Response:
    """Leave a project (any member except the owner)."""
    await services.members.leave_project(actor_id, project_id)
    return Response(status_code=204)
