"""Ticket, board and comment routes."""

from typing import Any

from fastapi import APIRouter, Depends, Response

from tracker.api.dependencies.actor import get_actor_id
from tracker.api.dependencies.services import TrackerServices, get_services
from tracker.api.models.responses import CommentDeletionResponse, RenormalizationResponse
from tracker.api.models.tickets import (
    AddCommentRequest,
    AssignTicketRequest,
    CreateTicketRequest,
    EditCommentRequest,
    MoveTicketRequest,
    UpdateTicketRequest,
)
from tracker.domain.errors.validation import ValidationFailedError
from tracker.domain.services.ordering import Placement, PlacementKind

router = APIRouter(prefix="/v1", tags=["tickets"])


@router.post("/projects/{project_id}/tickets", status_code=201)
async def create_ticket(
    project_id: str,
    request_data: CreateTicketRequest,
    actor_id: str | None = Depends(get_actor_id),
    services: TrackerServices = Depends(get_services),
) -> dict[str, Any]:
    return await services.tickets.create_ticket(actor_id, project_id, request_data.supplied())


@router.patch("/tickets/{ticket_id}")
async def update_ticket(
    ticket_id: str,
    request_data: UpdateTicketRequest,
    actor_id: str | None = Depends(get_actor_id),
    services: TrackerServices = Depends(get_services),
) -> dict[str, Any]:
    """Update ticket fields; send expected_version to detect concurrent edits."""
    fields = request_data.supplied()
    expected_version = fields.pop("expected_version", None)
    return await services.tickets.update_fields(actor_id, ticket_id, fields, expected_version)


@router.post("/tickets/{ticket_id}/move")
async def move_ticket(
    ticket_id: str,
    request_data: MoveTicketRequest,
    actor_id: str | None = Depends(get_actor_id),
    services: TrackerServices = Depends(get_services),
) -> dict[str, Any]:
    try:
        placement = Placement(PlacementKind(request_data.placement), request_data.after_id)
    except ValueError as exc:
        raise ValidationFailedError([str(exc)]) from None
    return await services.tickets.move(actor_id, ticket_id, request_data.status, placement)


@router.post("/tickets/{ticket_id}/assign")
async def assign_ticket(
    ticket_id: str,
    request_data: AssignTicketRequest,
    actor_id: str | None = Depends(get_actor_id),
    services: TrackerServices = Depends(get_services),
) -> dict[str, Any]:
    return await services.tickets.assign(actor_id, ticket_id, request_data.assignee_id)


@router.delete("/tickets/{ticket_id}", status_code=204)
async def delete_ticket(
    ticket_id: str,
    actor_id: str | None = Depends(get_actor_id),
    services: TrackerServices = Depends(get_services),
) -> Response:
    await services.tickets.delete(actor_id, ticket_id)
    return Response(status_code=204)


@router.post(
    "/projects/{project_id}/board/renormalize",
    response_model=RenormalizationResponse,
)
async def renormalize_board(
    project_id: str,
    force: bool = False,
    actor_id: str | None = Depends(get_actor_id),
    services: TrackerServices = Depends(get_services),
) -> RenormalizationResponse:
    """Rewrite board order keys to integers when precision is exhausted."""
    result = await services.board.renormalize_board(actor_id, project_id, force=force)
    return RenormalizationResponse(
        renormalized=result.renormalized, tickets_rewritten=result.tickets_rewritten
    )


@router.post("/tickets/{ticket_id}/comments", status_code=201)
async def add_comment(
    ticket_id: str,
    request_data: AddCommentRequest,
    actor_id: str | None = Depends(get_actor_id),
    services: TrackerServices = Depends(get_services),
) -> dict[str, Any]:
    return await services.comments.add_comment(
        actor_id, ticket_id, request_data.content, request_data.parent_id
    )


@router.patch("/comments/{comment_id}")
async def edit_comment(
    comment_id: str,
    request_data: EditCommentRequest,
    actor_id: str | None = Depends(get_actor_id),
    services: TrackerServices = Depends(get_services),
) -> dict[str, Any]:
    return await services.comments.edit_comment(actor_id, comment_id, request_data.content)


@router.delete("/comments/{comment_id}", response_model=CommentDeletionResponse)
async def delete_comment(
    comment_id: str,
    actor_id: str | None = Depends(get_actor_id),
    services: TrackerServices = Depends(get_services),
) -> CommentDeletionResponse:
    """Delete a comment and its replies; returns ids in deletion order."""
    deleted = await services.comments.delete_comment(actor_id, comment_id)
    return CommentDeletionResponse(deleted=deleted)
