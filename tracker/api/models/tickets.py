"""Ticket, board and comment request models."""

from typing import Literal

from pydantic import Field

from tracker.api.models.common import StrictRequest


class CreateTicketRequest(StrictRequest):
    title: str
    description: str | None = None
    type: str | None = None
    priority: str | None = None
    labels: list[str] | None = None
    due_date: str | None = None
    assignee_id: str | None = None
    sprint_id: str | None = None


class UpdateTicketRequest(StrictRequest):
    """Partial field update with an optional optimistic concurrency token."""

    title: str | None = None
    description: str | None = None
    type: str | None = None
    priority: str | None = None
    labels: list[str] | None = None
    due_date: str | None = None
    sprint_id: str | None = None
    expected_version: str | None = Field(
        default=None,
        description="updated_at value last observed; a mismatch returns 409",
    )


class MoveTicketRequest(StrictRequest):
    status: str
    placement: Literal["head", "tail", "after"] = "tail"
    after_id: str | None = None


class AssignTicketRequest(StrictRequest):
    assignee_id: str | None = None


class AddCommentRequest(StrictRequest):
    content: str
    parent_id: str | None = None


class EditCommentRequest(StrictRequest):
    content: str
