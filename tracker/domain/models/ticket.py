"""Ticket domain model.

Ticket status is NOT totally ordered: any status may move to any other.
The workflow gates who may cause a transition and how conflicting writes
are resolved, not which transitions exist.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TicketStatus(Enum):
    """Kanban column a ticket sits in."""

    BACKLOG = "backlog"
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    IN_REVIEW = "in_review"
    DONE = "done"


# Display order of board columns, used when renormalizing the whole board
BOARD_COLUMNS: tuple[TicketStatus, ...] = (
    TicketStatus.BACKLOG,
    TicketStatus.TODO,
    TicketStatus.IN_PROGRESS,
    TicketStatus.IN_REVIEW,
    TicketStatus.DONE,
)


class TicketType(Enum):
    BUG = "bug"
    FEATURE = "feature"
    TASK = "task"
    IMPROVEMENT = "improvement"


class TicketPriority(Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Field limits shared by creation and update validation
TITLE_MIN_LENGTH = 5
TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 10_000
LABEL_MAX_LENGTH = 50


@dataclass(frozen=True)
class Ticket:
    """A unit of work inside a project.

    Attributes:
        id: Ticket identifier.
        project_id: Owning project.
        ticket_number: Per-project sequence number (human-readable key).
        title: Short summary.
        status: Current column.
        order: Position within the column (fractional key).
        reporter_id: Creator; immutable after creation.
        assignee_id: Current assignee, must be a project member.
        sprint_id: Sprint the ticket is planned into, if any.
        attachments: Blob references owned by the ticket.
        updated_at: Last-modified timestamp, the optimistic concurrency token.
    """

    id: str
    project_id: str
    ticket_number: int
    title: str
    status: TicketStatus
    order: float
    reporter_id: str
    type: TicketType = TicketType.TASK
    priority: TicketPriority = TicketPriority.MEDIUM
    description: str = ""
    assignee_id: str | None = None
    sprint_id: str | None = None
    labels: tuple[str, ...] = field(default_factory=tuple)
    due_date: str | None = None
    attachments: tuple[str, ...] = field(default_factory=tuple)
    updated_at: str | None = None

    @property
    def version(self) -> str | None:
        """Optimistic concurrency token (last-modified timestamp)."""
        return self.updated_at

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Ticket:
        return cls(
            id=doc["id"],
            project_id=doc["project_id"],
            ticket_number=int(doc.get("ticket_number", 0)),
            title=doc.get("title", ""),
            status=TicketStatus(doc["status"]),
            order=float(doc.get("order", 0)),
            reporter_id=doc.get("reporter_id", ""),
            type=TicketType(doc.get("type", TicketType.TASK.value)),
            priority=TicketPriority(doc.get("priority", TicketPriority.MEDIUM.value)),
            description=doc.get("description") or "",
            assignee_id=doc.get("assignee_id") or None,
            sprint_id=doc.get("sprint_id") or None,
            labels=tuple(doc.get("labels") or ()),
            due_date=doc.get("due_date"),
            attachments=tuple(doc.get("attachments") or ()),
            updated_at=doc.get("updated_at"),
        )
