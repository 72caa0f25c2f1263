"""Activity log domain model (append-only audit trail).

The core writes one record per state-changing operation and never
reads these records back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ActivityAction(Enum):
    PROJECT_CREATED = "project_created"
    PROJECT_UPDATED = "project_updated"
    PROJECT_ARCHIVED = "project_archived"
    PROJECT_RESTORED = "project_restored"
    TICKET_CREATED = "ticket_created"
    TICKET_UPDATED = "ticket_updated"
    TICKET_MOVED = "ticket_moved"
    TICKET_ASSIGNED = "ticket_assigned"
    TICKET_DELETED = "ticket_deleted"
    COMMENT_ADDED = "comment_added"
    COMMENT_DELETED = "comment_deleted"
    MEMBER_ADDED = "member_added"
    MEMBER_ROLE_CHANGED = "member_role_changed"
    MEMBER_REMOVED = "member_removed"
    MEMBER_LEFT = "member_left"
    SPRINT_CREATED = "sprint_created"
    SPRINT_UPDATED = "sprint_updated"
    SPRINT_STARTED = "sprint_started"
    SPRINT_COMPLETED = "sprint_completed"
    SPRINT_DELETED = "sprint_deleted"


@dataclass(frozen=True)
class ActivityLogEntry:
    """Immutable audit record.

    Attributes:
        project_id: Project the change happened in.
        user_id: Actor that caused the change.
        action: What happened.
        details: Snapshot of only the changed fields (sanitized on write).
        ticket_id: Ticket involved, if any.
        sprint_id: Sprint involved, if any.
    """

    project_id: str
    user_id: str
    action: ActivityAction
    details: dict[str, Any] = field(default_factory=dict)
    ticket_id: str | None = None
    sprint_id: str | None = None
