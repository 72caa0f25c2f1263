"""Domain models for Tracker Core."""

from tracker.domain.models.activity import ActivityAction, ActivityLogEntry
from tracker.domain.models.comment import Comment
from tracker.domain.models.notification import NotificationKind
from tracker.domain.models.project import Membership, Project, ProjectStatus
from tracker.domain.models.role import Permission, PermissionSet, ProjectRole
from tracker.domain.models.sprint import Sprint, SprintStatus
from tracker.domain.models.ticket import (
    BOARD_COLUMNS,
    Ticket,
    TicketPriority,
    TicketStatus,
    TicketType,
)

__all__: list[str] = [
    "ActivityAction",
    "ActivityLogEntry",
    "BOARD_COLUMNS",
    "Comment",
    "Membership",
    "NotificationKind",
    "Permission",
    "PermissionSet",
    "Project",
    "ProjectRole",
    "ProjectStatus",
    "Sprint",
    "SprintStatus",
    "Ticket",
    "TicketPriority",
    "TicketStatus",
    "TicketType",
]
