"""Project roles and permissions.

Roles form a total order (viewer < developer < manager < admin); the
ordering itself lives in the role hierarchy service so that every rank
comparison routes through one place.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum


class ProjectRole(Enum):
    """Role a member holds within a single project."""

    VIEWER = "viewer"
    DEVELOPER = "developer"
    MANAGER = "manager"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: str | ProjectRole | None) -> ProjectRole | None:
        """Parse a raw role value, returning None when it is not a known role."""
        if isinstance(value, ProjectRole):
            return value
        for role in cls:
            if role.value == value:
                return role
        return None


class Permission(Enum):
    """Named capability checked by the authorization gate."""

    CREATE_TICKETS = "canCreateTickets"
    EDIT_TICKETS = "canEditTickets"
    DELETE_TICKETS = "canDeleteTickets"
    ASSIGN_TICKETS = "canAssignTickets"
    MOVE_TICKETS = "canMoveTickets"
    MANAGE_MEMBERS = "canManageMembers"
    EDIT_PROJECT = "canEditProject"
    DELETE_PROJECT = "canDeleteProject"
    COMMENT = "canComment"


@dataclass(frozen=True)
class PermissionSet:
    """Fixed boolean vector over every Permission.

    Field names mirror the Permission enum members in lower case.
    """

    create_tickets: bool = False
    edit_tickets: bool = False
    delete_tickets: bool = False
    assign_tickets: bool = False
    move_tickets: bool = False
    manage_members: bool = False
    edit_project: bool = False
    delete_project: bool = False
    comment: bool = False

    def allows(self, permission: Permission) -> bool:
        """Check whether this set grants the given permission."""
        return bool(getattr(self, permission.name.lower()))

    def granted(self) -> frozenset[Permission]:
        """Return every permission this set grants."""
        return frozenset(p for p in Permission if self.allows(p))

    def as_dict(self) -> dict[str, bool]:
        """Return the set keyed by public permission names."""
        return {
            Permission[f.name.upper()].value: getattr(self, f.name)
            for f in fields(self)
        }
