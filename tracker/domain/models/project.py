"""Project and membership domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from tracker.domain.models.role import ProjectRole


class ProjectStatus(Enum):
    """Lifecycle status of a project."""

    ACTIVE = "active"
    ARCHIVED = "archived"


@dataclass(frozen=True)
class Project:
    """A tenant project. Owns every other entity.

    Attributes:
        id: Project identifier.
        name: Display name.
        key: Short uppercase key used in ticket keys (immutable).
        owner_id: User that created the project; can never be removed.
        group_id: External identity group (None if creation failed).
        status: Active or archived.
        description: Free text.
    """

    id: str
    name: str
    key: str
    owner_id: str
    group_id: str | None = None
    status: ProjectStatus = ProjectStatus.ACTIVE
    description: str = ""

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Project:
        return cls(
            id=doc["id"],
            name=doc.get("name", ""),
            key=doc.get("key", ""),
            owner_id=doc["owner_id"],
            group_id=doc.get("group_id"),
            status=ProjectStatus(doc.get("status", ProjectStatus.ACTIVE.value)),
            description=doc.get("description") or "",
        )


@dataclass(frozen=True)
class Membership:
    """A user's membership in a project, unique per (project_id, user_id).

    The raw role string is kept next to the parsed role so that an unknown
    stored value is preserved while still resolving to viewer-level rights.
    """

    id: str
    project_id: str
    user_id: str
    raw_role: str
    joined_at: str | None = field(default=None)

    @property
    def role(self) -> ProjectRole:
        """Parsed role; unknown stored values fail closed to viewer."""
        return ProjectRole.parse(self.raw_role) or ProjectRole.VIEWER

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Membership:
        return cls(
            id=doc["id"],
            project_id=doc["project_id"],
            user_id=doc["user_id"],
            raw_role=doc.get("role", ""),
            joined_at=doc.get("joined_at"),
        )
