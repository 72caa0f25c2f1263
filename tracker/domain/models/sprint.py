"""Sprint domain model and lifecycle state machine.

State Machine:
    PLANNING -> ACTIVE (start)
    ACTIVE -> COMPLETED (complete)

Strictly forward-only; COMPLETED is terminal (no reopening).
At most one ACTIVE sprint exists per project at any time.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class SprintStatus(Enum):
    """State in the sprint lifecycle."""

    PLANNING = "planning"
    ACTIVE = "active"
    COMPLETED = "completed"

    def is_terminal(self) -> bool:
        return self is SprintStatus.COMPLETED

    def valid_transitions(self) -> frozenset[SprintStatus]:
        """Get valid forward transitions from this state."""
        return SPRINT_TRANSITIONS.get(self, frozenset())


SPRINT_TRANSITIONS: dict[SprintStatus, frozenset[SprintStatus]] = {
    SprintStatus.PLANNING: frozenset({SprintStatus.ACTIVE}),
    SprintStatus.ACTIVE: frozenset({SprintStatus.COMPLETED}),
    SprintStatus.COMPLETED: frozenset(),
}

NAME_MAX_LENGTH = 100
GOAL_MAX_LENGTH = 2_000


@dataclass(frozen=True)
class Sprint:
    """A time-boxed iteration within a project.

    Attributes:
        id: Sprint identifier.
        project_id: Owning project.
        name: Display name.
        status: Lifecycle state.
        start_date: ISO date the sprint is planned to start.
        end_date: ISO date the sprint is planned to end.
        goal: Optional sprint goal.
    """

    id: str
    project_id: str
    name: str
    status: SprintStatus
    start_date: str | None = None
    end_date: str | None = None
    goal: str = ""

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Sprint:
        return cls(
            id=doc["id"],
            project_id=doc["project_id"],
            name=doc.get("name", ""),
            status=SprintStatus(doc.get("status", SprintStatus.PLANNING.value)),
            start_date=doc.get("start_date"),
            end_date=doc.get("end_date"),
            goal=doc.get("goal") or "",
        )
