"""Application services: async orchestration of the domain rules.

Every externally-triggered mutation enters through the AuthorizationGate;
only on success does it reach the workflow, lifecycle, ordering or
cascade logic.
"""

from tracker.application.services.authorization_gate import (
    AuthorizationGate,
    membership_id,
)
from tracker.application.services.board_ordering_service import (
    BoardOrderingService,
    RenormalizationResult,
)
from tracker.application.services.cascade_deleter import CascadeDeleter
from tracker.application.services.comment_service import CommentService
from tracker.application.services.member_service import MemberService
from tracker.application.services.project_locks import ProjectLocks
from tracker.application.services.project_service import ProjectService
from tracker.application.services.sprint_lifecycle_service import SprintLifecycleService
from tracker.application.services.ticket_workflow_service import (
    TicketWorkflowService,
    ticket_key,
)

__all__: list[str] = [
    "AuthorizationGate",
    "BoardOrderingService",
    "CascadeDeleter",
    "CommentService",
    "MemberService",
    "ProjectLocks",
    "ProjectService",
    "RenormalizationResult",
    "SprintLifecycleService",
    "TicketWorkflowService",
    "membership_id",
    "ticket_key",
]
