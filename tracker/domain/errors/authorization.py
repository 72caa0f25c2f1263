"""Authorization errors for Tracker Core.

Every denial carries a stable reason code. Denials are raised, never
returned as silent no-ops, and are never retried automatically.
"""

from __future__ import annotations

from enum import Enum

from tracker.domain.exceptions import TrackerError


class DenialReason(Enum):
    """Reason code attached to every authorization denial."""

    UNAUTHENTICATED = "Unauthenticated"
    NOT_A_MEMBER = "NotAMember"
    INSUFFICIENT_ROLE = "InsufficientRole"
    OWNER_PROTECTED = "OwnerProtected"
    SELF_MODIFICATION = "SelfModification"
    RANK_TOO_HIGH = "RankTooHigh"


class AuthorizationError(TrackerError):
    """Base class for all authorization denials.

    Attributes:
        reason: The denial reason code.
        project_id: Project the decision was made against (if known).
        actor_id: The actor that was denied (if known).
    """

    reason: DenialReason = DenialReason.INSUFFICIENT_ROLE
    code = DenialReason.INSUFFICIENT_ROLE.value

    def __init__(
        self,
        message: str,
        project_id: str | None = None,
        actor_id: str | None = None,
    ) -> None:
        self.project_id = project_id
        self.actor_id = actor_id
        super().__init__(message)


class UnauthenticatedError(AuthorizationError):
    """Raised when a mutation arrives without an actor."""

    reason = DenialReason.UNAUTHENTICATED
    code = DenialReason.UNAUTHENTICATED.value

    def __init__(self) -> None:
        super().__init__("Authentication required")


class NotAMemberError(AuthorizationError):
    """Raised when the actor has no membership in the target project."""

    reason = DenialReason.NOT_A_MEMBER
    code = DenialReason.NOT_A_MEMBER.value

    def __init__(self, project_id: str, actor_id: str) -> None:
        super().__init__(
            "You are not a member of this project",
            project_id=project_id,
            actor_id=actor_id,
        )


class InsufficientRoleError(AuthorizationError):
    """Raised when the actor's role lacks the requested capability.

    Attributes:
        capability: The capability (or minimum role) that was required.
    """

    reason = DenialReason.INSUFFICIENT_ROLE
    code = DenialReason.INSUFFICIENT_ROLE.value

    def __init__(
        self,
        capability: str,
        project_id: str | None = None,
        actor_id: str | None = None,
        message: str | None = None,
    ) -> None:
        self.capability = capability
        super().__init__(
            message or f"You do not have permission: {capability}",
            project_id=project_id,
            actor_id=actor_id,
        )


class OwnerProtectedError(AuthorizationError):
    """Raised on any attempt to change, remove or detach the project owner."""

    reason = DenialReason.OWNER_PROTECTED
    code = DenialReason.OWNER_PROTECTED.value

    def __init__(self, project_id: str, message: str | None = None) -> None:
        super().__init__(
            message or "The project owner's membership cannot be changed or removed",
            project_id=project_id,
        )


class SelfModificationError(AuthorizationError):
    """Raised when an actor targets their own membership via management paths."""

    reason = DenialReason.SELF_MODIFICATION
    code = DenialReason.SELF_MODIFICATION.value

    def __init__(
        self,
        project_id: str,
        actor_id: str,
        message: str | None = None,
    ) -> None:
        super().__init__(
            message or "You cannot change or remove your own membership",
            project_id=project_id,
            actor_id=actor_id,
        )


class RankTooHighError(AuthorizationError):
    """Raised when a hierarchy comparison fails.

    Covers both "target has equal or higher rank" and "requested role is
    above the actor's own role".

    Attributes:
        actor_role: The actor's role value.
        target_role: The role that failed the comparison.
    """

    reason = DenialReason.RANK_TOO_HIGH
    code = DenialReason.RANK_TOO_HIGH.value

    def __init__(
        self,
        project_id: str,
        actor_role: str,
        target_role: str,
        message: str,
    ) -> None:
        self.actor_role = actor_role
        self.target_role = target_role
        super().__init__(message, project_id=project_id)
