"""Authorization gate.

Every externally-triggered mutation enters here first. The gate resolves
the actor's membership, checks the requested capability against the
role hierarchy, and returns the resolved role so callers can make rank
comparisons.

Decision flow (authorize):
1. No actor -> UnauthenticatedError
2. Malformed identifiers -> ValidationFailedError (before any store call)
3. No membership in the project -> NotAMemberError
4. Capability not granted by the role -> InsufficientRoleError
5. Otherwise the resolved ProjectRole is returned

Member-management sub-rules (check_member_change / check_invite):
- Self-protection: never change or remove your own membership here
- Owner-protection: the owner's membership is immutable
- No lateral or upward edit: rank(target) < rank(actor), strictly
- Role ceiling: rank(new_role) <= rank(actor) unless actor is admin
"""

from __future__ import annotations

from uuid import NAMESPACE_URL, uuid5

from tracker.application.ports.store import PROJECT_MEMBERS, PROJECTS, StorePort
from tracker.application.services.base import LoggingMixin
from tracker.domain.errors.authorization import (
    InsufficientRoleError,
    NotAMemberError,
    OwnerProtectedError,
    RankTooHighError,
    SelfModificationError,
    UnauthenticatedError,
)
from tracker.domain.errors.store import NotFoundError
from tracker.domain.models.project import Membership, Project
from tracker.domain.models.role import Permission, ProjectRole
from tracker.domain.primitives.identifiers import require_identifiers
from tracker.domain.services import role_hierarchy

_MEMBERSHIP_NAMESPACE = uuid5(NAMESPACE_URL, "tracker:project-membership")


def membership_id(project_id: str, user_id: str) -> str:
    """Deterministic membership id, unique per (project_id, user_id).

    Using it as the document id lets the store's create-if-absent
    enforce membership uniqueness.
    """
    return uuid5(_MEMBERSHIP_NAMESPACE, f"{project_id}:{user_id}").hex


class AuthorizationGate(LoggingMixin):
    """Allow/deny decisions for every mutation."""

    def __init__(self, store: StorePort) -> None:
        self._store = store
        self._init_logger(component="authorization")

    def require_actor(self, actor_id: str | None, **identifiers: str | None) -> str:
        """Reject a missing actor or malformed identifiers before any store call.

        Args:
            actor_id: Authenticated user id.
            **identifiers: Request identifiers keyed by their public name.

        Returns:
            The actor id.

        Raises:
            UnauthenticatedError: No actor supplied.
            ValidationFailedError: Any identifier is malformed.
        """
        if not actor_id:
            raise UnauthenticatedError()
        require_identifiers(userId=actor_id, **identifiers)
        return actor_id

    async def membership_of(self, project_id: str, user_id: str) -> Membership | None:
        """Look up a user's membership, or None if they are not a member."""
        try:
            doc = await self._store.get(PROJECT_MEMBERS, membership_id(project_id, user_id))
        except NotFoundError:
            return None
        return Membership.from_document(doc)

    async def load_project(self, project_id: str) -> Project:
        """Fetch a project.

        Raises:
            NotFoundError: If the project does not exist.
        """
        return Project.from_document(await self._store.get(PROJECTS, project_id))

    async def authorize(
        self,
        actor_id: str | None,
        project_id: str,
        capability: Permission,
    ) -> ProjectRole:
        """Decide whether an actor may exercise a capability in a project.

        Args:
            actor_id: Authenticated user id (None if unauthenticated).
            project_id: Project the mutation targets.
            capability: Permission required by the operation.

        Returns:
            The actor's resolved role.

        Raises:
            UnauthenticatedError: No actor supplied.
            ValidationFailedError: Malformed identifiers.
            NotAMemberError: Actor has no membership.
            InsufficientRoleError: Role lacks the capability.
        """
        membership = await self._require_membership(actor_id, project_id)
        role = membership.role
        if not role_hierarchy.has_permission(role, capability):
            self._log_operation(
                "authorize",
                actor_id=actor_id,
                project_id=project_id,
                capability=capability.value,
                role=role.value,
            ).info("authorization_denied", reason="InsufficientRole")
            raise InsufficientRoleError(
                capability.value, project_id=project_id, actor_id=actor_id
            )
        return role

    async def authorize_rank(
        self,
        actor_id: str | None,
        project_id: str,
        minimum: ProjectRole,
    ) -> ProjectRole:
        """Require the actor to hold at least ``minimum`` rank in a project.

        Raises:
            UnauthenticatedError, ValidationFailedError, NotAMemberError,
            InsufficientRoleError: As for authorize().
        """
        membership = await self._require_membership(actor_id, project_id)
        role = membership.role
        if role_hierarchy.rank(role) < role_hierarchy.rank(minimum):
            self._log_operation(
                "authorize_rank",
                actor_id=actor_id,
                project_id=project_id,
                minimum=minimum.value,
                role=role.value,
            ).info("authorization_denied", reason="InsufficientRole")
            raise InsufficientRoleError(
                f"{minimum.value} role or above",
                project_id=project_id,
                actor_id=actor_id,
            )
        return role

    async def require_member(self, actor_id: str | None, project_id: str) -> Membership:
        """Require plain membership (used by the self-service leave path)."""
        return await self._require_membership(actor_id, project_id)

    def check_member_change(
        self,
        project: Project,
        actor_id: str,
        actor_role: ProjectRole,
        target: Membership,
        new_role: ProjectRole | None = None,
    ) -> None:
        """Apply the hierarchy sub-rules to a role change or removal.

        Args:
            project: Project the target membership belongs to.
            actor_id: Actor making the change.
            actor_role: Actor's resolved role (from authorize()).
            target: Membership being changed or removed.
            new_role: Requested role for a change; None for a removal.

        Raises:
            SelfModificationError: Target is the actor's own membership.
            OwnerProtectedError: Target is the project owner.
            RankTooHighError: Target's rank is not strictly below the actor's,
                or the requested role is above the actor's (non-admin).
        """
        if target.user_id == actor_id:
            raise SelfModificationError(project.id, actor_id)
        if target.user_id == project.owner_id:
            raise OwnerProtectedError(project.id)

        if role_hierarchy.rank(target.role) >= role_hierarchy.rank(actor_role):
            verb = "change the role of" if new_role is not None else "remove"
            raise RankTooHighError(
                project.id,
                actor_role=actor_role.value,
                target_role=target.role.value,
                message=f"You cannot {verb} a member with equal or higher rank",
            )

        if new_role is not None:
            self._check_role_ceiling(
                project.id,
                actor_role,
                new_role,
                "You cannot promote someone to a higher role than yours",
            )

    def check_invite(
        self,
        project_id: str,
        actor_id: str,
        actor_role: ProjectRole,
        invitee_id: str,
        role: ProjectRole,
    ) -> None:
        """Apply the invite ceiling and the self-invite rule.

        Raises:
            SelfModificationError: Actor invited themselves.
            RankTooHighError: Role above the inviter's own (non-admin).
        """
        if invitee_id == actor_id:
            raise SelfModificationError(
                project_id, actor_id, "You cannot invite yourself to the project"
            )
        self._check_role_ceiling(
            project_id,
            actor_role,
            role,
            "You cannot invite someone with a higher role than yours",
        )

    @staticmethod
    def _check_role_ceiling(
        project_id: str,
        actor_role: ProjectRole,
        new_role: ProjectRole,
        message: str,
    ) -> None:
        if actor_role is ProjectRole.ADMIN:
            return
        if role_hierarchy.rank(new_role) > role_hierarchy.rank(actor_role):
            raise RankTooHighError(
                project_id,
                actor_role=actor_role.value,
                target_role=new_role.value,
                message=message,
            )

    async def _require_membership(
        self, actor_id: str | None, project_id: str
    ) -> Membership:
        actor_id = self.require_actor(actor_id, projectId=project_id)
        membership = await self.membership_of(project_id, actor_id)
        if membership is None:
            self._log_operation(
                "authorize", actor_id=actor_id, project_id=project_id
            ).info("authorization_denied", reason="NotAMember")
            raise NotAMemberError(project_id, actor_id)
        return membership
