"""Project membership management.

Invite, change role and remove go through the management path and the
hierarchy sub-rules of the authorization gate. Leaving is the narrow
self-service path: any member except the owner may leave.

Removing or leaving also clears the user's ticket assignments in the
project, so every assignee stays a current member.
"""

from __future__ import annotations

from datetime import datetime, timezone

from tracker.application.ports.activity_audit import ActivityAuditPort
from tracker.application.ports.identity_group import IdentityGroupPort
from tracker.application.ports.notifier import NotifierPort
from tracker.application.ports.store import PROJECT_MEMBERS, Document, StorePort
from tracker.application.services.authorization_gate import AuthorizationGate, membership_id
from tracker.application.services.base import LoggingMixin
from tracker.application.services.cascade_deleter import CascadeDeleter
from tracker.application.services.notifications import notify_best_effort
from tracker.domain.errors.authorization import OwnerProtectedError
from tracker.domain.errors.concurrent_modification import ConflictError
from tracker.domain.errors.store import NotFoundError
from tracker.domain.errors.validation import ValidationFailedError
from tracker.domain.models.activity import ActivityAction, ActivityLogEntry
from tracker.domain.models.notification import NotificationKind
from tracker.domain.models.project import Membership, Project
from tracker.domain.models.role import Permission
from tracker.domain.services.field_validation import parse_role


class MemberService(LoggingMixin):
    """Invites, role changes, removals and self-service leaving."""

    def __init__(
        self,
        store: StorePort,
        gate: AuthorizationGate,
        audit: ActivityAuditPort,
        notifier: NotifierPort,
        identity_group: IdentityGroupPort,
        cascade: CascadeDeleter,
    ) -> None:
        self._store = store
        self._gate = gate
        self._audit = audit
        self._notifier = notifier
        self._identity_group = identity_group
        self._cascade = cascade
        self._init_logger(component="members")

    async def invite_member(
        self,
        actor_id: str | None,
        project_id: str,
        invitee_id: str,
        role: str,
    ) -> Document:
        """Add a user to a project with a role.

        Raises:
            ValidationFailedError: Invalid role, or the invitee is already
                a member.
            SelfModificationError: Actor invited themselves.
            RankTooHighError: Role above the inviter's own (non-admin).
        """
        actor_id = self._gate.require_actor(actor_id, projectId=project_id, inviteeId=invitee_id)
        actor_role = await self._gate.authorize(actor_id, project_id, Permission.MANAGE_MEMBERS)
        new_role = parse_role(role)
        self._gate.check_invite(project_id, actor_id, actor_role, invitee_id, new_role)
        project = await self._gate.load_project(project_id)
        log = self._log_operation(
            "invite_member", actor_id=actor_id, project_id=project_id, invitee_id=invitee_id
        )

        if await self._gate.membership_of(project_id, invitee_id) is not None:
            raise ValidationFailedError(["User is already a member of this project"])

        if project.group_id:
            try:
                await self._identity_group.add_member(project.group_id, invitee_id, new_role.value)
            except Exception as err:
                self._log_collaborator_failure(
                    "invite_member",
                    "identity_group_add_failed",
                    err,
                    project_id=project_id,
                    group_id=project.group_id,
                )

        try:
            doc = await self._store.create(
                PROJECT_MEMBERS,
                membership_id(project_id, invitee_id),
                {
                    "project_id": project_id,
                    "user_id": invitee_id,
                    "role": new_role.value,
                    "joined_at": datetime.now(timezone.utc).isoformat(),
                },
            )
        except ConflictError:
            raise ValidationFailedError(["User is already a member of this project"]) from None

        await self._audit.append(
            ActivityLogEntry(
                project_id=project_id,
                user_id=actor_id,
                action=ActivityAction.MEMBER_ADDED,
                details={"invitee_id": invitee_id, "role": new_role.value},
            )
        )
        log.info("member_added", role=new_role.value)

        await notify_best_effort(
            self._notifier,
            log,
            [invitee_id],
            NotificationKind.MEMBER_INVITED,
            {
                "project_id": project_id,
                "project_name": project.name,
                "role": new_role.value,
                "actor_id": actor_id,
            },
        )
        return doc

    async def change_member_role(
        self,
        actor_id: str | None,
        project_id: str,
        member_id: str,
        role: str,
    ) -> Document:
        """Change another member's role.

        Raises:
            SelfModificationError, OwnerProtectedError, RankTooHighError:
                Hierarchy sub-rules.
            ConflictError: The target's role changed concurrently.
        """
        actor_id = self._gate.require_actor(actor_id, projectId=project_id, memberId=member_id)
        actor_role = await self._gate.authorize(actor_id, project_id, Permission.MANAGE_MEMBERS)
        new_role = parse_role(role)
        project = await self._gate.load_project(project_id)
        target = await self._load_member(project_id, member_id)
        self._gate.check_member_change(project, actor_id, actor_role, target, new_role)

        doc = await self._store.update(
            PROJECT_MEMBERS,
            member_id,
            {"role": new_role.value},
            expected={"role": target.raw_role},
        )
        await self._audit.append(
            ActivityLogEntry(
                project_id=project_id,
                user_id=actor_id,
                action=ActivityAction.MEMBER_ROLE_CHANGED,
                details={"member_id": member_id, "new_role": new_role.value},
            )
        )
        self._log_operation(
            "change_member_role", actor_id=actor_id, project_id=project_id, member_id=member_id
        ).info("member_role_changed", old_role=target.raw_role, new_role=new_role.value)
        return doc

    async def remove_member(
        self,
        actor_id: str | None,
        project_id: str,
        member_id: str,
    ) -> None:
        """Remove another member from a project.

        Raises:
            SelfModificationError, OwnerProtectedError, RankTooHighError:
                Hierarchy sub-rules.
        """
        actor_id = self._gate.require_actor(actor_id, projectId=project_id, memberId=member_id)
        actor_role = await self._gate.authorize(actor_id, project_id, Permission.MANAGE_MEMBERS)
        project = await self._gate.load_project(project_id)
        target = await self._load_member(project_id, member_id)
        self._gate.check_member_change(project, actor_id, actor_role, target)

        await self._detach(project, target, "remove_member")
        await self._audit.append(
            ActivityLogEntry(
                project_id=project_id,
                user_id=actor_id,
                action=ActivityAction.MEMBER_REMOVED,
                details={"removed_user_id": target.user_id},
            )
        )
        self._log_operation(
            "remove_member", actor_id=actor_id, project_id=project_id, member_id=member_id
        ).info("member_removed", removed_user_id=target.user_id)

    async def leave_project(self, actor_id: str | None, project_id: str) -> None:
        """Leave a project (self-service).

        Raises:
            NotAMemberError: The actor is not a member.
            OwnerProtectedError: The owner can never leave.
        """
        actor_id = self._gate.require_actor(actor_id, projectId=project_id)
        membership = await self._gate.require_member(actor_id, project_id)
        project = await self._gate.load_project(project_id)
        if project.owner_id == actor_id:
            raise OwnerProtectedError(
                project_id,
                "Project owner cannot leave. Transfer ownership first or delete the project.",
            )

        await self._detach(project, membership, "leave_project")
        await self._audit.append(
            ActivityLogEntry(
                project_id=project_id,
                user_id=actor_id,
                action=ActivityAction.MEMBER_LEFT,
                details={"user_id": actor_id},
            )
        )
        self._log_operation("leave_project", actor_id=actor_id, project_id=project_id).info(
            "member_left"
        )

    async def _load_member(self, project_id: str, member_id: str) -> Membership:
        membership = Membership.from_document(await self._store.get(PROJECT_MEMBERS, member_id))
        if membership.project_id != project_id:
            raise NotFoundError(PROJECT_MEMBERS, member_id)
        return membership

    async def _detach(self, project: Project, membership: Membership, operation: str) -> None:
        """Remove a membership: identity group, assignments, then the row."""
        if project.group_id:
            try:
                await self._identity_group.remove_member(project.group_id, membership.user_id)
            except Exception as err:
                self._log_collaborator_failure(
                    operation,
                    "identity_group_remove_failed",
                    err,
                    project_id=project.id,
                    group_id=project.group_id,
                )

        await self._cascade.unassign_member_tickets(project.id, membership.user_id)
        await self._store.delete(PROJECT_MEMBERS, membership.id)
