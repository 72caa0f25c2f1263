"""Project lifecycle: create, update, archive, restore and delete.

Project keys are unique across projects. A key is reserved in the
``project_keys`` collection with create-if-absent before the project row
is written, so two concurrent creations cannot take the same key.

Deletion runs the project cascade. An owner whose membership an
interrupted cascade already removed may re-run the deletion.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from uuid import uuid4

from tracker.application.ports.activity_audit import ActivityAuditPort
from tracker.application.ports.identity_group import IdentityGroupPort
from tracker.application.ports.store import (
    PROJECT_KEYS,
    PROJECT_MEMBERS,
    PROJECTS,
    Document,
    StorePort,
)
from tracker.application.services.authorization_gate import AuthorizationGate, membership_id
from tracker.application.services.base import LoggingMixin
from tracker.application.services.cascade_deleter import CascadeDeleter
from tracker.application.services.project_locks import ProjectLocks
from tracker.domain.errors.authorization import NotAMemberError
from tracker.domain.errors.concurrent_modification import ConflictError
from tracker.domain.errors.validation import ValidationFailedError
from tracker.domain.models.activity import ActivityAction, ActivityLogEntry
from tracker.domain.models.project import ProjectStatus
from tracker.domain.models.role import Permission, ProjectRole
from tracker.domain.services.field_validation import validate_project_fields


class ProjectService(LoggingMixin):
    """Creates and manages projects."""

    def __init__(
        self,
        store: StorePort,
        gate: AuthorizationGate,
        audit: ActivityAuditPort,
        identity_group: IdentityGroupPort,
        cascade: CascadeDeleter,
        locks: ProjectLocks,
    ) -> None:
        self._store = store
        self._gate = gate
        self._audit = audit
        self._identity_group = identity_group
        self._cascade = cascade
        self._locks = locks
        self._init_logger(component="projects")

    async def create_project(
        self,
        actor_id: str | None,
        name: str,
        key: str,
        description: str = "",
    ) -> Document:
        """Create a project owned by the actor.

        Creates the identity group (best-effort), reserves the key, writes
        the project row and the owner's admin membership.

        Raises:
            ValidationFailedError: Invalid fields or a key already in use.
        """
        actor_id = self._gate.require_actor(actor_id)
        clean = validate_project_fields(
            {"name": name, "key": key, "description": description}, creating=True
        )
        project_id = uuid4().hex
        log = self._log_operation("create_project", actor_id=actor_id, project_id=project_id)

        try:
            await self._store.create(PROJECT_KEYS, clean["key"], {"project_id": project_id})
        except ConflictError:
            raise ValidationFailedError(
                ["A project with this key already exists. Please choose a different key."]
            ) from None

        group_id: str | None = None
        try:
            group_id = await self._identity_group.create_group(clean["name"])
            await self._identity_group.add_member(group_id, actor_id, ProjectRole.ADMIN.value)
        except Exception as err:
            self._log_collaborator_failure(
                "create_project",
                "identity_group_create_failed",
                err,
                actor_id=actor_id,
                project_id=project_id,
                group_id=group_id,
            )

        doc = await self._store.create(
            PROJECTS,
            project_id,
            {
                "name": clean["name"],
                "key": clean["key"],
                "description": clean.get("description", ""),
                "owner_id": actor_id,
                "group_id": group_id,
                "status": ProjectStatus.ACTIVE.value,
            },
        )
        await self._store.create(
            PROJECT_MEMBERS,
            membership_id(project_id, actor_id),
            {
                "project_id": project_id,
                "user_id": actor_id,
                "role": ProjectRole.ADMIN.value,
                "joined_at": doc["created_at"],
            },
        )
        await self._audit.append(
            ActivityLogEntry(
                project_id=project_id,
                user_id=actor_id,
                action=ActivityAction.PROJECT_CREATED,
                details={"name": clean["name"]},
            )
        )
        log.info("project_created", key=clean["key"])
        return doc

    async def update_project(
        self,
        actor_id: str | None,
        project_id: str,
        fields: Mapping[str, Any],
    ) -> Document:
        """Update name and/or description. The key is immutable.

        Raises:
            ValidationFailedError: Invalid fields, a key change or an
                empty update.
        """
        actor_id = self._gate.require_actor(actor_id, projectId=project_id)
        await self._gate.authorize(actor_id, project_id, Permission.EDIT_PROJECT)
        clean = validate_project_fields(fields)

        doc = await self._store.update(PROJECTS, project_id, clean)
        await self._audit.append(
            ActivityLogEntry(
                project_id=project_id,
                user_id=actor_id,
                action=ActivityAction.PROJECT_UPDATED,
                details=clean,
            )
        )
        self._log_operation("update_project", actor_id=actor_id, project_id=project_id).info(
            "project_updated", fields=sorted(clean)
        )
        return doc

    async def archive_project(self, actor_id: str | None, project_id: str) -> Document:
        """Mark a project archived."""
        return await self._set_status(
            actor_id, project_id, ProjectStatus.ARCHIVED, ActivityAction.PROJECT_ARCHIVED
        )

    async def restore_project(self, actor_id: str | None, project_id: str) -> Document:
        """Restore an archived project.

        Raises:
            ValidationFailedError: The project is not archived.
        """
        return await self._set_status(
            actor_id,
            project_id,
            ProjectStatus.ACTIVE,
            ActivityAction.PROJECT_RESTORED,
            required=ProjectStatus.ARCHIVED,
        )

    async def delete_project(self, actor_id: str | None, project_id: str) -> None:
        """Delete a project and everything it owns.

        Raises:
            InsufficientRoleError: Actor lacks canDeleteProject.
            NotAMemberError: Actor is neither a member nor the owner.
            UnavailableError: The store failed; re-run to resume.
        """
        actor_id = self._gate.require_actor(actor_id, projectId=project_id)
        try:
            await self._gate.authorize(actor_id, project_id, Permission.DELETE_PROJECT)
        except NotAMemberError:
            project = await self._gate.load_project(project_id)
            if project.owner_id != actor_id:
                raise
            self._log_operation(
                "delete_project", actor_id=actor_id, project_id=project_id
            ).info("project_cascade_resumed")
        else:
            project = await self._gate.load_project(project_id)

        async with self._locks.ordering(project_id):
            await self._cascade.delete_project(project_id, project.group_id, project.key)
        self._locks.discard(project_id)
        self._log_operation("delete_project", actor_id=actor_id, project_id=project_id).info(
            "project_deleted"
        )

    async def _set_status(
        self,
        actor_id: str | None,
        project_id: str,
        status: ProjectStatus,
        action: ActivityAction,
        required: ProjectStatus | None = None,
    ) -> Document:
        actor_id = self._gate.require_actor(actor_id, projectId=project_id)
        await self._gate.authorize(actor_id, project_id, Permission.EDIT_PROJECT)
        project = await self._gate.load_project(project_id)
        if required is not None and project.status is not required:
            raise ValidationFailedError([f"Project is not {required.value}"])

        doc = await self._store.update(PROJECTS, project_id, {"status": status.value})
        await self._audit.append(
            ActivityLogEntry(
                project_id=project_id,
                user_id=actor_id,
                action=action,
                details={"status": status.value},
            )
        )
        self._log_operation(action.value, actor_id=actor_id, project_id=project_id).info(
            "project_status_changed", status=status.value
        )
        return doc
