"""Sprint lifecycle service.

State machine: planning -> active -> completed, forward only.

Single-active-sprint invariant:
    Each project has one slot document in ``sprint_slots`` (id = project
    id) naming the sprint that holds the active position. start() claims
    it with create-if-absent, so two concurrent starts cannot both win.
    The sprint's own status write is then a compare-and-set on its
    previous status. complete() and delete() release the slot.

    A slot is stale when its holder no longer exists or is completed; a
    stale slot is taken over with a compare-and-set on the old holder.
    A holder still in planning is treated as mid-start and blocks.

Every operation requires manager rank or above.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from uuid import uuid4

from tracker.application.ports.activity_audit import ActivityAuditPort
from tracker.application.ports.store import SPRINT_SLOTS, SPRINTS, Document, StorePort
from tracker.application.services.authorization_gate import AuthorizationGate
from tracker.application.services.base import LoggingMixin
from tracker.application.services.cascade_deleter import CascadeDeleter
from tracker.domain.errors.concurrent_modification import ConflictError
from tracker.domain.errors.invariant import InvariantViolatedError
from tracker.domain.errors.store import NotFoundError, UnavailableError
from tracker.domain.models.activity import ActivityAction, ActivityLogEntry
from tracker.domain.models.role import ProjectRole
from tracker.domain.models.sprint import Sprint, SprintStatus
from tracker.domain.services.field_validation import validate_sprint_fields

SPRINT_MANAGER_ROLE = ProjectRole.MANAGER

# Bounded retries when the slot disappears between a failed claim and its read
_CLAIM_ATTEMPTS = 3


class SprintLifecycleService(LoggingMixin):
    """Creates, edits, starts, completes and deletes sprints."""

    def __init__(
        self,
        store: StorePort,
        gate: AuthorizationGate,
        audit: ActivityAuditPort,
        cascade: CascadeDeleter,
    ) -> None:
        self._store = store
        self._gate = gate
        self._audit = audit
        self._cascade = cascade
        self._init_logger(component="sprints")

    async def create_sprint(
        self,
        actor_id: str | None,
        project_id: str,
        fields: Mapping[str, Any],
    ) -> Document:
        """Create a sprint in planning status.

        Raises:
            ValidationFailedError: Invalid name, goal or date range.
        """
        actor_id = self._gate.require_actor(actor_id, projectId=project_id)
        await self._gate.authorize_rank(actor_id, project_id, SPRINT_MANAGER_ROLE)
        clean = validate_sprint_fields(fields, creating=True)

        doc = await self._store.create(
            SPRINTS,
            uuid4().hex,
            {
                "project_id": project_id,
                "name": clean["name"],
                "goal": clean.get("goal", ""),
                "start_date": clean.get("start_date"),
                "end_date": clean.get("end_date"),
                "status": SprintStatus.PLANNING.value,
            },
        )
        await self._record(ActivityAction.SPRINT_CREATED, actor_id, doc, {"name": clean["name"]})
        self._log_operation("create_sprint", actor_id=actor_id, project_id=project_id).info(
            "sprint_created", sprint_id=doc["id"]
        )
        return doc

    async def update_sprint(
        self,
        actor_id: str | None,
        sprint_id: str,
        fields: Mapping[str, Any],
    ) -> Document:
        """Edit name, goal or dates. Status is not writable here.

        Raises:
            ValidationFailedError: Invalid fields or an attempt to write status.
        """
        actor_id = self._gate.require_actor(actor_id, sprintId=sprint_id)
        current = await self._store.get(SPRINTS, sprint_id)
        sprint = Sprint.from_document(current)
        await self._gate.authorize_rank(actor_id, sprint.project_id, SPRINT_MANAGER_ROLE)
        clean = validate_sprint_fields(fields, current=current)

        doc = await self._store.update(SPRINTS, sprint_id, clean)
        await self._record(ActivityAction.SPRINT_UPDATED, actor_id, doc, clean)
        self._log_operation("update_sprint", actor_id=actor_id, sprint_id=sprint_id).info(
            "sprint_updated", fields=sorted(clean)
        )
        return doc

    async def start(self, actor_id: str | None, sprint_id: str) -> Document:
        """Activate a planning sprint.

        Starting an already-active sprint is a no-op.

        Raises:
            InvariantViolatedError: Another sprint is active in the project,
                or the sprint is completed (no reopening).
        """
        actor_id = self._gate.require_actor(actor_id, sprintId=sprint_id)
        sprint = await self._load(sprint_id)
        await self._gate.authorize_rank(actor_id, sprint.project_id, SPRINT_MANAGER_ROLE)
        log = self._log_operation(
            "start", actor_id=actor_id, sprint_id=sprint_id, project_id=sprint.project_id
        )

        if sprint.status is SprintStatus.ACTIVE:
            log.debug("sprint_start_noop")
            return await self._store.get(SPRINTS, sprint_id)
        if sprint.status.is_terminal():
            raise InvariantViolatedError("A completed sprint cannot be restarted")

        await self._claim_slot(sprint.project_id, sprint_id)
        try:
            doc = await self._store.update(
                SPRINTS,
                sprint_id,
                {"status": SprintStatus.ACTIVE.value},
                expected={"status": SprintStatus.PLANNING.value},
            )
        except ConflictError:
            latest = await self._store.get(SPRINTS, sprint_id)
            if latest.get("status") == SprintStatus.ACTIVE.value:
                return latest
            await self._release_slot(sprint.project_id, sprint_id)
            raise InvariantViolatedError(
                f"Sprint {sprint_id} is {latest.get('status')} and cannot be started"
            ) from None
        except Exception:
            await self._release_slot(sprint.project_id, sprint_id)
            raise

        await self._record(ActivityAction.SPRINT_STARTED, actor_id, doc, {"name": sprint.name})
        log.info("sprint_started")
        return doc

    async def complete(self, actor_id: str | None, sprint_id: str) -> Document:
        """Complete an active sprint.

        Completing an already-completed sprint is a no-op, so the call is
        safe to retry.

        Raises:
            InvariantViolatedError: The sprint was never started.
        """
        actor_id = self._gate.require_actor(actor_id, sprintId=sprint_id)
        sprint = await self._load(sprint_id)
        await self._gate.authorize_rank(actor_id, sprint.project_id, SPRINT_MANAGER_ROLE)
        log = self._log_operation(
            "complete", actor_id=actor_id, sprint_id=sprint_id, project_id=sprint.project_id
        )

        if sprint.status is SprintStatus.COMPLETED:
            await self._release_slot(sprint.project_id, sprint_id)
            log.debug("sprint_complete_noop")
            return await self._store.get(SPRINTS, sprint_id)
        if sprint.status is SprintStatus.PLANNING:
            raise InvariantViolatedError("Only an active sprint can be completed")

        try:
            doc = await self._store.update(
                SPRINTS,
                sprint_id,
                {"status": SprintStatus.COMPLETED.value},
                expected={"status": SprintStatus.ACTIVE.value},
            )
        except ConflictError:
            latest = await self._store.get(SPRINTS, sprint_id)
            if latest.get("status") != SprintStatus.COMPLETED.value:
                raise
            doc = latest
        await self._release_slot(sprint.project_id, sprint_id)

        await self._record(ActivityAction.SPRINT_COMPLETED, actor_id, doc, {"name": sprint.name})
        log.info("sprint_completed")
        return doc

    async def delete(self, actor_id: str | None, sprint_id: str) -> int:
        """Delete a sprint in any status, orphaning its tickets first.

        Returns:
            Number of tickets whose sprint reference was cleared.
        """
        actor_id = self._gate.require_actor(actor_id, sprintId=sprint_id)
        sprint = await self._load(sprint_id)
        await self._gate.authorize_rank(actor_id, sprint.project_id, SPRINT_MANAGER_ROLE)

        orphaned = await self._cascade.orphan_sprint_tickets(sprint_id)
        # The slot is released only once the row is gone
        await self._store.delete(SPRINTS, sprint_id)
        await self._release_slot(sprint.project_id, sprint_id)

        await self._audit.append(
            ActivityLogEntry(
                project_id=sprint.project_id,
                user_id=actor_id,
                action=ActivityAction.SPRINT_DELETED,
                details={"name": sprint.name, "tickets_orphaned": orphaned},
            )
        )
        self._log_operation("delete", actor_id=actor_id, sprint_id=sprint_id).info(
            "sprint_deleted", tickets_orphaned=orphaned
        )
        return orphaned

    # ------------------------------------------------------------------
    # Active-sprint slot
    # ------------------------------------------------------------------

    async def _claim_slot(self, project_id: str, sprint_id: str) -> None:
        for _ in range(_CLAIM_ATTEMPTS):
            try:
                await self._store.create(
                    SPRINT_SLOTS, project_id, {"project_id": project_id, "sprint_id": sprint_id}
                )
                return
            except ConflictError:
                pass

            try:
                slot = await self._store.get(SPRINT_SLOTS, project_id)
            except NotFoundError:
                continue
            holder = slot.get("sprint_id")
            if holder == sprint_id:
                return
            if not await self._is_stale_holder(holder):
                raise InvariantViolatedError(
                    "Another sprint is already active in this project"
                )
            try:
                await self._store.update(
                    SPRINT_SLOTS,
                    project_id,
                    {"sprint_id": sprint_id},
                    expected={"sprint_id": holder},
                )
                return
            except ConflictError:
                raise InvariantViolatedError(
                    "Another sprint is already active in this project"
                ) from None
            except NotFoundError:
                continue

        raise UnavailableError("claim active sprint slot", "slot kept changing")

    async def _is_stale_holder(self, holder_id: str | None) -> bool:
        if not holder_id:
            return True
        try:
            holder = await self._store.get(SPRINTS, holder_id)
        except NotFoundError:
            return True
        return holder.get("status") == SprintStatus.COMPLETED.value

    async def _release_slot(self, project_id: str, sprint_id: str) -> None:
        try:
            await self._store.delete(SPRINT_SLOTS, project_id, expected={"sprint_id": sprint_id})
        except (NotFoundError, ConflictError):
            pass

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _load(self, sprint_id: str) -> Sprint:
        return Sprint.from_document(await self._store.get(SPRINTS, sprint_id))

    async def _record(
        self,
        action: ActivityAction,
        actor_id: str,
        sprint_doc: Document,
        details: Mapping[str, Any],
    ) -> None:
        await self._audit.append(
            ActivityLogEntry(
                project_id=sprint_doc["project_id"],
                user_id=actor_id,
                action=action,
                details=dict(details),
                sprint_id=sprint_doc["id"],
            )
        )
