"""Ticket workflow service.

State machine over (status, assignee, fields). Any status may move to
any other; the workflow gates who may cause a transition and how
conflicting writes are resolved.

Operations and the capability each requires:
- create_ticket: canCreateTickets
- update_fields: canEditTickets (optional optimistic concurrency token)
- move: canMoveTickets (status and order written in one update)
- assign: canAssignTickets (assignee must be a current member)
- delete: canDeleteTickets (comment tree, blobs and history cascade)

Usage:
    workflow = TicketWorkflowService(store, gate, audit, notifier, cascade, locks)
    ticket = await workflow.move(actor_id, ticket_id, "in_progress", Placement.head())
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from uuid import uuid4

from tracker.application.ports.activity_audit import ActivityAuditPort
from tracker.application.ports.notifier import NotifierPort
from tracker.application.ports.store import (
    DEFAULT_PAGE_SIZE,
    SPRINTS,
    TICKETS,
    Document,
    StorePort,
)
from tracker.application.services.authorization_gate import AuthorizationGate
from tracker.application.services.base import LoggingMixin
from tracker.application.services.cascade_deleter import CascadeDeleter
from tracker.application.services.notifications import notify_best_effort
from tracker.application.services.pagination import drain
from tracker.application.services.project_locks import ProjectLocks
from tracker.domain.errors.store import NotFoundError
from tracker.domain.errors.validation import ValidationFailedError
from tracker.domain.models.activity import ActivityAction, ActivityLogEntry
from tracker.domain.models.notification import NotificationKind
from tracker.domain.models.role import Permission
from tracker.domain.models.ticket import Ticket, TicketPriority, TicketStatus, TicketType
from tracker.domain.services.field_validation import validate_ticket_fields
from tracker.domain.services.ordering import (
    OrderedItem,
    Placement,
    PlacementKind,
    order_for_placement,
)

INITIAL_STATUS = TicketStatus.TODO


def ticket_key(project_key: str, ticket_number: int) -> str:
    """Human-readable ticket key, e.g. ``WEB-42``."""
    return f"{project_key}-{ticket_number}"


class TicketWorkflowService(LoggingMixin):
    """Validates and applies ticket mutations."""

    def __init__(
        self,
        store: StorePort,
        gate: AuthorizationGate,
        audit: ActivityAuditPort,
        notifier: NotifierPort,
        cascade: CascadeDeleter,
        locks: ProjectLocks,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self._store = store
        self._gate = gate
        self._audit = audit
        self._notifier = notifier
        self._cascade = cascade
        self._locks = locks
        self._page_size = page_size
        self._init_logger(component="workflow")

    async def create_ticket(
        self,
        actor_id: str | None,
        project_id: str,
        fields: Mapping[str, Any],
    ) -> Document:
        """Create a ticket at the tail of the todo column.

        Args:
            actor_id: Reporter.
            project_id: Owning project.
            fields: title (required), description, type, priority, labels,
                due_date, assignee_id, sprint_id.

        Returns:
            The stored ticket document (including ``ticket_key``).

        Raises:
            ValidationFailedError: Invalid fields, non-member assignee or
                foreign sprint.
        """
        actor_id = self._gate.require_actor(actor_id, projectId=project_id)
        await self._gate.authorize(actor_id, project_id, Permission.CREATE_TICKETS)
        clean = validate_ticket_fields(fields, creating=True)
        project = await self._gate.load_project(project_id)

        reasons: list[str] = []
        assignee_id = clean.get("assignee_id")
        if assignee_id and await self._gate.membership_of(project_id, assignee_id) is None:
            reasons.append("Assignee must be a member of this project")
        sprint_id = clean.get("sprint_id")
        if sprint_id and not await self._sprint_in_project(sprint_id, project_id):
            reasons.append("Sprint does not belong to this project")
        if reasons:
            raise ValidationFailedError(reasons)

        log = self._log_operation("create_ticket", actor_id=actor_id, project_id=project_id)

        # Numbering and tail placement share the ordering section
        async with self._locks.ordering(project_id):
            existing = await drain(
                self._store, TICKETS, {"project_id": project_id}, self._page_size
            )
            number = max((int(doc.get("ticket_number", 0)) for doc in existing), default=0) + 1
            key = ticket_key(project.key, number)
            column = await self._column(project_id, INITIAL_STATUS)
            order = order_for_placement(column, Placement.tail())
            doc = await self._store.create(
                TICKETS,
                uuid4().hex,
                {
                    "project_id": project_id,
                    "ticket_number": number,
                    "ticket_key": key,
                    "title": clean["title"],
                    "description": clean.get("description", ""),
                    "type": clean.get("type", TicketType.TASK.value),
                    "priority": clean.get("priority", TicketPriority.MEDIUM.value),
                    "status": INITIAL_STATUS.value,
                    "order": order,
                    "reporter_id": actor_id,
                    "assignee_id": assignee_id,
                    "sprint_id": sprint_id,
                    "labels": clean.get("labels", []),
                    "due_date": clean.get("due_date"),
                    "attachments": [],
                },
            )

        await self._audit.append(
            ActivityLogEntry(
                project_id=project_id,
                user_id=actor_id,
                action=ActivityAction.TICKET_CREATED,
                details={"title": clean["title"], "ticket_key": key},
                ticket_id=doc["id"],
            )
        )
        log.info("ticket_created", ticket_id=doc["id"], ticket_key=key)
        return doc

    async def update_fields(
        self,
        actor_id: str | None,
        ticket_id: str,
        fields: Mapping[str, Any],
        expected_version: str | None = None,
    ) -> Document:
        """Update editable ticket fields.

        Args:
            actor_id: Actor performing the edit.
            ticket_id: Ticket to edit.
            fields: Subset of title, description, type, priority, labels,
                due_date, sprint_id.
            expected_version: Last-modified timestamp the caller observed.
                When given, a concurrent edit raises ConflictError instead
                of being overwritten; when omitted, last write wins.

        Returns:
            The updated ticket document.

        Raises:
            ConflictError: If expected_version no longer matches.
            ValidationFailedError: Invalid fields or foreign sprint.
        """
        actor_id = self._gate.require_actor(actor_id, ticketId=ticket_id)
        ticket = await self._load(ticket_id)
        await self._gate.authorize(actor_id, ticket.project_id, Permission.EDIT_TICKETS)
        clean = validate_ticket_fields(fields)

        sprint_id = clean.get("sprint_id")
        if sprint_id and not await self._sprint_in_project(sprint_id, ticket.project_id):
            raise ValidationFailedError(["Sprint does not belong to this project"])

        expected = {"updated_at": expected_version} if expected_version is not None else None
        doc = await self._store.update(TICKETS, ticket_id, clean, expected=expected)

        await self._audit.append(
            ActivityLogEntry(
                project_id=ticket.project_id,
                user_id=actor_id,
                action=ActivityAction.TICKET_UPDATED,
                details=clean,
                ticket_id=ticket_id,
            )
        )
        self._log_operation(
            "update_fields", actor_id=actor_id, ticket_id=ticket_id
        ).info("ticket_updated", fields=sorted(clean))
        return doc

    async def move(
        self,
        actor_id: str | None,
        ticket_id: str,
        new_status: str | TicketStatus,
        placement: Placement,
    ) -> Document:
        """Move a ticket to a column position.

        Status and order are written in one update. A drop onto the
        ticket's own position is a no-op. An activity record is written
        only when the status changes.

        Args:
            actor_id: Actor performing the drag.
            ticket_id: Ticket being moved.
            new_status: Destination column.
            placement: Where in the destination column to land.

        Returns:
            The (possibly unchanged) ticket document.

        Raises:
            ValidationFailedError: Unknown status, or the AFTER target is
                not in the destination column.
        """
        actor_id = self._gate.require_actor(
            actor_id, ticketId=ticket_id, afterId=placement.after_id
        )
        status = _parse_status(new_status)
        ticket = await self._load(ticket_id)
        await self._gate.authorize(actor_id, ticket.project_id, Permission.MOVE_TICKETS)
        log = self._log_operation(
            "move", actor_id=actor_id, ticket_id=ticket_id, project_id=ticket.project_id
        )

        async with self._locks.ordering(ticket.project_id):
            current = Ticket.from_document(await self._store.get(TICKETS, ticket_id))
            same_column = current.status is status
            if (
                same_column
                and placement.kind is PlacementKind.AFTER
                and placement.after_id == ticket_id
            ):
                log.debug("move_noop", reason="self_drop")
                return await self._store.get(TICKETS, ticket_id)

            column = [
                item
                for item in await self._column(ticket.project_id, status)
                if item.id != ticket_id
            ]
            try:
                order = order_for_placement(column, placement)
            except KeyError:
                raise ValidationFailedError(
                    ["Ticket to place after is not in the destination column"]
                ) from None

            if same_column and order == current.order:
                log.debug("move_noop", reason="unchanged_position")
                return await self._store.get(TICKETS, ticket_id)

            doc = await self._store.update(
                TICKETS, ticket_id, {"status": status.value, "order": order}
            )

        if not same_column:
            await self._audit.append(
                ActivityLogEntry(
                    project_id=ticket.project_id,
                    user_id=actor_id,
                    action=ActivityAction.TICKET_MOVED,
                    details={"from": current.status.value, "to": status.value},
                    ticket_id=ticket_id,
                )
            )
            log.info("ticket_moved", from_status=current.status.value, to_status=status.value)
        else:
            log.debug("ticket_reordered", order=order)
        return doc

    async def assign(
        self,
        actor_id: str | None,
        ticket_id: str,
        assignee_id: str | None,
    ) -> Document:
        """Assign (or unassign with None) a ticket.

        Self-assignment needs the same permission as any other assignment.
        The new assignee is notified when it is someone other than the
        actor and differs from the previous assignee.

        Raises:
            ValidationFailedError: Assignee is not a current member.
        """
        actor_id = self._gate.require_actor(
            actor_id, ticketId=ticket_id, assigneeId=assignee_id or None
        )
        ticket = await self._load(ticket_id)
        await self._gate.authorize(actor_id, ticket.project_id, Permission.ASSIGN_TICKETS)
        assignee_id = assignee_id or None

        if assignee_id and await self._gate.membership_of(ticket.project_id, assignee_id) is None:
            raise ValidationFailedError(["Assignee must be a member of this project"])

        doc = await self._store.update(TICKETS, ticket_id, {"assignee_id": assignee_id})
        await self._audit.append(
            ActivityLogEntry(
                project_id=ticket.project_id,
                user_id=actor_id,
                action=ActivityAction.TICKET_ASSIGNED,
                details={"assignee_id": assignee_id},
                ticket_id=ticket_id,
            )
        )
        log = self._log_operation("assign", actor_id=actor_id, ticket_id=ticket_id)
        log.info("ticket_assigned", assignee_id=assignee_id)

        if assignee_id and assignee_id != actor_id and assignee_id != ticket.assignee_id:
            await notify_best_effort(
                self._notifier,
                log,
                [assignee_id],
                NotificationKind.TICKET_ASSIGNED,
                {
                    "project_id": ticket.project_id,
                    "ticket_id": ticket_id,
                    "ticket_title": ticket.title,
                    "actor_id": actor_id,
                },
            )
        return doc

    async def delete(self, actor_id: str | None, ticket_id: str) -> None:
        """Delete a ticket and everything that belongs to it.

        Order: comment tree (post-order), attachment blobs (best-effort),
        the ticket's activity history, the ticket row, then one final
        ``ticket_deleted`` record carrying only the ticket number.
        """
        actor_id = self._gate.require_actor(actor_id, ticketId=ticket_id)
        ticket = await self._load(ticket_id)
        await self._gate.authorize(actor_id, ticket.project_id, Permission.DELETE_TICKETS)
        log = self._log_operation(
            "delete", actor_id=actor_id, ticket_id=ticket_id, project_id=ticket.project_id
        )

        comments = await self._cascade.delete_ticket_comments(ticket_id)
        await self._cascade.delete_blobs(ticket.attachments)
        history = await self._cascade.delete_ticket_history(ticket_id)
        await self._store.delete(TICKETS, ticket_id)

        await self._audit.append(
            ActivityLogEntry(
                project_id=ticket.project_id,
                user_id=actor_id,
                action=ActivityAction.TICKET_DELETED,
                details={"ticket_number": ticket.ticket_number},
            )
        )
        log.info(
            "ticket_deleted",
            comments_deleted=comments,
            blobs=len(ticket.attachments),
            history_deleted=history,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _load(self, ticket_id: str) -> Ticket:
        return Ticket.from_document(await self._store.get(TICKETS, ticket_id))

    async def _column(self, project_id: str, status: TicketStatus) -> list[OrderedItem]:
        docs = await drain(
            self._store,
            TICKETS,
            {"project_id": project_id, "status": status.value},
            self._page_size,
        )
        return [OrderedItem(doc["id"], float(doc.get("order", 0))) for doc in docs]

    async def _sprint_in_project(self, sprint_id: str, project_id: str) -> bool:
        try:
            sprint = await self._store.get(SPRINTS, sprint_id)
        except NotFoundError:
            return False
        return sprint.get("project_id") == project_id


def _parse_status(value: str | TicketStatus) -> TicketStatus:
    if isinstance(value, TicketStatus):
        return value
    try:
        return TicketStatus(value)
    except ValueError:
        raise ValidationFailedError(
            ["Invalid status. Must be one of: " + ", ".join(s.value for s in TicketStatus)]
        ) from None
