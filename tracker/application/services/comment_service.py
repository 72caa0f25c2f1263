"""Ticket comments.

Comments form a tree per ticket through parent_id. Deleting a comment
removes its whole reply subtree, children before parents.

Notification fan-out for a new comment: the ticket reporter, the ticket
assignee and (for replies) the parent comment's author, deduplicated and
never the commenter.
"""

from __future__ import annotations

from uuid import uuid4

from tracker.application.ports.activity_audit import ActivityAuditPort
from tracker.application.ports.notifier import NotifierPort
from tracker.application.ports.store import COMMENTS, TICKETS, Document, StorePort
from tracker.application.services.authorization_gate import AuthorizationGate
from tracker.application.services.base import LoggingMixin
from tracker.application.services.cascade_deleter import CascadeDeleter
from tracker.application.services.notifications import notify_best_effort
from tracker.domain.errors.authorization import InsufficientRoleError
from tracker.domain.errors.store import NotFoundError
from tracker.domain.errors.validation import ValidationFailedError
from tracker.domain.models.activity import ActivityAction, ActivityLogEntry
from tracker.domain.models.comment import Comment
from tracker.domain.models.notification import NotificationKind
from tracker.domain.models.role import Permission
from tracker.domain.models.ticket import Ticket
from tracker.domain.primitives.sanitize import sanitize_string
from tracker.domain.services import role_hierarchy
from tracker.domain.services.field_validation import validate_comment_content


class CommentService(LoggingMixin):
    """Adds, edits and deletes ticket comments."""

    def __init__(
        self,
        store: StorePort,
        gate: AuthorizationGate,
        audit: ActivityAuditPort,
        notifier: NotifierPort,
        cascade: CascadeDeleter,
    ) -> None:
        self._store = store
        self._gate = gate
        self._audit = audit
        self._notifier = notifier
        self._cascade = cascade
        self._init_logger(component="comments")

    async def add_comment(
        self,
        actor_id: str | None,
        ticket_id: str,
        content: str,
        parent_id: str | None = None,
    ) -> Document:
        """Add a comment (or a reply when parent_id is given).

        Raises:
            ValidationFailedError: Content out of bounds, or the parent is
                missing or on a different ticket.
        """
        actor_id = self._gate.require_actor(actor_id, ticketId=ticket_id, parentId=parent_id)
        text = validate_comment_content(content)
        ticket = Ticket.from_document(await self._store.get(TICKETS, ticket_id))
        await self._gate.authorize(actor_id, ticket.project_id, Permission.COMMENT)

        parent: Comment | None = None
        if parent_id:
            try:
                parent = Comment.from_document(await self._store.get(COMMENTS, parent_id))
            except NotFoundError:
                raise ValidationFailedError(["Parent comment not found"]) from None
            if parent.ticket_id != ticket_id:
                raise ValidationFailedError(
                    ["Parent comment does not belong to the same ticket"]
                )

        doc = await self._store.create(
            COMMENTS,
            uuid4().hex,
            {
                "ticket_id": ticket_id,
                "project_id": ticket.project_id,
                "author_id": actor_id,
                "content": sanitize_string(text),
                "parent_id": parent_id or None,
            },
        )
        await self._audit.append(
            ActivityLogEntry(
                project_id=ticket.project_id,
                user_id=actor_id,
                action=ActivityAction.COMMENT_ADDED,
                details={"comment_id": doc["id"]},
                ticket_id=ticket_id,
            )
        )
        log = self._log_operation("add_comment", actor_id=actor_id, ticket_id=ticket_id)
        log.info("comment_added", comment_id=doc["id"], reply=parent is not None)

        candidates = [ticket.reporter_id, ticket.assignee_id]
        if parent is not None:
            candidates.append(parent.author_id)
        recipients = [user for user in candidates if user and user != actor_id]
        await notify_best_effort(
            self._notifier,
            log,
            recipients,
            NotificationKind.COMMENT_REPLY if parent is not None else NotificationKind.COMMENT_ADDED,
            {
                "project_id": ticket.project_id,
                "ticket_id": ticket_id,
                "ticket_title": ticket.title,
                "comment_id": doc["id"],
                "actor_id": actor_id,
            },
        )
        return doc

    async def edit_comment(self, actor_id: str | None, comment_id: str, content: str) -> Document:
        """Replace a comment's content. Only its author may edit it.

        Raises:
            InsufficientRoleError: The actor is not the author.
        """
        actor_id = self._gate.require_actor(actor_id, commentId=comment_id)
        text = validate_comment_content(content)
        comment, ticket = await self._load(comment_id)
        await self._gate.require_member(actor_id, ticket.project_id)
        if comment.author_id != actor_id:
            raise InsufficientRoleError(
                "comment authorship",
                project_id=ticket.project_id,
                actor_id=actor_id,
                message="You can only edit your own comments",
            )

        doc = await self._store.update(COMMENTS, comment_id, {"content": sanitize_string(text)})
        self._log_operation("edit_comment", actor_id=actor_id, comment_id=comment_id).info(
            "comment_edited"
        )
        return doc

    async def delete_comment(self, actor_id: str | None, comment_id: str) -> list[str]:
        """Delete a comment and its whole reply subtree.

        Allowed for the author or anyone holding canDeleteTickets.

        Returns:
            Deleted comment ids, children before parents.
        """
        actor_id = self._gate.require_actor(actor_id, commentId=comment_id)
        comment, ticket = await self._load(comment_id)
        membership = await self._gate.require_member(actor_id, ticket.project_id)
        if comment.author_id != actor_id and not role_hierarchy.has_permission(
            membership.role, Permission.DELETE_TICKETS
        ):
            raise InsufficientRoleError(
                Permission.DELETE_TICKETS.value,
                project_id=ticket.project_id,
                actor_id=actor_id,
                message="You do not have permission to delete this comment",
            )

        deleted = await self._cascade.delete_comment_tree(ticket.id, comment_id)
        await self._audit.append(
            ActivityLogEntry(
                project_id=ticket.project_id,
                user_id=actor_id,
                action=ActivityAction.COMMENT_DELETED,
                details={"comment_id": comment_id, "replies_deleted": len(deleted) - 1},
                ticket_id=ticket.id,
            )
        )
        self._log_operation("delete_comment", actor_id=actor_id, comment_id=comment_id).info(
            "comment_deleted", deleted=len(deleted)
        )
        return deleted

    async def _load(self, comment_id: str) -> tuple[Comment, Ticket]:
        comment = Comment.from_document(await self._store.get(COMMENTS, comment_id))
        ticket = Ticket.from_document(await self._store.get(TICKETS, comment.ticket_id))
        return comment, ticket
