"""Cascading referential-integrity protocol.

Deleting an entity removes every entity whose existence is meaningless
without it. Cascades are not transactional but they are idempotent and
resumable: every step drains its listing completely and skips documents
that an earlier, interrupted run already removed.

Project deletion order (children before parents):
1. Collect every ticket id and its attachment blob references
2. Delete attachment blobs (best-effort)
3. Delete every comment on every collected ticket
4. Delete the tickets
5. Delete all sprints (and the active-sprint slot)
6. Delete all activity log entries
7. Delete all notifications
8. Delete all memberships
9. Release the project key and delete the project row
10. Delete the external identity group (best-effort)

Sprint deletion is orphaning, not destruction: tickets referencing the
sprint have their sprint reference cleared.

A store failure aborts the remaining steps and propagates as
UnavailableError; already-completed steps stay in place.
"""

from __future__ import annotations

from collections.abc import Iterable

from tracker.application.ports.blob_store import BlobStorePort
from tracker.application.ports.identity_group import IdentityGroupPort
from tracker.application.ports.store import (
    ACTIVITY_LOG,
    COMMENTS,
    DEFAULT_PAGE_SIZE,
    NOTIFICATIONS,
    PROJECT_KEYS,
    PROJECT_MEMBERS,
    PROJECTS,
    SPRINT_SLOTS,
    SPRINTS,
    TICKETS,
    StorePort,
)
from tracker.application.services.base import LoggingMixin
from tracker.application.services.pagination import drain
from tracker.domain.errors.concurrent_modification import ConflictError
from tracker.domain.errors.store import NotFoundError
from tracker.domain.models.comment import Comment
from tracker.domain.services.comment_tree import (
    children_index,
    forest_post_order,
    post_order,
)


class CascadeDeleter(LoggingMixin):
    """Runs every delete cascade and orphaning step in the system."""

    def __init__(
        self,
        store: StorePort,
        blob_store: BlobStorePort,
        identity_group: IdentityGroupPort,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self._store = store
        self._blob_store = blob_store
        self._identity_group = identity_group
        self._page_size = page_size
        self._init_logger(component="cascade")

    # ------------------------------------------------------------------
    # Comment trees
    # ------------------------------------------------------------------

    async def delete_comment_tree(self, ticket_id: str, root_comment_id: str) -> list[str]:
        """Delete a comment and every descendant, children before parents.

        Args:
            ticket_id: Ticket the comment tree lives on.
            root_comment_id: Comment to delete.

        Returns:
            Deleted comment ids in deletion order (root last).

        Raises:
            InvariantViolatedError: If the reply chain contains a cycle.
        """
        comments = await self._ticket_comments(ticket_id)
        order = post_order(root_comment_id, children_index(comments))
        for comment_id in order:
            await self._delete_if_present(COMMENTS, comment_id)

        self._log_operation(
            "delete_comment_tree", ticket_id=ticket_id, comment_id=root_comment_id
        ).info("comment_tree_deleted", deleted=len(order))
        return order

    async def delete_ticket_comments(self, ticket_id: str) -> int:
        """Delete every comment on a ticket in post-order.

        Returns:
            Number of comments deleted.
        """
        order = forest_post_order(await self._ticket_comments(ticket_id))
        for comment_id in order:
            await self._delete_if_present(COMMENTS, comment_id)
        return len(order)

    # ------------------------------------------------------------------
    # Tickets
    # ------------------------------------------------------------------

    async def delete_blobs(self, blob_ids: Iterable[str]) -> int:
        """Delete attachment blobs, best-effort.

        Missing blobs count as already deleted. Any other failure is
        logged and skipped.

        Returns:
            Number of blobs that no longer exist.
        """
        removed = 0
        for blob_id in blob_ids:
            try:
                await self._blob_store.delete_blob(blob_id)
            except NotFoundError:
                pass
            except Exception as err:
                self._log_collaborator_failure(
                    "delete_blobs", "blob_delete_failed", err, blob_id=blob_id
                )
                continue
            removed += 1
        return removed

    async def delete_ticket_history(self, ticket_id: str) -> int:
        """Delete leftover activity records referencing a ticket."""
        entries = await drain(
            self._store, ACTIVITY_LOG, {"ticket_id": ticket_id}, self._page_size
        )
        for entry in entries:
            await self._delete_if_present(ACTIVITY_LOG, entry["id"])
        return len(entries)

    # ------------------------------------------------------------------
    # Orphaning
    # ------------------------------------------------------------------

    async def orphan_sprint_tickets(self, sprint_id: str) -> int:
        """Clear the sprint reference of every ticket planned into a sprint.

        Returns:
            Number of tickets decoupled.
        """
        tickets = await drain(self._store, TICKETS, {"sprint_id": sprint_id}, self._page_size)
        for ticket in tickets:
            await self._update_if_present(TICKETS, ticket["id"], {"sprint_id": None})

        self._log_operation("orphan_sprint_tickets", sprint_id=sprint_id).info(
            "sprint_tickets_orphaned", count=len(tickets)
        )
        return len(tickets)

    async def unassign_member_tickets(self, project_id: str, user_id: str) -> int:
        """Clear a departing member's ticket assignments in one project.

        Returns:
            Number of tickets unassigned.
        """
        tickets = await drain(
            self._store,
            TICKETS,
            {"project_id": project_id, "assignee_id": user_id},
            self._page_size,
        )
        for ticket in tickets:
            await self._update_if_present(TICKETS, ticket["id"], {"assignee_id": None})

        if tickets:
            self._log_operation(
                "unassign_member_tickets", project_id=project_id, user_id=user_id
            ).info("member_tickets_unassigned", count=len(tickets))
        return len(tickets)

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    async def delete_project(
        self,
        project_id: str,
        group_id: str | None,
        key: str | None = None,
    ) -> None:
        """Run the full project cascade.

        Safe to re-run against a partially deleted project: every step
        skips documents that are already gone.

        Args:
            project_id: Project to destroy.
            group_id: External identity group to remove afterwards, if any.
            key: Project key whose reservation is released with the row.

        Raises:
            UnavailableError: If the store fails; completed steps remain.
        """
        log = self._log_operation("delete_project", project_id=project_id)
        log.info("project_cascade_started")
        by_project = {"project_id": project_id}

        tickets = await drain(self._store, TICKETS, by_project, self._page_size)
        blob_ids = [blob for ticket in tickets for blob in ticket.get("attachments") or ()]
        log.info("cascade_step_completed", step="collect_tickets", count=len(tickets))

        await self.delete_blobs(blob_ids)
        log.info("cascade_step_completed", step="blobs", count=len(blob_ids))

        comment_count = 0
        for ticket in tickets:
            comment_count += await self.delete_ticket_comments(ticket["id"])
        log.info("cascade_step_completed", step="comments", count=comment_count)

        for ticket in tickets:
            await self._delete_if_present(TICKETS, ticket["id"])
        log.info("cascade_step_completed", step="tickets", count=len(tickets))

        for collection in (SPRINTS, ACTIVITY_LOG, NOTIFICATIONS, PROJECT_MEMBERS):
            count = await self._delete_all(collection, by_project)
            if collection == SPRINTS:
                await self._delete_if_present(SPRINT_SLOTS, project_id)
            log.info("cascade_step_completed", step=collection, count=count)

        if key:
            try:
                await self._store.delete(PROJECT_KEYS, key, expected={"project_id": project_id})
            except (NotFoundError, ConflictError):
                pass
        await self._delete_if_present(PROJECTS, project_id)
        log.info("cascade_step_completed", step="project")

        if group_id:
            try:
                await self._identity_group.delete_group(group_id)
            except Exception as err:
                self._log_collaborator_failure(
                    "delete_project",
                    "identity_group_delete_failed",
                    err,
                    project_id=project_id,
                    group_id=group_id,
                )

        log.info("project_cascade_completed")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _ticket_comments(self, ticket_id: str) -> list[Comment]:
        docs = await drain(self._store, COMMENTS, {"ticket_id": ticket_id}, self._page_size)
        return [Comment.from_document(doc) for doc in docs]

    async def _delete_all(self, collection: str, filters: dict[str, str]) -> int:
        documents = await drain(self._store, collection, filters, self._page_size)
        for doc in documents:
            await self._delete_if_present(collection, doc["id"])
        return len(documents)

    async def _delete_if_present(self, collection: str, document_id: str) -> bool:
        try:
            await self._store.delete(collection, document_id)
        except NotFoundError:
            return False
        return True

    async def _update_if_present(self, collection: str, document_id: str, fields: dict) -> bool:
        try:
            await self._store.update(collection, document_id, fields)
        except NotFoundError:
            return False
        return True
