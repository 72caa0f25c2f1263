"""Store port interface.

The core treats persistence as an abstract document store with equality
queries, cursor pagination and conditional writes. No component owns
persistence; every service receives a StorePort.

Conditional writes:
- create() is create-if-absent and raises ConflictError on an existing id.
- update()/delete() accept ``expected`` field values and act as a
  compare-and-set: on mismatch nothing is written and ConflictError is
  raised.

Version token:
- The store stamps a strictly increasing ``updated_at`` on every create
  and update. It is the optimistic concurrency token for tickets.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

Document = dict[str, Any]

# Collection names
PROJECTS = "projects"
PROJECT_KEYS = "project_keys"
PROJECT_MEMBERS = "project_members"
TICKETS = "tickets"
COMMENTS = "comments"
SPRINTS = "sprints"
SPRINT_SLOTS = "sprint_slots"
ACTIVITY_LOG = "activity_log"
NOTIFICATIONS = "notifications"

DEFAULT_PAGE_SIZE = 500


@dataclass(frozen=True)
class Page:
    """One page of a listing.

    Attributes:
        items: Documents on this page.
        next_cursor: Cursor for the next page, None when exhausted.
    """

    items: list[Document] = field(default_factory=list)
    next_cursor: str | None = None


class StorePort(Protocol):
    """Port for document persistence.

    Implementations:
    - InMemoryStore: In-memory implementation for testing/dev
    - TimeoutStore: Wraps any store with caller-imposed timeouts
    """

    async def get(self, collection: str, document_id: str) -> Document:
        """Fetch one document.

        Raises:
            NotFoundError: If the document does not exist.
        """
        ...

    async def list(
        self,
        collection: str,
        filters: Mapping[str, Any] | None = None,
        cursor: str | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> Page:
        """List documents whose fields equal every filter value.

        Args:
            collection: Collection to query.
            filters: Field -> required value (equality only).
            cursor: Cursor returned by the previous page, None to start.
            limit: Maximum items per page.

        Returns:
            A Page; callers must loop until next_cursor is None.
        """
        ...

    async def create(
        self, collection: str, document_id: str, fields: Mapping[str, Any]
    ) -> Document:
        """Create a document if the id is free.

        Raises:
            ConflictError: If a document with this id already exists.
        """
        ...

    async def update(
        self,
        collection: str,
        document_id: str,
        fields: Mapping[str, Any],
        expected: Mapping[str, Any] | None = None,
    ) -> Document:
        """Update fields of a document, optionally as a compare-and-set.

        Raises:
            NotFoundError: If the document does not exist.
            ConflictError: If ``expected`` does not match stored values.
        """
        ...

    async def delete(
        self,
        collection: str,
        document_id: str,
        expected: Mapping[str, Any] | None = None,
    ) -> None:
        """Delete a document, optionally as a compare-and-set.

        Raises:
            NotFoundError: If the document does not exist.
            ConflictError: If ``expected`` does not match stored values.
        """
        ...
