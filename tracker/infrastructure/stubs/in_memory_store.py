"""In-memory document store stub.

In-memory implementation of the StorePort for testing and development.
Production systems would back the port with a real document database.

Pagination uses keyset cursors over document ids, so deleting documents
that were already returned never shifts later pages. Conditional writes
hold an asyncio lock so a compare-and-set is atomic with respect to other
coroutines sharing the store.
"""

from __future__ import annotations

import asyncio
import copy
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from typing import Any

from tracker.application.ports.store import DEFAULT_PAGE_SIZE, Document, Page
from tracker.domain.errors.concurrent_modification import ConflictError
from tracker.domain.errors.store import NotFoundError, UnavailableError


class InMemoryStore:
    """In-memory implementation of StorePort.

    Documents are deep-copied on the way in and out so callers can never
    mutate stored state by accident.

    Attributes:
        page_size_cap: Upper bound on page size, used by tests to force
            multi-page listings.
    """

    def __init__(self, page_size_cap: int | None = None) -> None:
        self._collections: dict[str, dict[str, Document]] = {}
        self._lock = asyncio.Lock()
        self._last_stamp = datetime.fromtimestamp(0, tz=timezone.utc)
        self._failures: dict[tuple[str, str], list[Exception]] = {}
        self.page_size_cap = page_size_cap
        self.calls: list[tuple[str, str, str | None]] = []

    # ------------------------------------------------------------------
    # StorePort
    # ------------------------------------------------------------------

    async def get(self, collection: str, document_id: str) -> Document:
        self._record("get", collection, document_id)
        doc = self._collection(collection).get(document_id)
        if doc is None:
            raise NotFoundError(collection, document_id)
        return copy.deepcopy(doc)

    async def list(
        self,
        collection: str,
        filters: Mapping[str, Any] | None = None,
        cursor: str | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> Page:
        self._record("list", collection, None)
        if self.page_size_cap is not None:
            limit = min(limit, self.page_size_cap)
        if limit < 1:
            raise ValueError(f"limit must be positive, got {limit}")

        matching = sorted(
            (
                doc
                for doc_id, doc in self._collection(collection).items()
                if (cursor is None or doc_id > cursor)
                and _matches(doc, filters or {})
            ),
            key=lambda doc: doc["id"],
        )
        items = [copy.deepcopy(doc) for doc in matching[:limit]]
        next_cursor = items[-1]["id"] if len(matching) > limit else None
        return Page(items=items, next_cursor=next_cursor)

    async def create(
        self, collection: str, document_id: str, fields: Mapping[str, Any]
    ) -> Document:
        self._record("create", collection, document_id)
        async with self._lock:
            docs = self._collection(collection)
            if document_id in docs:
                raise ConflictError(
                    collection,
                    document_id,
                    actual=docs[document_id],
                    message=f"{collection}/{document_id} already exists",
                )
            stamp = self._next_stamp()
            doc = copy.deepcopy(dict(fields))
            doc.update(id=document_id, created_at=stamp, updated_at=stamp)
            docs[document_id] = doc
            return copy.deepcopy(doc)

    async def update(
        self,
        collection: str,
        document_id: str,
        fields: Mapping[str, Any],
        expected: Mapping[str, Any] | None = None,
    ) -> Document:
        self._record("update", collection, document_id)
        async with self._lock:
            doc = self._require(collection, document_id)
            self._check_expected(collection, document_id, doc, expected)
            doc.update(copy.deepcopy(dict(fields)))
            doc["id"] = document_id
            doc["updated_at"] = self._next_stamp()
            return copy.deepcopy(doc)

    async def delete(
        self,
        collection: str,
        document_id: str,
        expected: Mapping[str, Any] | None = None,
    ) -> None:
        self._record("delete", collection, document_id)
        async with self._lock:
            doc = self._require(collection, document_id)
            self._check_expected(collection, document_id, doc, expected)
            del self._collection(collection)[document_id]

    # ------------------------------------------------------------------
    # Test helpers
    # ------------------------------------------------------------------

    def fail_next(self, operation: str, collection: str, error: Exception | None = None) -> None:
        """Make the next ``operation`` on ``collection`` raise (for testing).

        Args:
            operation: One of get, list, create, update, delete.
            collection: Collection the failure applies to.
            error: Exception to raise; UnavailableError by default.
        """
        self._failures.setdefault((operation, collection), []).append(
            error or UnavailableError(f"{operation} {collection}", "injected failure")
        )

    def count(self, collection: str, **filters: Any) -> int:
        """Count documents matching equality filters (for testing)."""
        return sum(1 for doc in self._collection(collection).values() if _matches(doc, filters))

    def documents(self, collection: str) -> list[Document]:
        """Snapshot of every document in a collection (for testing)."""
        return [copy.deepcopy(doc) for doc in self._collection(collection).values()]

    def calls_for(self, operation: str, collection: str) -> list[str | None]:
        """Document ids touched by an operation, in call order (for testing)."""
        return [
            doc_id
            for op, coll, doc_id in self.calls
            if op == operation and coll == collection
        ]

    def clear(self) -> None:
        """Drop every collection and recorded call (for testing)."""
        self._collections.clear()
        self._failures.clear()
        self.calls.clear()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _collection(self, collection: str) -> dict[str, Document]:
        return self._collections.setdefault(collection, {})

    def _require(self, collection: str, document_id: str) -> Document:
        doc = self._collection(collection).get(document_id)
        if doc is None:
            raise NotFoundError(collection, document_id)
        return doc

    def _record(self, operation: str, collection: str, document_id: str | None) -> None:
        queued = self._failures.get((operation, collection))
        if queued:
            raise queued.pop(0)
        self.calls.append((operation, collection, document_id))

    def _next_stamp(self) -> str:
        """Strictly increasing UTC timestamp, so version tokens never repeat."""
        now = datetime.now(timezone.utc)
        if now <= self._last_stamp:
            now = self._last_stamp + timedelta(microseconds=1)
        self._last_stamp = now
        return now.isoformat()

    @staticmethod
    def _check_expected(
        collection: str,
        document_id: str,
        doc: Document,
        expected: Mapping[str, Any] | None,
    ) -> None:
        if not expected:
            return
        actual = {key: doc.get(key) for key in expected}
        if actual != dict(expected):
            raise ConflictError(collection, document_id, expected=expected, actual=actual)


def _matches(doc: Document, filters: Mapping[str, Any]) -> bool:
    return all(doc.get(key) == value for key, value in filters.items())
