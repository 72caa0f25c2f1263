"""Pagination drain helper.

Every cascade step must see the complete result set before acting on
it. A partial scan is a correctness bug, so listings are always drained
through drain() until the store reports no further cursor.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from tracker.application.ports.store import DEFAULT_PAGE_SIZE, Document, StorePort


async def drain(
    store: StorePort,
    collection: str,
    filters: Mapping[str, Any] | None = None,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> list[Document]:
    """Collect every document matching ``filters`` across all pages.

    Args:
        store: Store to query.
        collection: Collection to list.
        filters: Equality filters.
        page_size: Items requested per page.

    Returns:
        All matching documents.
    """
    documents: list[Document] = []
    cursor: str | None = None
    while True:
        page = await store.list(collection, filters, cursor=cursor, limit=page_size)
        documents.extend(page.items)
        if page.next_cursor is None:
            return documents
        cursor = page.next_cursor
