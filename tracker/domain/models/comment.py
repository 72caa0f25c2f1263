"""Comment domain model.

Comments form a tree per ticket through parent_id. Only one level of
nesting is rendered, but replies to replies are representable and the
deletion protocol handles arbitrary depth.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

CONTENT_MIN_LENGTH = 1
CONTENT_MAX_LENGTH = 5_000


@dataclass(frozen=True)
class Comment:
    id: str
    ticket_id: str
    author_id: str
    content: str
    parent_id: str | None = None

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Comment:
        return cls(
            id=doc["id"],
            ticket_id=doc["ticket_id"],
            author_id=doc.get("author_id", ""),
            content=doc.get("content", ""),
            parent_id=doc.get("parent_id") or None,
        )
