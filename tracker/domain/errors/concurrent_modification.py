"""Conflict error for compare-and-set writes.

Raised when the optimistic concurrency token supplied by a caller no
longer matches the stored version, or when a create-if-absent or CAS
write finds the document in a different state than expected.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from tracker.domain.exceptions import TrackerError


class ConflictError(TrackerError):
    """Raised when a conditional write loses a race (HTTP 409).

    This is a recoverable error - the caller should re-read the
    document and decide whether to retry or abort.

    Attributes:
        collection: Collection of the document being written.
        document_id: Identifier of the document.
        expected: Field values the caller expected.
        actual: Field values found in the store (empty if absent).
    """

    code = "Conflict"

    def __init__(
        self,
        collection: str,
        document_id: str,
        expected: Mapping[str, Any] | None = None,
        actual: Mapping[str, Any] | None = None,
        message: str | None = None,
    ) -> None:
        self.collection = collection
        self.document_id = document_id
        self.expected = dict(expected or {})
        self.actual = dict(actual or {})
        super().__init__(
            message
            or (
                f"Concurrent modification detected for {collection}/{document_id}. "
                f"Expected {self.expected}, found {self.actual}"
            )
        )
