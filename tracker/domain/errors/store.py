"""Store-facing errors: missing documents and unavailable collaborators."""

from __future__ import annotations

from tracker.domain.exceptions import TrackerError


class NotFoundError(TrackerError):
    """Raised when a document does not exist in the store.

    Attributes:
        collection: Collection that was queried.
        document_id: Identifier that was not found.
    """

    code = "NotFound"

    def __init__(self, collection: str, document_id: str) -> None:
        self.collection = collection
        self.document_id = document_id
        super().__init__(f"{collection}/{document_id} not found")


class UnavailableError(TrackerError):
    """Raised when a collaborator times out or fails.

    This is the only retryable error in the taxonomy. Callers may
    retry the whole operation; cascades resume where they stopped.

    Attributes:
        operation: The collaborator call that failed.
        retryable: Always True.
    """

    code = "Unavailable"
    retryable = True

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        message = f"Collaborator unavailable during {operation}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
