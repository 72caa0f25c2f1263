"""Blob store stub: in-memory attachment blobs (for testing)."""

from __future__ import annotations

from tracker.domain.errors.store import NotFoundError, UnavailableError


class BlobStoreStub:
    """In-memory implementation of BlobStorePort."""

    def __init__(self, blob_ids: set[str] | None = None) -> None:
        self.blobs: set[str] = set(blob_ids or ())
        self.deleted: list[str] = []
        self.fail_ids: set[str] = set()

    def add_blob(self, blob_id: str) -> None:
        self.blobs.add(blob_id)

    async def delete_blob(self, blob_id: str) -> None:
        if blob_id in self.fail_ids:
            raise UnavailableError("delete_blob", f"blob stub configured to fail for {blob_id}")
        if blob_id not in self.blobs:
            raise NotFoundError("blobs", blob_id)
        self.blobs.discard(blob_id)
        self.deleted.append(blob_id)
