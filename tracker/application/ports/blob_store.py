"""Blob store port for ticket attachments (best-effort on deletion)."""

from __future__ import annotations

from typing import Protocol


class BlobStorePort(Protocol):
    async def delete_blob(self, blob_id: str) -> None:
        """Delete an attachment blob.

        Raises:
            NotFoundError: If the blob does not exist.
        """
        ...
