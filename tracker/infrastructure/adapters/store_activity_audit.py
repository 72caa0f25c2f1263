"""Store-backed activity audit writer.

Appends ActivityLogEntry records to the activity_log collection with
details serialized as sanitized JSON.
"""

from __future__ import annotations

from uuid import uuid4

from tracker.application.ports.store import ACTIVITY_LOG, StorePort
from tracker.domain.models.activity import ActivityLogEntry
from tracker.domain.primitives.sanitize import sanitized_json


class StoreActivityAudit:
    """ActivityAuditPort implementation writing to the document store."""

    def __init__(self, store: StorePort) -> None:
        self._store = store

    async def append(self, entry: ActivityLogEntry) -> None:
        await self._store.create(
            ACTIVITY_LOG,
            uuid4().hex,
            {
                "project_id": entry.project_id,
                "ticket_id": entry.ticket_id,
                "sprint_id": entry.sprint_id,
                "user_id": entry.user_id,
                "action": entry.action.value,
                "details": sanitized_json(entry.details),
            },
        )
