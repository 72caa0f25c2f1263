"""Activity audit port.

Append-only, write-only audit trail. One record per state-changing
operation; details carry only the changed fields, never the full entity.
"""

from __future__ import annotations

from typing import Protocol

from tracker.domain.models.activity import ActivityLogEntry


class ActivityAuditPort(Protocol):
    async def append(self, entry: ActivityLogEntry) -> None:
        """Append one immutable record.

        Failures propagate: an audit write is part of the mutation.
        """
        ...
