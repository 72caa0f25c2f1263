"""Notifier port.

The core calls notify() on ticket re-assignment to someone other than
the actor, on new comments (reporter, assignee and parent author,
deduplicated) and on member invitation. The core never blocks on
delivery success: failures are logged and swallowed by callers.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from tracker.domain.models.notification import NotificationKind


class NotifierPort(Protocol):
    async def notify(
        self,
        user_id: str,
        kind: NotificationKind,
        context: Mapping[str, Any],
    ) -> None:
        """Deliver a notification to one user.

        Args:
            user_id: Recipient.
            kind: What happened.
            context: Must include ``project_id``; may include ticket and
                comment details used to render the message.
        """
        ...
