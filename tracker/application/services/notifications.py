"""Best-effort notification dispatch.

The core never blocks on notification delivery: a failing notifier is
logged at warning level and the primary operation still succeeds.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import structlog

from tracker.application.ports.notifier import NotifierPort
from tracker.domain.models.notification import NotificationKind


async def notify_best_effort(
    notifier: NotifierPort,
    log: structlog.BoundLogger,
    recipients: Iterable[str],
    kind: NotificationKind,
    context: Mapping[str, Any],
) -> list[str]:
    """Notify each recipient once, swallowing and logging failures.

    Args:
        notifier: Delivery collaborator.
        log: Operation-scoped logger of the caller.
        recipients: User ids, possibly with duplicates.
        kind: Notification kind.
        context: Rendering context; must include project_id.

    Returns:
        Recipients that were notified successfully.
    """
    delivered: list[str] = []
    for user_id in dict.fromkeys(recipients):
        try:
            await notifier.notify(user_id, kind, context)
        except Exception as err:
            log.warning(
                "notification_failed",
                recipient=user_id,
                kind=kind.value,
                error=str(err),
                error_type=type(err).__name__,
            )
            continue
        delivered.append(user_id)
    return delivered
