"""Store-backed notifier.

Persists notifications in the notifications collection, where the
client picks them up. Project deletion removes them with the project.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from uuid import uuid4

from tracker.application.ports.store import NOTIFICATIONS, StorePort
from tracker.domain.models.notification import NotificationKind
from tracker.domain.primitives.sanitize import sanitize_string

_TITLES: dict[NotificationKind, str] = {
    NotificationKind.TICKET_ASSIGNED: "Ticket Assigned",
    NotificationKind.COMMENT_ADDED: "New Comment",
    NotificationKind.COMMENT_REPLY: "New Reply",
    NotificationKind.MEMBER_INVITED: "Added to Project",
}


def render_message(kind: NotificationKind, context: Mapping[str, Any]) -> str:
    """Human-readable message for a notification."""
    title = context.get("ticket_title", "")
    if kind is NotificationKind.TICKET_ASSIGNED:
        return f"You were assigned to ticket: {title}"
    if kind is NotificationKind.COMMENT_REPLY:
        return f"New reply on ticket: {title}"
    if kind is NotificationKind.COMMENT_ADDED:
        return f"New comment on ticket: {title}"
    return f"You were added to project {context.get('project_name', '')} as {context.get('role', '')}"


def action_url(context: Mapping[str, Any]) -> str:
    project_id = context["project_id"]
    ticket_id = context.get("ticket_id")
    if ticket_id:
        return f"/projects/{project_id}/tickets/{ticket_id}"
    return f"/projects/{project_id}"


class StoreNotifier:
    """NotifierPort implementation writing notification documents."""

    def __init__(self, store: StorePort) -> None:
        self._store = store

    async def notify(
        self,
        user_id: str,
        kind: NotificationKind,
        context: Mapping[str, Any],
    ) -> None:
        await self._store.create(
            NOTIFICATIONS,
            uuid4().hex,
            {
                "user_id": user_id,
                "project_id": context["project_id"],
                "type": kind.value,
                "title": _TITLES[kind],
                "message": sanitize_string(render_message(kind, context)),
                "read": False,
                "action_url": action_url(context),
            },
        )
