"""Notifier stub: records notifications in memory (for testing)."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from tracker.domain.errors.store import UnavailableError
from tracker.domain.models.notification import NotificationKind


@dataclass(frozen=True)
class SentNotification:
    user_id: str
    kind: NotificationKind
    context: dict[str, Any] = field(default_factory=dict)


class NotifierStub:
    """In-memory implementation of NotifierPort."""

    def __init__(self) -> None:
        self.sent: list[SentNotification] = []
        self._should_fail = False

    async def notify(
        self,
        user_id: str,
        kind: NotificationKind,
        context: Mapping[str, Any],
    ) -> None:
        if self._should_fail:
            raise UnavailableError("notify", "notifier stub configured to fail")
        self.sent.append(SentNotification(user_id, kind, dict(context)))

    def recipients(self, kind: NotificationKind | None = None) -> list[str]:
        """Recipients in send order, optionally filtered by kind."""
        return [n.user_id for n in self.sent if kind is None or n.kind is kind]

    def set_should_fail(self, should_fail: bool = True) -> None:
        self._should_fail = should_fail

    def clear(self) -> None:
        self.sent.clear()
