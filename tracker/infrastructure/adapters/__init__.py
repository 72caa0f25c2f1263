"""Adapters implementing ports on top of other ports."""

from tracker.infrastructure.adapters.store_activity_audit import StoreActivityAudit
from tracker.infrastructure.adapters.store_notifier import StoreNotifier
from tracker.infrastructure.adapters.timeout_store import TimeoutStore

__all__: list[str] = ["StoreActivityAudit", "StoreNotifier", "TimeoutStore"]
