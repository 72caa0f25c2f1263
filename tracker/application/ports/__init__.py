"""Ports (hexagonal interfaces) for Tracker Core collaborators."""

from tracker.application.ports.activity_audit import ActivityAuditPort
from tracker.application.ports.blob_store import BlobStorePort
from tracker.application.ports.identity_group import IdentityGroupPort
from tracker.application.ports.notifier import NotifierPort
from tracker.application.ports.store import Document, Page, StorePort

__all__: list[str] = [
    "ActivityAuditPort",
    "BlobStorePort",
    "Document",
    "IdentityGroupPort",
    "NotifierPort",
    "Page",
    "StorePort",
]
