"""In-memory stub implementations of every port (testing/development)."""

from tracker.infrastructure.stubs.blob_store_stub import BlobStoreStub
from tracker.infrastructure.stubs.identity_group_stub import IdentityGroupStub
from tracker.infrastructure.stubs.in_memory_store import InMemoryStore
from tracker.infrastructure.stubs.notifier_stub import NotifierStub, SentNotification

__all__: list[str] = [
    "BlobStoreStub",
    "IdentityGroupStub",
    "InMemoryStore",
    "NotifierStub",
    "SentNotification",
]
