"""Service wiring.

Builds every application service over one set of port implementations.
The default wiring uses the in-memory stubs behind a TimeoutStore; a
deployment swaps in real adapters by passing them to build_services().

Tests replace the singleton with app.dependency_overrides[get_services].
"""

from __future__ import annotations

from dataclasses import dataclass

from tracker.application.ports.blob_store import BlobStorePort
from tracker.application.ports.identity_group import IdentityGroupPort
from tracker.application.ports.notifier import NotifierPort
from tracker.application.ports.store import StorePort
from tracker.application.services.authorization_gate import AuthorizationGate
from tracker.application.services.board_ordering_service import BoardOrderingService
from tracker.application.services.cascade_deleter import CascadeDeleter
from tracker.application.services.comment_service import CommentService
from tracker.application.services.member_service import MemberService
from tracker.application.services.project_locks import ProjectLocks
from tracker.application.services.project_service import ProjectService
from tracker.application.services.sprint_lifecycle_service import SprintLifecycleService
from tracker.application.services.ticket_workflow_service import TicketWorkflowService
from tracker.config.tracker_config import TrackerConfig
from tracker.infrastructure.adapters.store_activity_audit import StoreActivityAudit
from tracker.infrastructure.adapters.store_notifier import StoreNotifier
from tracker.infrastructure.adapters.timeout_store import TimeoutStore
from tracker.infrastructure.stubs.blob_store_stub import BlobStoreStub
from tracker.infrastructure.stubs.identity_group_stub import IdentityGroupStub
from tracker.infrastructure.stubs.in_memory_store import InMemoryStore


@dataclass(frozen=True)
class TrackerServices:
    """Every application service, sharing one store and one lock registry."""

    store: StorePort
    gate: AuthorizationGate
    projects: ProjectService
    members: MemberService
    tickets: TicketWorkflowService
    board: BoardOrderingService
    comments: CommentService
    sprints: SprintLifecycleService
    cascade: CascadeDeleter


def build_services(
    config: TrackerConfig,
    store: StorePort | None = None,
    identity_group: IdentityGroupPort | None = None,
    blob_store: BlobStorePort | None = None,
    notifier: NotifierPort | None = None,
) -> TrackerServices:
    """Wire the services over the given (or stub) collaborators.

    Args:
        config: Tracker configuration.
        store: Document store; wrapped in a TimeoutStore.
        identity_group: Identity group collaborator.
        blob_store: Attachment blob collaborator.
        notifier: Notification collaborator; defaults to StoreNotifier.

    Returns:
        The wired services.
    """
    store = TimeoutStore(store or InMemoryStore(), config.store_timeout_seconds)
    identity_group = identity_group or IdentityGroupStub()
    blob_store = blob_store or BlobStoreStub()
    notifier = notifier or StoreNotifier(store)
    audit = StoreActivityAudit(store)
    locks = ProjectLocks()

    gate = AuthorizationGate(store)
    cascade = CascadeDeleter(store, blob_store, identity_group, config.page_size)
    return TrackerServices(
        store=store,
        gate=gate,
        projects=ProjectService(store, gate, audit, identity_group, cascade, locks),
        members=MemberService(store, gate, audit, notifier, identity_group, cascade),
        tickets=TicketWorkflowService(
            store, gate, audit, notifier, cascade, locks, config.page_size
        ),
        board=BoardOrderingService(
            store, gate, locks, config.order_precision_digits, config.page_size
        ),
        comments=CommentService(store, gate, audit, notifier, cascade),
        sprints=SprintLifecycleService(store, gate, audit, cascade),
        cascade=cascade,
    )


# Singleton for the process; built lazily from the environment
_services: TrackerServices | None = None


def get_services() -> TrackerServices:
    """Get the process-wide services instance.

    Returns:
        TrackerServices wired from TrackerConfig.from_environment().
    """
    global _services
    if _services is None:
        _services = build_services(TrackerConfig.from_environment())
    return _services


def reset_services() -> None:
    """Drop the singleton (for testing)."""
    global _services
    _services = None
