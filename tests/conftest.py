"""
Pytest configuration and shared fixtures for Tracker Core tests.

Testing Standards:
- All async tests use pytest.mark.asyncio (auto mode enabled in pyproject.toml)
- Services are wired over the in-memory stubs with TEST_TRACKER_CONFIG,
  whose page size of 2 forces every listing through multi-page drains
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/
"""

import pytest

from tests.helpers.project_seeding import SeededProject, seed_project
from tracker.api.dependencies.services import TrackerServices, build_services
from tracker.config.tracker_config import TEST_TRACKER_CONFIG
from tracker.infrastructure.stubs import (
    BlobStoreStub,
    IdentityGroupStub,
    InMemoryStore,
    NotifierStub,
)


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from tracker import __version__

    return __version__


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def notifier() -> NotifierStub:
    return NotifierStub()


@pytest.fixture
def identity_group() -> IdentityGroupStub:
    return IdentityGroupStub()


@pytest.fixture
def blob_store() -> BlobStoreStub:
    return BlobStoreStub()


@pytest.fixture
def services(
    store: InMemoryStore,
    notifier: NotifierStub,
    identity_group: IdentityGroupStub,
    blob_store: BlobStoreStub,
) -> TrackerServices:
    """Every service wired over the stubs above."""
    return build_services(
        TEST_TRACKER_CONFIG,
        store=store,
        identity_group=identity_group,
        blob_store=blob_store,
        notifier=notifier,
    )


@pytest.fixture
async def project(services: TrackerServices, notifier: NotifierStub) -> SeededProject:
    """Seeded project; invitation notifications are cleared afterwards."""
    seeded = await seed_project(services)
    notifier.clear()
    return seeded
