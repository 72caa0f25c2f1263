"""Per-project single-writer sections for the ordering space.

Board renormalization rewrites every order key on a board. A move that
computed its midpoint against a key being rewritten underneath it would
land in the wrong place, so moves and renormalization of the same
project are serialized through one asyncio.Lock per project.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class ProjectLocks:
    """Registry of one asyncio.Lock per project id."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    def lock_for(self, project_id: str) -> asyncio.Lock:
        lock = self._locks.get(project_id)
        if lock is None:
            lock = self._locks[project_id] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def ordering(self, project_id: str) -> AsyncIterator[None]:
        """Hold the project's ordering space exclusively."""
        async with self.lock_for(project_id):
            yield

    def discard(self, project_id: str) -> None:
        """Forget the lock of a deleted project."""
        lock = self._locks.get(project_id)
        if lock is not None and not lock.locked():
            del self._locks[project_id]
