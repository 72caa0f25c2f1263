"""Store adapter imposing caller timeouts.

Wraps any StorePort so that no store call blocks indefinitely. A timeout
or transport failure surfaces as a retryable UnavailableError; it is
never swallowed.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Mapping
from typing import Any, TypeVar

from tracker.application.ports.store import DEFAULT_PAGE_SIZE, Document, Page, StorePort
from tracker.domain.errors.store import UnavailableError
from tracker.infrastructure.observability.logging import get_component_logger

T = TypeVar("T")


class TimeoutStore:
    """StorePort decorator adding a per-call timeout.

    Attributes:
        timeout_seconds: Maximum seconds a single store call may take.
    """

    def __init__(self, inner: StorePort, timeout_seconds: float) -> None:
        if timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {timeout_seconds}")
        self._inner = inner
        self.timeout_seconds = timeout_seconds

    async def get(self, collection: str, document_id: str) -> Document:
        return await self._call(f"get {collection}", self._inner.get(collection, document_id))

    async def list(
        self,
        collection: str,
        filters: Mapping[str, Any] | None = None,
        cursor: str | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> Page:
        return await self._call(
            f"list {collection}",
            self._inner.list(collection, filters, cursor, limit),
        )

    async def create(
        self, collection: str, document_id: str, fields: Mapping[str, Any]
    ) -> Document:
        return await self._call(
            f"create {collection}", self._inner.create(collection, document_id, fields)
        )

    async def update(
        self,
        collection: str,
        document_id: str,
        fields: Mapping[str, Any],
        expected: Mapping[str, Any] | None = None,
    ) -> Document:
        return await self._call(
            f"update {collection}",
            self._inner.update(collection, document_id, fields, expected),
        )

    async def delete(
        self,
        collection: str,
        document_id: str,
        expected: Mapping[str, Any] | None = None,
    ) -> None:
        await self._call(
            f"delete {collection}",
            self._inner.delete(collection, document_id, expected),
        )

    async def _call(self, operation: str, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            get_component_logger("store", service="TimeoutStore").warning(
                "store_call_timed_out",
                operation=operation,
                timeout_seconds=self.timeout_seconds,
            )
            raise UnavailableError(operation, f"timed out after {self.timeout_seconds}s") from e
        except (ConnectionError, OSError) as e:
            get_component_logger("store", service="TimeoutStore").warning(
                "store_call_failed",
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise UnavailableError(operation, str(e)) from e
