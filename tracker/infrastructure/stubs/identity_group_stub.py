"""Identity group stub: in-memory groups (for testing)."""

from __future__ import annotations

from uuid import uuid4

from tracker.domain.errors.store import NotFoundError, UnavailableError


class IdentityGroupStub:
    """In-memory implementation of IdentityGroupPort."""

    def __init__(self) -> None:
        self.groups: dict[str, dict[str, str]] = {}
        self._should_fail = False

    async def create_group(self, name: str) -> str:
        self._maybe_fail("create_group")
        group_id = uuid4().hex
        self.groups[group_id] = {}
        return group_id

    async def add_member(self, group_id: str, user_id: str, role: str) -> None:
        self._maybe_fail("add_member")
        self._group(group_id)[user_id] = role

    async def remove_member(self, group_id: str, user_id: str) -> None:
        self._maybe_fail("remove_member")
        self._group(group_id).pop(user_id, None)

    async def delete_group(self, group_id: str) -> None:
        self._maybe_fail("delete_group")
        self._group(group_id)
        del self.groups[group_id]

    def set_should_fail(self, should_fail: bool = True) -> None:
        """Make every call raise UnavailableError (for testing)."""
        self._should_fail = should_fail

    def _group(self, group_id: str) -> dict[str, str]:
        group = self.groups.get(group_id)
        if group is None:
            raise NotFoundError("identity_groups", group_id)
        return group

    def _maybe_fail(self, operation: str) -> None:
        if self._should_fail:
            raise UnavailableError(operation, "identity group stub configured to fail")
