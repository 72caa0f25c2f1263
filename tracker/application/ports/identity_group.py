"""Identity group port (best-effort collaborator).

Each project mirrors its membership into an external identity group.
Failures are logged by callers and never fail the primary operation.
"""

from __future__ import annotations

from typing import Protocol


class IdentityGroupPort(Protocol):
    async def create_group(self, name: str) -> str:
        """Create a group and return its id."""
        ...

    async def add_member(self, group_id: str, user_id: str, role: str) -> None:
        ...

    async def remove_member(self, group_id: str, user_id: str) -> None:
        ...

    async def delete_group(self, group_id: str) -> None:
        ...
