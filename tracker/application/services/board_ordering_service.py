"""Board ordering maintenance.

Repeated midpoint insertion consumes decimal precision. Renormalization
reads a snapshot of every column on a project's board, reassigns
consecutive integer keys in current sort order and writes back only the
tickets whose key changed. It holds the project's single-writer section
so no move computes a midpoint against a key that is being rewritten.
"""

from __future__ import annotations

from dataclasses import dataclass

from tracker.application.ports.store import DEFAULT_PAGE_SIZE, TICKETS, StorePort
from tracker.application.services.authorization_gate import AuthorizationGate
from tracker.application.services.base import LoggingMixin
from tracker.application.services.pagination import drain
from tracker.application.services.project_locks import ProjectLocks
from tracker.domain.models.role import Permission
from tracker.domain.models.ticket import BOARD_COLUMNS
from tracker.domain.services.ordering import (
    DEFAULT_PRECISION_DIGITS,
    OrderedItem,
    needs_renormalization,
    renormalize,
)


@dataclass(frozen=True)
class RenormalizationResult:
    """Outcome of a renormalization request.

    Attributes:
        renormalized: Whether the board was rewritten.
        tickets_rewritten: Number of tickets whose order changed.
    """

    renormalized: bool
    tickets_rewritten: int = 0


class BoardOrderingService(LoggingMixin):
    """Renormalizes a project's board when precision is exhausted."""

    def __init__(
        self,
        store: StorePort,
        gate: AuthorizationGate,
        locks: ProjectLocks,
        precision_digits: int = DEFAULT_PRECISION_DIGITS,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self._store = store
        self._gate = gate
        self._locks = locks
        self._precision_digits = precision_digits
        self._page_size = page_size
        self._init_logger(component="ordering")

    async def load_board(self, project_id: str) -> dict[str, list[OrderedItem]]:
        """Snapshot every column of a project's board."""
        board: dict[str, list[OrderedItem]] = {column.value: [] for column in BOARD_COLUMNS}
        for doc in await drain(self._store, TICKETS, {"project_id": project_id}, self._page_size):
            board.setdefault(doc["status"], []).append(
                OrderedItem(doc["id"], float(doc.get("order", 0)))
            )
        return board

    async def renormalize_board(
        self,
        actor_id: str | None,
        project_id: str,
        force: bool = False,
    ) -> RenormalizationResult:
        """Rewrite the board to consecutive integer keys if needed.

        Args:
            actor_id: Actor triggering maintenance (needs canMoveTickets).
            project_id: Project whose board is inspected.
            force: Rewrite even when no key exceeds the precision threshold.

        Returns:
            What was done.
        """
        actor_id = self._gate.require_actor(actor_id, projectId=project_id)
        await self._gate.authorize(actor_id, project_id, Permission.MOVE_TICKETS)
        log = self._log_operation("renormalize_board", actor_id=actor_id, project_id=project_id)

        async with self._locks.ordering(project_id):
            board = await self.load_board(project_id)
            if not force and not needs_renormalization(board, self._precision_digits):
                log.debug("renormalization_skipped")
                return RenormalizationResult(renormalized=False)

            changes = renormalize(board)
            for ticket_id, order in changes.items():
                await self._store.update(TICKETS, ticket_id, {"order": order})

        log.info("board_renormalized", tickets_rewritten=len(changes), forced=force)
        return RenormalizationResult(renormalized=True, tickets_rewritten=len(changes))
