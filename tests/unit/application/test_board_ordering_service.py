"""Unit tests for BoardOrderingService (renormalization)."""

import pytest

from tests.helpers import DEVELOPER, VIEWER, SeededProject
from tracker.api.dependencies.services import TrackerServices
from tracker.application.ports.store import TICKETS
from tracker.application.services.board_ordering_service import BoardOrderingService
from tracker.domain.errors import InsufficientRoleError
from tracker.domain.models.ticket import BOARD_COLUMNS
from tracker.domain.services.ordering import Placement
from tracker.infrastructure.stubs import InMemoryStore


@pytest.fixture
def board(services: TrackerServices) -> BoardOrderingService:
    return services.board


async def _tickets(services: TrackerServices, project: SeededProject, count: int) -> list[str]:
    ids = []
    for index in range(count):
        doc = await services.tickets.create_ticket(
            DEVELOPER, project.id, {"title": f"Board ticket {index}"}
        )
        ids.append(doc["id"])
    return ids


def _todo_order(store: InMemoryStore, project: SeededProject) -> list[tuple[float, str]]:
    return sorted(
        (doc["order"], doc["id"])
        for doc in store.documents(TICKETS)
        if doc["project_id"] == project.id and doc["status"] == "todo"
    )


class TestLoadBoard:
    @pytest.mark.asyncio
    async def test_every_column_present(
        self, board: BoardOrderingService, services: TrackerServices, project: SeededProject
    ) -> None:
        ids = await _tickets(services, project, 3)

        snapshot = await board.load_board(project.id)

        assert set(snapshot) == {column.value for column in BOARD_COLUMNS}
        assert sorted(item.id for item in snapshot["todo"]) == sorted(ids)
        assert snapshot["done"] == []


class TestRenormalizeBoard:
    """Tests for renormalize_board()."""

    @pytest.mark.asyncio
    async def test_skipped_when_precision_available(
        self, board: BoardOrderingService, services: TrackerServices, project: SeededProject
    ) -> None:
        await _tickets(services, project, 3)

        result = await board.renormalize_board(DEVELOPER, project.id)

        assert result.renormalized is False
        assert result.tickets_rewritten == 0

    @pytest.mark.asyncio
    async def test_rewrites_exhausted_board(
        self,
        board: BoardOrderingService,
        services: TrackerServices,
        project: SeededProject,
        store: InMemoryStore,
    ) -> None:
        """Repeated midpoint drops exhaust precision; renormalizing keeps the order."""
        ids = await _tickets(services, project, 7)
        anchor = ids[0]
        for ticket_id in ids[2:]:
            await services.tickets.move(DEVELOPER, ticket_id, "todo", Placement.after(anchor))
        before = [ticket_id for _, ticket_id in _todo_order(store, project)]

        result = await board.renormalize_board(DEVELOPER, project.id)

        after = _todo_order(store, project)
        assert result.renormalized is True
        assert result.tickets_rewritten > 0
        assert [ticket_id for _, ticket_id in after] == before
        assert [order for order, _ in after] == [float(i) for i in range(7)]

    @pytest.mark.asyncio
    async def test_force_on_clean_board(
        self, board: BoardOrderingService, services: TrackerServices, project: SeededProject
    ) -> None:
        await _tickets(services, project, 3)

        result = await board.renormalize_board(DEVELOPER, project.id, force=True)

        assert result.renormalized is True
        assert result.tickets_rewritten == 0

    @pytest.mark.asyncio
    async def test_columns_renormalized_independently(
        self,
        board: BoardOrderingService,
        services: TrackerServices,
        project: SeededProject,
        store: InMemoryStore,
    ) -> None:
        ids = await _tickets(services, project, 2)
        await store.update(TICKETS, ids[0], {"status": "done", "order": 4.123456})
        await store.update(TICKETS, ids[1], {"order": -8.5})

        result = await board.renormalize_board(DEVELOPER, project.id)

        assert result.tickets_rewritten == 2
        assert (await store.get(TICKETS, ids[0]))["order"] == 0.0
        assert (await store.get(TICKETS, ids[1]))["order"] == 0.0

    @pytest.mark.asyncio
    async def test_viewer_cannot_renormalize(
        self, board: BoardOrderingService, project: SeededProject
    ) -> None:
        with pytest.raises(InsufficientRoleError):
            await board.renormalize_board(VIEWER, project.id)
