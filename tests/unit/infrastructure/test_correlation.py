"""Unit tests for correlation ID management.

Tests the contextvar handling and the structlog processor that stamps
correlation IDs on log entries.
"""

import asyncio
import re

import pytest

from tracker.infrastructure.observability.correlation import (
    MAX_CORRELATION_ID_LENGTH,
    correlation_id_processor,
    generate_correlation_id,
    get_correlation_id,
    reset_correlation_id,
    resolve_correlation_id,
    set_correlation_id,
)


@pytest.fixture(autouse=True)
def clean_correlation_id() -> None:
    """Start and finish every test without a correlation ID."""
    set_correlation_id("")
    yield
    set_correlation_id("")


class TestGenerateCorrelationId:
    """Tests for generate_correlation_id function."""

    def test_generate_returns_uuid4(self) -> None:
        uuid_pattern = re.compile(
            r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$"
        )
        assert uuid_pattern.match(generate_correlation_id()) is not None

    def test_generate_returns_unique_ids(self) -> None:
        ids = {generate_correlation_id() for _ in range(50)}
        assert len(ids) == 50


class TestCorrelationIdContext:
    """Tests for correlation ID context management."""

    def test_unset_is_empty_string(self) -> None:
        assert get_correlation_id() == ""

    def test_set_then_get(self) -> None:
        set_correlation_id("req-board-move")
        assert get_correlation_id() == "req-board-move"

    @pytest.mark.asyncio
    async def test_isolated_between_tasks(self) -> None:
        """Concurrent requests never see each other's correlation ID."""
        results: dict[str, str] = {}

        async def handle(request: str) -> None:
            set_correlation_id(f"id-{request}")
            await asyncio.sleep(0.01)
            results[request] = get_correlation_id()

        await asyncio.gather(handle("move"), handle("assign"), handle("comment"))

        assert results == {
            "move": "id-move",
            "assign": "id-assign",
            "comment": "id-comment",
        }


class TestCorrelationIdProcessor:
    """Tests for the structlog correlation ID processor."""

    def test_adds_correlation_id_when_set(self) -> None:
        set_correlation_id("processor-id")
        event_dict: dict[str, object] = {"event": "ticket_moved", "ticket_id": "t1"}

        result = correlation_id_processor(None, "info", event_dict)

        assert result == {
            "event": "ticket_moved",
            "ticket_id": "t1",
            "correlation_id": "processor-id",
        }

    def test_skips_when_unset(self) -> None:
        result = correlation_id_processor(None, "info", {"event": "ticket_moved"})

        assert "correlation_id" not in result

    def test_bound_correlation_id_wins(self) -> None:
        set_correlation_id("context-id")

        result = correlation_id_processor(
            None, "info", {"event": "ticket_moved", "correlation_id": "bound-id"}
        )

        assert result["correlation_id"] == "bound-id"


class TestResolveCorrelationId:
    """Tests for accepting or replacing client-supplied IDs."""

    def test_accepts_well_formed_id(self) -> None:
        assert resolve_correlation_id("req-123") == "req-123"

    def test_strips_surrounding_whitespace(self) -> None:
        assert resolve_correlation_id("  req-123 ") == "req-123"

    @pytest.mark.parametrize(
        "inbound",
        [
            None,
            "",
            "   ",
            "has space",
            "line\nbreak",
            "café",
            "x" * (MAX_CORRELATION_ID_LENGTH + 1),
        ],
    )
    def test_replaces_malformed_id(self, inbound: str | None) -> None:
        resolved = resolve_correlation_id(inbound)

        assert resolved != inbound
        assert len(resolved) == 36

    def test_reset_restores_previous_value(self) -> None:
        set_correlation_id("outer")
        token = set_correlation_id("inner")

        reset_correlation_id(token)

        assert get_correlation_id() == "outer"
