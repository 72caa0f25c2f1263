"""Unit tests for TicketWorkflowService."""

import json

import pytest

from tests.helpers import DEVELOPER, MANAGER, OUTSIDER, VIEWER, SeededProject
from tracker.api.dependencies.services import TrackerServices
from tracker.application.ports.store import ACTIVITY_LOG, COMMENTS, TICKETS
from tracker.application.services.ticket_workflow_service import (
    TicketWorkflowService,
    ticket_key,
)
from tracker.domain.errors import (
    ConflictError,
    InsufficientRoleError,
    NotAMemberError,
    NotFoundError,
    ValidationFailedError,
)
from tracker.domain.models.notification import NotificationKind
from tracker.domain.services.ordering import Placement
from tracker.infrastructure.stubs import BlobStoreStub, InMemoryStore, NotifierStub


@pytest.fixture
def workflow(services: TrackerServices) -> TicketWorkflowService:
    return services.tickets


async def _create(
    workflow: TicketWorkflowService, project: SeededProject, title: str, **fields: object
) -> dict:
    return await workflow.create_ticket(DEVELOPER, project.id, {"title": title, **fields})


def _activity(store: InMemoryStore, action: str) -> list[dict]:
    return [doc for doc in store.documents(ACTIVITY_LOG) if doc["action"] == action]


class TestTicketKey:
    def test_format(self) -> None:
        assert ticket_key("WEB", 42) == "WEB-42"


class TestCreateTicket:
    """Tests for create_ticket()."""

    @pytest.mark.asyncio
    async def test_numbers_and_places_at_todo_tail(
        self, workflow: TicketWorkflowService, project: SeededProject
    ) -> None:
        first = await _create(workflow, project, "Set up CI pipeline")
        second = await _create(workflow, project, "Add login page")
        third = await _create(workflow, project, "Write README")

        assert [t["ticket_number"] for t in (first, second, third)] == [1, 2, 3]
        assert third["ticket_key"] == "WEB-3"
        assert [t["order"] for t in (first, second, third)] == [0.0, 1.0, 2.0]
        assert {t["status"] for t in (first, second, third)} == {"todo"}
        assert first["reporter_id"] == DEVELOPER
        assert first["attachments"] == []

    @pytest.mark.asyncio
    async def test_records_activity(
        self,
        workflow: TicketWorkflowService,
        project: SeededProject,
        store: InMemoryStore,
    ) -> None:
        ticket = await _create(workflow, project, "Set up CI pipeline")

        [entry] = _activity(store, "ticket_created")
        assert entry["ticket_id"] == ticket["id"]
        assert entry["user_id"] == DEVELOPER
        assert json.loads(entry["details"]) == {
            "title": "Set up CI pipeline",
            "ticket_key": "WEB-1",
        }

    @pytest.mark.asyncio
    async def test_viewer_cannot_create(
        self, workflow: TicketWorkflowService, project: SeededProject
    ) -> None:
        with pytest.raises(InsufficientRoleError):
            await workflow.create_ticket(VIEWER, project.id, {"title": "Viewer ticket"})

    @pytest.mark.asyncio
    async def test_outsider_cannot_create(
        self, workflow: TicketWorkflowService, project: SeededProject
    ) -> None:
        with pytest.raises(NotAMemberError):
            await workflow.create_ticket(OUTSIDER, project.id, {"title": "Outsider ticket"})

    @pytest.mark.asyncio
    async def test_assignee_and_sprint_must_belong_to_project(
        self, workflow: TicketWorkflowService, project: SeededProject
    ) -> None:
        with pytest.raises(ValidationFailedError) as excinfo:
            await _create(
                workflow,
                project,
                "Assign to stranger",
                assignee_id=OUTSIDER,
                sprint_id="nosuchsprint",
            )

        assert excinfo.value.reasons == (
            "Assignee must be a member of this project",
            "Sprint does not belong to this project",
        )

    @pytest.mark.asyncio
    async def test_member_assignee_accepted(
        self, workflow: TicketWorkflowService, project: SeededProject
    ) -> None:
        ticket = await _create(workflow, project, "Assigned at creation", assignee_id=MANAGER)

        assert ticket["assignee_id"] == MANAGER


class TestUpdateFields:
    """Tests for update_fields() and the optimistic concurrency token."""

    @pytest.mark.asyncio
    async def test_stale_version_conflicts(
        self,
        workflow: TicketWorkflowService,
        project: SeededProject,
        store: InMemoryStore,
    ) -> None:
        ticket = await _create(workflow, project, "Original title")
        observed = ticket["updated_at"]

        await workflow.update_fields(
            DEVELOPER, ticket["id"], {"title": "First edit wins"}, expected_version=observed
        )
        with pytest.raises(ConflictError):
            await workflow.update_fields(
                MANAGER, ticket["id"], {"title": "Second edit loses"}, expected_version=observed
            )

        stored = await store.get(TICKETS, ticket["id"])
        assert stored["title"] == "First edit wins"

    @pytest.mark.asyncio
    async def test_without_version_last_write_wins(
        self, workflow: TicketWorkflowService, project: SeededProject
    ) -> None:
        ticket = await _create(workflow, project, "Original title")

        await workflow.update_fields(DEVELOPER, ticket["id"], {"priority": "high"})
        updated = await workflow.update_fields(MANAGER, ticket["id"], {"priority": "low"})

        assert updated["priority"] == "low"
        assert updated["updated_at"] > ticket["updated_at"]

    @pytest.mark.asyncio
    async def test_status_not_editable_here(
        self, workflow: TicketWorkflowService, project: SeededProject
    ) -> None:
        ticket = await _create(workflow, project, "Original title")

        with pytest.raises(ValidationFailedError) as excinfo:
            await workflow.update_fields(DEVELOPER, ticket["id"], {"status": "done"})

        assert excinfo.value.reasons == ("Field 'status' cannot be updated",)

    @pytest.mark.asyncio
    async def test_records_changed_fields_only(
        self,
        workflow: TicketWorkflowService,
        project: SeededProject,
        store: InMemoryStore,
    ) -> None:
        ticket = await _create(workflow, project, "Original title")

        await workflow.update_fields(DEVELOPER, ticket["id"], {"labels": ["<b>ui</b>"]})

        [entry] = _activity(store, "ticket_updated")
        assert json.loads(entry["details"]) == {"labels": ["&lt;b&gt;ui&lt;&#x2F;b&gt;"]}


class TestMove:
    """Tests for move()."""

    @pytest.mark.asyncio
    async def test_move_to_empty_column(
        self,
        workflow: TicketWorkflowService,
        project: SeededProject,
        store: InMemoryStore,
    ) -> None:
        ticket = await _create(workflow, project, "Set up CI pipeline")

        moved = await workflow.move(DEVELOPER, ticket["id"], "in_progress", Placement.head())

        assert moved["status"] == "in_progress"
        assert moved["order"] == 0.0
        [entry] = _activity(store, "ticket_moved")
        assert json.loads(entry["details"]) == {"from": "todo", "to": "in_progress"}

    @pytest.mark.asyncio
    async def test_midpoint_placement(
        self, workflow: TicketWorkflowService, project: SeededProject
    ) -> None:
        a = await _create(workflow, project, "Ticket A here")
        await _create(workflow, project, "Ticket B here")
        c = await _create(workflow, project, "Ticket C here")
        d = await _create(workflow, project, "Ticket D here")

        moved_c = await workflow.move(DEVELOPER, c["id"], "todo", Placement.after(a["id"]))
        moved_d = await workflow.move(DEVELOPER, d["id"], "todo", Placement.after(a["id"]))

        assert moved_c["order"] == 0.5
        assert moved_d["order"] == 0.25

    @pytest.mark.asyncio
    async def test_reorder_within_column_writes_no_activity(
        self,
        workflow: TicketWorkflowService,
        project: SeededProject,
        store: InMemoryStore,
    ) -> None:
        a = await _create(workflow, project, "Ticket A here")
        await _create(workflow, project, "Ticket B here")
        c = await _create(workflow, project, "Ticket C here")

        moved = await workflow.move(DEVELOPER, c["id"], "todo", Placement.head())

        assert moved["order"] == a["order"] - 1
        assert _activity(store, "ticket_moved") == []

    @pytest.mark.asyncio
    async def test_self_drop_is_noop(
        self, workflow: TicketWorkflowService, project: SeededProject
    ) -> None:
        ticket = await _create(workflow, project, "Ticket A here")

        result = await workflow.move(DEVELOPER, ticket["id"], "todo", Placement.after(ticket["id"]))

        assert result["updated_at"] == ticket["updated_at"]
        assert result["order"] == ticket["order"]

    @pytest.mark.asyncio
    async def test_drop_on_current_position_is_noop(
        self, workflow: TicketWorkflowService, project: SeededProject
    ) -> None:
        a = await _create(workflow, project, "Ticket A here")
        await _create(workflow, project, "Ticket B here")

        result = await workflow.move(DEVELOPER, a["id"], "todo", Placement.head())

        assert result["updated_at"] == a["updated_at"]

    @pytest.mark.asyncio
    async def test_after_target_outside_destination_column(
        self, workflow: TicketWorkflowService, project: SeededProject
    ) -> None:
        a = await _create(workflow, project, "Ticket A here")
        b = await _create(workflow, project, "Ticket B here")

        with pytest.raises(ValidationFailedError) as excinfo:
            await workflow.move(DEVELOPER, a["id"], "done", Placement.after(b["id"]))

        assert excinfo.value.reasons == (
            "Ticket to place after is not in the destination column",
        )

    @pytest.mark.asyncio
    async def test_unknown_status(
        self, workflow: TicketWorkflowService, project: SeededProject
    ) -> None:
        ticket = await _create(workflow, project, "Ticket A here")

        with pytest.raises(ValidationFailedError):
            await workflow.move(DEVELOPER, ticket["id"], "blocked", Placement.tail())

    @pytest.mark.asyncio
    async def test_any_status_may_move_to_any_other(
        self, workflow: TicketWorkflowService, project: SeededProject
    ) -> None:
        ticket = await _create(workflow, project, "Ticket A here")

        for status in ("done", "backlog", "in_review", "todo"):
            moved = await workflow.move(DEVELOPER, ticket["id"], status, Placement.tail())
            assert moved["status"] == status

    @pytest.mark.asyncio
    async def test_viewer_cannot_move(
        self, workflow: TicketWorkflowService, project: SeededProject
    ) -> None:
        ticket = await _create(workflow, project, "Ticket A here")

        with pytest.raises(InsufficientRoleError):
            await workflow.move(VIEWER, ticket["id"], "done", Placement.tail())

    @pytest.mark.asyncio
    async def test_missing_ticket(
        self, workflow: TicketWorkflowService, project: SeededProject
    ) -> None:
        with pytest.raises(NotFoundError):
            await workflow.move(DEVELOPER, "nosuchticket", "done", Placement.tail())


class TestAssign:
    """Tests for assign() and assignment notifications."""

    @pytest.mark.asyncio
    async def test_notifies_new_assignee(
        self,
        workflow: TicketWorkflowService,
        project: SeededProject,
        notifier: NotifierStub,
    ) -> None:
        ticket = await _create(workflow, project, "Ticket A here")

        assigned = await workflow.assign(MANAGER, ticket["id"], DEVELOPER)

        assert assigned["assignee_id"] == DEVELOPER
        assert notifier.recipients(NotificationKind.TICKET_ASSIGNED) == [DEVELOPER]
        assert notifier.sent[0].context["ticket_title"] == "Ticket A here"

    @pytest.mark.asyncio
    async def test_self_assignment_not_notified(
        self,
        workflow: TicketWorkflowService,
        project: SeededProject,
        notifier: NotifierStub,
    ) -> None:
        ticket = await _create(workflow, project, "Ticket A here")

        await workflow.assign(MANAGER, ticket["id"], MANAGER)

        assert notifier.sent == []

    @pytest.mark.asyncio
    async def test_unchanged_assignee_not_renotified(
        self,
        workflow: TicketWorkflowService,
        project: SeededProject,
        notifier: NotifierStub,
    ) -> None:
        ticket = await _create(workflow, project, "Ticket A here")

        await workflow.assign(MANAGER, ticket["id"], DEVELOPER)
        await workflow.assign(MANAGER, ticket["id"], DEVELOPER)

        assert notifier.recipients() == [DEVELOPER]

    @pytest.mark.asyncio
    async def test_developer_cannot_assign(
        self, workflow: TicketWorkflowService, project: SeededProject
    ) -> None:
        ticket = await _create(workflow, project, "Ticket A here")

        with pytest.raises(InsufficientRoleError):
            await workflow.assign(DEVELOPER, ticket["id"], DEVELOPER)

    @pytest.mark.asyncio
    async def test_assignee_must_be_member(
        self, workflow: TicketWorkflowService, project: SeededProject
    ) -> None:
        ticket = await _create(workflow, project, "Ticket A here")

        with pytest.raises(ValidationFailedError) as excinfo:
            await workflow.assign(MANAGER, ticket["id"], OUTSIDER)

        assert excinfo.value.reasons == ("Assignee must be a member of this project",)

    @pytest.mark.asyncio
    async def test_unassign(
        self, workflow: TicketWorkflowService, project: SeededProject
    ) -> None:
        ticket = await _create(workflow, project, "Ticket A here", assignee_id=DEVELOPER)

        unassigned = await workflow.assign(MANAGER, ticket["id"], None)

        assert unassigned["assignee_id"] is None

    @pytest.mark.asyncio
    async def test_notifier_failure_does_not_fail_assignment(
        self,
        workflow: TicketWorkflowService,
        project: SeededProject,
        notifier: NotifierStub,
    ) -> None:
        ticket = await _create(workflow, project, "Ticket A here")
        notifier.set_should_fail()

        assigned = await workflow.assign(MANAGER, ticket["id"], DEVELOPER)

        assert assigned["assignee_id"] == DEVELOPER
        assert notifier.sent == []


class TestDelete:
    """Tests for delete() and its cascade."""

    @pytest.mark.asyncio
    async def test_cascades_comments_blobs_and_history(
        self,
        services: TrackerServices,
        workflow: TicketWorkflowService,
        project: SeededProject,
        store: InMemoryStore,
        blob_store: BlobStoreStub,
    ) -> None:
        ticket = await _create(workflow, project, "Ticket with history")
        keep = await _create(workflow, project, "Unrelated ticket")
        root = await services.comments.add_comment(DEVELOPER, ticket["id"], "First!")
        await services.comments.add_comment(MANAGER, ticket["id"], "Reply", root["id"])
        await services.comments.add_comment(VIEWER, keep["id"], "Keep me")
        for blob_id in ("blob-1", "blob-2"):
            blob_store.add_blob(blob_id)
        await store.update(TICKETS, ticket["id"], {"attachments": ["blob-1", "blob-2"]})

        await workflow.delete(MANAGER, ticket["id"])

        with pytest.raises(NotFoundError):
            await store.get(TICKETS, ticket["id"])
        assert store.count(COMMENTS, ticket_id=ticket["id"]) == 0
        assert store.count(COMMENTS, ticket_id=keep["id"]) == 1
        assert blob_store.deleted == ["blob-1", "blob-2"]
        assert store.count(ACTIVITY_LOG, ticket_id=ticket["id"]) == 0

        [entry] = _activity(store, "ticket_deleted")
        assert entry["ticket_id"] is None
        assert json.loads(entry["details"]) == {"ticket_number": 1}

    @pytest.mark.asyncio
    async def test_blob_failure_is_best_effort(
        self,
        workflow: TicketWorkflowService,
        project: SeededProject,
        store: InMemoryStore,
        blob_store: BlobStoreStub,
    ) -> None:
        ticket = await _create(workflow, project, "Ticket with blobs")
        blob_store.add_blob("blob-ok")
        blob_store.add_blob("blob-bad")
        blob_store.fail_ids.add("blob-bad")
        await store.update(TICKETS, ticket["id"], {"attachments": ["blob-bad", "blob-ok"]})

        await workflow.delete(MANAGER, ticket["id"])

        assert blob_store.deleted == ["blob-ok"]
        assert store.count(TICKETS, id=ticket["id"]) == 0

    @pytest.mark.asyncio
    async def test_developer_cannot_delete(
        self, workflow: TicketWorkflowService, project: SeededProject
    ) -> None:
        ticket = await _create(workflow, project, "Ticket A here")

        with pytest.raises(InsufficientRoleError):
            await workflow.delete(DEVELOPER, ticket["id"])
