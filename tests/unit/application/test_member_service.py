"""Unit tests for MemberService."""

import pytest

from tests.helpers import (
    ADMIN,
    DEVELOPER,
    MANAGER,
    OUTSIDER,
    OWNER,
    VIEWER,
    SeededProject,
    seed_project,
)
from tracker.api.dependencies.services import TrackerServices
from tracker.application.ports.store import PROJECT_MEMBERS, TICKETS
from tracker.application.services.member_service import MemberService
from tracker.domain.errors import (
    ConflictError,
    InsufficientRoleError,
    NotAMemberError,
    NotFoundError,
    OwnerProtectedError,
    RankTooHighError,
    SelfModificationError,
    ValidationFailedError,
)
from tracker.domain.models.notification import NotificationKind
from tracker.infrastructure.stubs import IdentityGroupStub, InMemoryStore, NotifierStub

NEWCOMER = "newcomer-1"


@pytest.fixture
def members(services: TrackerServices) -> MemberService:
    return services.members


class TestInviteMember:
    """Tests for invite_member()."""

    @pytest.mark.asyncio
    async def test_invite_creates_membership(
        self,
        members: MemberService,
        project: SeededProject,
        notifier: NotifierStub,
        identity_group: IdentityGroupStub,
    ) -> None:
        doc = await members.invite_member(MANAGER, project.id, NEWCOMER, "developer")

        assert doc["id"] == project.member_id(NEWCOMER)
        assert doc["role"] == "developer"
        assert doc["user_id"] == NEWCOMER
        assert notifier.recipients(NotificationKind.MEMBER_INVITED) == [NEWCOMER]
        assert notifier.sent[0].context["project_name"] == "Website Redesign"
        assert identity_group.groups[project.group_id][NEWCOMER] == "developer"

    @pytest.mark.asyncio
    async def test_invitee_id_validated_separately_from_actor(
        self, members: MemberService, project: SeededProject
    ) -> None:
        with pytest.raises(ValidationFailedError) as excinfo:
            await members.invite_member(OWNER, project.id, "not a user!", "viewer")

        assert excinfo.value.reasons == ("Invalid inviteeId format",)

    @pytest.mark.asyncio
    async def test_duplicate_invite_rejected(
        self, members: MemberService, project: SeededProject
    ) -> None:
        with pytest.raises(ValidationFailedError) as excinfo:
            await members.invite_member(OWNER, project.id, DEVELOPER, "viewer")

        assert excinfo.value.reasons == ("User is already a member of this project",)

    @pytest.mark.asyncio
    async def test_unknown_role_rejected(
        self, members: MemberService, project: SeededProject
    ) -> None:
        with pytest.raises(ValidationFailedError):
            await members.invite_member(OWNER, project.id, NEWCOMER, "owner")

    @pytest.mark.asyncio
    async def test_manager_cannot_invite_admin(
        self, members: MemberService, project: SeededProject
    ) -> None:
        with pytest.raises(RankTooHighError):
            await members.invite_member(MANAGER, project.id, NEWCOMER, "admin")

    @pytest.mark.asyncio
    async def test_self_invite_rejected(
        self, members: MemberService, project: SeededProject
    ) -> None:
        with pytest.raises(SelfModificationError):
            await members.invite_member(ADMIN, project.id, ADMIN, "viewer")

    @pytest.mark.asyncio
    async def test_developer_cannot_invite(
        self, members: MemberService, project: SeededProject
    ) -> None:
        with pytest.raises(InsufficientRoleError):
            await members.invite_member(DEVELOPER, project.id, NEWCOMER, "viewer")

    @pytest.mark.asyncio
    async def test_identity_group_failure_is_best_effort(
        self,
        members: MemberService,
        project: SeededProject,
        identity_group: IdentityGroupStub,
    ) -> None:
        identity_group.set_should_fail()

        doc = await members.invite_member(OWNER, project.id, NEWCOMER, "viewer")

        assert doc["role"] == "viewer"


class TestChangeMemberRole:
    """Tests for change_member_role() and the hierarchy sub-rules."""

    @pytest.mark.asyncio
    async def test_manager_demotes_developer(
        self, members: MemberService, project: SeededProject
    ) -> None:
        doc = await members.change_member_role(
            MANAGER, project.id, project.member_id(DEVELOPER), "viewer"
        )

        assert doc["role"] == "viewer"

    @pytest.mark.asyncio
    async def test_manager_cannot_promote_to_admin(
        self, members: MemberService, project: SeededProject
    ) -> None:
        with pytest.raises(RankTooHighError):
            await members.change_member_role(
                MANAGER, project.id, project.member_id(DEVELOPER), "admin"
            )

    @pytest.mark.asyncio
    async def test_manager_cannot_edit_equal_rank(
        self,
        services: TrackerServices,
        members: MemberService,
        project: SeededProject,
    ) -> None:
        await members.invite_member(OWNER, project.id, NEWCOMER, "manager")

        with pytest.raises(RankTooHighError):
            await members.change_member_role(
                MANAGER, project.id, project.member_id(NEWCOMER), "viewer"
            )

    @pytest.mark.asyncio
    async def test_owner_protected(
        self, members: MemberService, project: SeededProject
    ) -> None:
        with pytest.raises(OwnerProtectedError):
            await members.change_member_role(
                ADMIN, project.id, project.member_id(OWNER), "viewer"
            )

    @pytest.mark.asyncio
    async def test_self_modification(
        self, members: MemberService, project: SeededProject
    ) -> None:
        with pytest.raises(SelfModificationError):
            await members.change_member_role(
                MANAGER, project.id, project.member_id(MANAGER), "admin"
            )

    @pytest.mark.asyncio
    async def test_membership_of_other_project_not_found(
        self, services: TrackerServices, members: MemberService, project: SeededProject
    ) -> None:
        other = await seed_project(services, key="API", name="Public API", members={})

        with pytest.raises(NotFoundError):
            await members.change_member_role(
                OWNER, other.id, project.member_id(DEVELOPER), "viewer"
            )

    @pytest.mark.asyncio
    async def test_concurrent_role_change_conflicts(
        self,
        members: MemberService,
        project: SeededProject,
        store: InMemoryStore,
    ) -> None:
        """The write is a compare-and-set on the role the decision was made against."""
        store.fail_next(
            "update",
            PROJECT_MEMBERS,
            ConflictError(PROJECT_MEMBERS, project.member_id(DEVELOPER)),
        )

        with pytest.raises(ConflictError):
            await members.change_member_role(
                MANAGER, project.id, project.member_id(DEVELOPER), "viewer"
            )


class TestRemoveAndLeave:
    """Tests for remove_member() and leave_project()."""

    @pytest.mark.asyncio
    async def test_remove_unassigns_tickets(
        self,
        services: TrackerServices,
        members: MemberService,
        project: SeededProject,
        store: InMemoryStore,
        identity_group: IdentityGroupStub,
    ) -> None:
        tickets = []
        for index in range(3):
            doc = await services.tickets.create_ticket(
                MANAGER, project.id, {"title": f"Dev work {index}", "assignee_id": DEVELOPER}
            )
            tickets.append(doc["id"])

        await members.remove_member(MANAGER, project.id, project.member_id(DEVELOPER))

        assert store.count(PROJECT_MEMBERS, id=project.member_id(DEVELOPER)) == 0
        assert store.count(TICKETS, assignee_id=DEVELOPER) == 0
        assert store.count(TICKETS, project_id=project.id) == 3
        assert DEVELOPER not in identity_group.groups[project.group_id]

    @pytest.mark.asyncio
    async def test_developer_cannot_remove(
        self, members: MemberService, project: SeededProject
    ) -> None:
        with pytest.raises(InsufficientRoleError):
            await members.remove_member(DEVELOPER, project.id, project.member_id(VIEWER))

    @pytest.mark.asyncio
    async def test_member_leaves(
        self, members: MemberService, project: SeededProject, store: InMemoryStore
    ) -> None:
        await members.leave_project(VIEWER, project.id)

        assert store.count(PROJECT_MEMBERS, id=project.member_id(VIEWER)) == 0

    @pytest.mark.asyncio
    async def test_owner_cannot_leave(
        self, members: MemberService, project: SeededProject
    ) -> None:
        with pytest.raises(OwnerProtectedError) as excinfo:
            await members.leave_project(OWNER, project.id)

        assert "Transfer ownership first" in str(excinfo.value)

    @pytest.mark.asyncio
    async def test_outsider_cannot_leave(
        self, members: MemberService, project: SeededProject
    ) -> None:
        with pytest.raises(NotAMemberError):
            await members.leave_project(OUTSIDER, project.id)
