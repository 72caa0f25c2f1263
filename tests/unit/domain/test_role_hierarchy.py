"""Unit tests for the role hierarchy and permission matrix."""

import pytest

from tracker.domain.models.project import Membership
from tracker.domain.models.role import Permission, PermissionSet, ProjectRole
from tracker.domain.services import role_hierarchy


class TestRanks:
    """Tests for rank() and the total order over roles."""

    def test_ranks_are_strictly_increasing(self) -> None:
        """viewer < developer < manager < admin."""
        ranks = [role_hierarchy.rank(role) for role in role_hierarchy.roles_by_rank()]
        assert ranks == [1, 2, 3, 4]

    def test_roles_by_rank_lowest_first(self) -> None:
        assert role_hierarchy.roles_by_rank() == (
            ProjectRole.VIEWER,
            ProjectRole.DEVELOPER,
            ProjectRole.MANAGER,
            ProjectRole.ADMIN,
        )

    def test_rank_accepts_raw_strings(self) -> None:
        assert role_hierarchy.rank("manager") == role_hierarchy.rank(ProjectRole.MANAGER)

    @pytest.mark.parametrize("raw", ["owner", "superuser", "", None, "ADMIN"])
    def test_unknown_role_ranks_as_viewer(self, raw: str | None) -> None:
        """Unknown roles fail closed to the lowest rank."""
        assert role_hierarchy.rank(raw) == 1

    def test_outranks_is_strict(self) -> None:
        assert role_hierarchy.outranks(ProjectRole.ADMIN, ProjectRole.MANAGER)
        assert not role_hierarchy.outranks(ProjectRole.MANAGER, ProjectRole.MANAGER)
        assert not role_hierarchy.outranks(ProjectRole.DEVELOPER, ProjectRole.MANAGER)


class TestPermissionMatrix:
    """Tests for the fixed permission vectors."""

    def test_matrix_is_monotonic_in_rank(self) -> None:
        """A permission held by a role is held by every higher role."""
        roles = role_hierarchy.roles_by_rank()
        for permission in Permission:
            if permission in role_hierarchy.NON_MONOTONIC_PERMISSIONS:
                continue
            for lower, higher in zip(roles, roles[1:]):
                if role_hierarchy.has_permission(lower, permission):
                    assert role_hierarchy.has_permission(higher, permission), (
                        f"{higher.value} lacks {permission.value} held by {lower.value}"
                    )

    def test_only_admin_may_delete_project(self) -> None:
        holders = [
            role
            for role in ProjectRole
            if role_hierarchy.has_permission(role, Permission.DELETE_PROJECT)
        ]
        assert holders == [ProjectRole.ADMIN]

    def test_viewer_may_only_comment(self) -> None:
        granted = role_hierarchy.permissions_of(ProjectRole.VIEWER).granted()
        assert granted == frozenset({Permission.COMMENT})

    def test_developer_cannot_assign_or_delete(self) -> None:
        developer = role_hierarchy.permissions_of(ProjectRole.DEVELOPER)
        assert developer.allows(Permission.MOVE_TICKETS)
        assert not developer.allows(Permission.ASSIGN_TICKETS)
        assert not developer.allows(Permission.DELETE_TICKETS)
        assert not developer.allows(Permission.MANAGE_MEMBERS)

    def test_manager_holds_everything_but_project_deletion(self) -> None:
        manager = role_hierarchy.permissions_of(ProjectRole.MANAGER)
        assert manager.granted() == frozenset(Permission) - {Permission.DELETE_PROJECT}

    def test_unknown_role_gets_viewer_matrix(self) -> None:
        assert role_hierarchy.permissions_of("owner") == role_hierarchy.permissions_of(
            ProjectRole.VIEWER
        )

    def test_as_dict_uses_public_names(self) -> None:
        flags = PermissionSet(comment=True).as_dict()
        assert flags["canComment"] is True
        assert flags["canDeleteProject"] is False
        assert set(flags) == {permission.value for permission in Permission}


class TestMembershipRole:
    """Stored role strings resolve through the same fail-closed rule."""

    def test_unknown_stored_role_resolves_to_viewer(self) -> None:
        membership = Membership.from_document(
            {"id": "m1", "project_id": "p1", "user_id": "u1", "role": "superuser"}
        )
        assert membership.role is ProjectRole.VIEWER
        assert membership.raw_role == "superuser"

    def test_known_stored_role(self) -> None:
        membership = Membership.from_document(
            {"id": "m1", "project_id": "p1", "user_id": "u1", "role": "manager"}
        )
        assert membership.role is ProjectRole.MANAGER
