"""Role hierarchy domain service.

Single source of truth for role ranks and the permission matrix. Every
rank comparison in the system routes through rank() so that no caller
carries its own idea of the hierarchy.

Hierarchy (total order):
    viewer (1) < developer (2) < manager (3) < admin (4)

Permission matrix:
    Monotonic in rank for every permission except canDeleteProject,
    which only admin holds. Unknown roles fail closed to the viewer
    matrix, never open.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from tracker.domain.models.role import Permission, PermissionSet, ProjectRole

ROLE_RANKS: Mapping[ProjectRole, int] = MappingProxyType(
    {
        ProjectRole.VIEWER: 1,
        ProjectRole.DEVELOPER: 2,
        ProjectRole.MANAGER: 3,
        ProjectRole.ADMIN: 4,
    }
)

PERMISSION_MATRIX: Mapping[ProjectRole, PermissionSet] = MappingProxyType(
    {
        ProjectRole.ADMIN: PermissionSet(
            create_tickets=True,
            edit_tickets=True,
            delete_tickets=True,
            assign_tickets=True,
            move_tickets=True,
            manage_members=True,
            edit_project=True,
            delete_project=True,
            comment=True,
        ),
        ProjectRole.MANAGER: PermissionSet(
            create_tickets=True,
            edit_tickets=True,
            delete_tickets=True,
            assign_tickets=True,
            move_tickets=True,
            manage_members=True,
            edit_project=True,
            delete_project=False,
            comment=True,
        ),
        ProjectRole.DEVELOPER: PermissionSet(
            create_tickets=True,
            edit_tickets=True,
            move_tickets=True,
            comment=True,
        ),
        ProjectRole.VIEWER: PermissionSet(comment=True),
    }
)

# Permissions exempt from rank monotonicity
NON_MONOTONIC_PERMISSIONS: frozenset[Permission] = frozenset(
    {Permission.DELETE_PROJECT}
)


def _resolve(role: ProjectRole | str | None) -> ProjectRole:
    return ProjectRole.parse(role) or ProjectRole.VIEWER


def rank(role: ProjectRole | str | None) -> int:
    """Return the rank of a role (1-4). Unknown roles rank as viewer."""
    return ROLE_RANKS[_resolve(role)]


def permissions_of(role: ProjectRole | str | None) -> PermissionSet:
    """Return the fixed permission vector for a role.

    Args:
        role: A ProjectRole or raw role string.

    Returns:
        The role's PermissionSet; viewer's set for unknown roles.
    """
    return PERMISSION_MATRIX[_resolve(role)]


def has_permission(role: ProjectRole | str | None, permission: Permission) -> bool:
    """Check whether a role grants a permission."""
    return permissions_of(role).allows(permission)


def outranks(actor: ProjectRole | str | None, target: ProjectRole | str | None) -> bool:
    """True when actor's rank is strictly greater than target's."""
    return rank(actor) > rank(target)


def roles_by_rank() -> tuple[ProjectRole, ...]:
    """All roles, lowest rank first."""
    return tuple(sorted(ROLE_RANKS, key=ROLE_RANKS.__getitem__))
