"""Test helpers for Tracker Core tests.

Helpers:
    seed_project: Create a project with one member of every role
    SeededProject: Handle on a seeded project

Usage:
    from tests.helpers import OWNER, DEVELOPER, seed_project
"""

from tests.helpers.project_seeding import (
    ADMIN,
    DEVELOPER,
    MANAGER,
    OUTSIDER,
    OWNER,
    SEEDED_MEMBERS,
    VIEWER,
    SeededProject,
    seed_project,
)

__all__ = [
    "ADMIN",
    "DEVELOPER",
    "MANAGER",
    "OUTSIDER",
    "OWNER",
    "SEEDED_MEMBERS",
    "VIEWER",
    "SeededProject",
    "seed_project",
]
