"""
Tracker Core - rules engine for a multi-tenant project/ticket tracker.

Every mutation in the tracker (projects, memberships, tickets, comments,
sprints) passes through the same small set of rules:

- Hierarchical role-based authorization (viewer < developer < manager < admin)
- Ticket workflow with opt-in optimistic concurrency
- Fractional ordering of Kanban columns
- Cascading referential integrity on deletion
- Sprint lifecycle with a single active sprint per project
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
