"""Invariant violation errors for Tracker Core."""

from tracker.domain.exceptions import TrackerError


class InvariantViolatedError(TrackerError):
    """Raised when an operation would break a data-model invariant.

    Examples:
        - Starting a second active sprint in a project
        - Reopening a completed sprint
        - A cycle in a comment reply chain
    """

    code = "InvariantViolated"
