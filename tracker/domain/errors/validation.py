"""Validation errors for Tracker Core."""

from __future__ import annotations

from collections.abc import Iterable

from tracker.domain.exceptions import TrackerError


class ValidationFailedError(TrackerError):
    """Raised when input fails field-level validation.

    Always carries every failing reason, never only the first one.

    Attributes:
        reasons: Human-readable reasons, in the order they were found.
    """

    code = "ValidationFailed"

    def __init__(self, reasons: Iterable[str]) -> None:
        self.reasons: tuple[str, ...] = tuple(reasons)
        if not self.reasons:
            raise ValueError("ValidationFailedError requires at least one reason")
        super().__init__("; ".join(self.reasons))
