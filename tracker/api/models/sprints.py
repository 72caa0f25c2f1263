"""Sprint request models."""

from tracker.api.models.common import StrictRequest


class CreateSprintRequest(StrictRequest):
    name: str
    goal: str | None = None
    start_date: str | None = None
    end_date: str | None = None


class UpdateSprintRequest(StrictRequest):
    """Partial sprint update.

    ``status`` is accepted in the body only so that an attempt to write it
    is rejected by the lifecycle rules with a clear reason.
    """

    name: str | None = None
    goal: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    status: str | None = None
