"""Project and membership request models."""

from pydantic import Field

from tracker.api.models.common import StrictRequest


class CreateProjectRequest(StrictRequest):
    name: str
    key: str = Field(..., description="2-5 uppercase letters, unique, immutable")
    description: str = ""


class UpdateProjectRequest(StrictRequest):
    """Partial update; only supplied fields are written.

    ``key`` is accepted in the body so that an attempted key change is
    reported as a validation failure rather than a schema error.
    """

    name: str | None = None
    description: str | None = None
    key: str | None = None


class InviteMemberRequest(StrictRequest):
    user_id: str
    role: str


class ChangeRoleRequest(StrictRequest):
    role: str
