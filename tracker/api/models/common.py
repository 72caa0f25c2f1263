"""Shared request model configuration.

Field values are validated by the domain (which reports every failing
reason at once); the request models only fix the shape of the body and
reject unknown fields.
"""

from pydantic import BaseModel, ConfigDict


class StrictRequest(BaseModel):
    """Base for every request body: unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")

    def supplied(self) -> dict:
        """Fields the caller actually sent."""
        return self.model_dump(exclude_unset=True)
