"""Response models."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    version: str


class ReadinessResponse(BaseModel):
    status: str
    version: str


class RenormalizationResponse(BaseModel):
    renormalized: bool
    tickets_rewritten: int


class CommentDeletionResponse(BaseModel):
    deleted: list[str]


class SprintDeletionResponse(BaseModel):
    tickets_orphaned: int
