"""Domain error to HTTP response mapping.

Status codes:
- UnauthenticatedError: 401
- Other AuthorizationError: 403
- ValidationFailedError: 422 (with every reason)
- NotFoundError: 404
- ConflictError, InvariantViolatedError: 409
- UnavailableError: 503 with Retry-After

Response body: {"error": <code>, "message": <str>, "reasons": [...]}.
"""

from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from tracker.domain.errors import (
    AuthorizationError,
    ConflictError,
    InvariantViolatedError,
    NotFoundError,
    UnauthenticatedError,
    UnavailableError,
    ValidationFailedError,
)
from tracker.domain.exceptions import TrackerError
from tracker.infrastructure.observability.logging import get_component_logger

RETRY_AFTER_SECONDS = 5

# Checked in order: subclasses before their base classes
_STATUS_BY_ERROR: tuple[tuple[type[TrackerError], int], ...] = (
    (UnauthenticatedError, 401),
    (AuthorizationError, 403),
    (ValidationFailedError, 422),
    (NotFoundError, 404),
    (ConflictError, 409),
    (InvariantViolatedError, 409),
    (UnavailableError, 503),
)


def status_for(error: TrackerError) -> int:
    """HTTP status code for a domain error (500 if unmapped)."""
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 500


def error_body(error: TrackerError) -> dict[str, Any]:
    body: dict[str, Any] = {"error": error.code, "message": str(error)}
    if isinstance(error, ValidationFailedError):
        body["reasons"] = list(error.reasons)
    return body


async def tracker_error_handler(request: Request, exc: TrackerError) -> JSONResponse:
    """Render a TrackerError as a JSON error response."""
    status = status_for(exc)
    log = get_component_logger("api").bind(path=request.url.path, error=exc.code)
    if status >= 500:
        log.warning("request_error", status_code=status, message=str(exc))
    else:
        log.info("request_rejected", status_code=status)

    headers = {"Retry-After": str(RETRY_AFTER_SECONDS)} if exc.retryable else None
    return JSONResponse(status_code=status, content=error_body(exc), headers=headers)
