"""Request logging and correlation for the tracker API.

Each request runs under one correlation id, taken from X-Correlation-ID
when the client sends a well-formed one and generated otherwise. The id is
echoed on the response and reset once the request finishes, so nothing
leaks into the next request handled by the same task.

Usage:
    app.add_middleware(LoggingMiddleware)
"""

import time
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from tracker.api.dependencies.actor import ACTOR_HEADER
from tracker.infrastructure.observability.correlation import (
    CORRELATION_HEADER,
    reset_correlation_id,
    resolve_correlation_id,
    set_correlation_id,
)
from tracker.infrastructure.observability.logging import get_component_logger


def _elapsed_ms(start_time: float) -> float:
    return round((time.perf_counter() - start_time) * 1000, 2)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request with its actor, outcome and duration."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        correlation_id = resolve_correlation_id(request.headers.get(CORRELATION_HEADER))
        token = set_correlation_id(correlation_id)

        log = get_component_logger("api").bind(
            correlation_id=correlation_id,
            method=request.method,
            path=request.url.path,
            actor_id=request.headers.get(ACTOR_HEADER),
        )
        log.info("request_started")
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            log.exception(
                "request_failed",
                duration_ms=_elapsed_ms(start_time),
                error_type=type(exc).__name__,
            )
            raise
        finally:
            reset_correlation_id(token)

        log.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=_elapsed_ms(start_time),
        )
        response.headers[CORRELATION_HEADER] = correlation_id
        return response
