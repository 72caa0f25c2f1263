"""Request correlation for tracker operations.

A correlation id follows one tracker request (a move, an invite, a
project cascade) across every await point, so every service log line
emitted while handling it can be joined. The id lives in a contextvar:
concurrent requests in the same loop never see each other's id.

Inbound ids come from the X-Correlation-ID header. They are accepted only
when short and free of whitespace or control characters; anything else is
replaced with a fresh UUID4 so clients cannot inject arbitrary text into
log lines.
"""

from contextvars import ContextVar, Token
from typing import Any
from uuid import uuid4

CORRELATION_HEADER = "X-Correlation-ID"
MAX_CORRELATION_ID_LENGTH = 128

_correlation_id: ContextVar[str] = ContextVar("tracker_correlation_id", default="")


def generate_correlation_id() -> str:
    """Generate a new correlation ID (UUID4)."""
    return str(uuid4())


def resolve_correlation_id(inbound: str | None) -> str:
    """Accept a client-supplied id when well-formed, else generate one."""
    candidate = (inbound or "").strip()
    if (
        candidate
        and len(candidate) <= MAX_CORRELATION_ID_LENGTH
        and candidate.isascii()
        and candidate.isprintable()
        and " " not in candidate
    ):
        return candidate
    return generate_correlation_id()


def get_correlation_id() -> str:
    """Current correlation ID, or an empty string outside a request."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> Token[str]:
    """Set the correlation ID for the current context.

    Returns:
        Token for reset_correlation_id() once the request is finished.
    """
    return _correlation_id.set(correlation_id)


def reset_correlation_id(token: Token[str]) -> None:
    _correlation_id.reset(token)


def correlation_id_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor stamping the current correlation_id.

    An id already bound on the logger wins over the context value.
    """
    correlation_id = get_correlation_id()
    if correlation_id:
        event_dict.setdefault("correlation_id", correlation_id)
    return event_dict
