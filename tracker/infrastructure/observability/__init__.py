"""Observability infrastructure: structured logging and correlation IDs.

Usage:
    from tracker.infrastructure.observability import (
        configure_structlog,
        get_component_logger,
        get_correlation_id,
    )
"""

from tracker.infrastructure.observability.correlation import (
    CORRELATION_HEADER,
    correlation_id_processor,
    generate_correlation_id,
    get_correlation_id,
    reset_correlation_id,
    resolve_correlation_id,
    set_correlation_id,
)
from tracker.infrastructure.observability.logging import (
    configure_structlog,
    get_component_logger,
)

__all__: list[str] = [
    "CORRELATION_HEADER",
    "configure_structlog",
    "correlation_id_processor",
    "generate_correlation_id",
    "get_component_logger",
    "get_correlation_id",
    "reset_correlation_id",
    "resolve_correlation_id",
    "set_correlation_id",
]
