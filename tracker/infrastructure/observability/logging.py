"""Structured logging for Tracker Core.

Every tracker log line carries the emitting ``component`` (projects,
members, tickets, ordering, sprints, comments, cascade, authorization,
store, api) so cascades and permission denials can be filtered per
concern. Production renders one JSON object per line; any other
environment renders colored console output.

Example production line:
    {
        "event": "ticket_moved",
        "level": "info",
        "timestamp": "2026-01-01T00:00:00.000000Z",
        "correlation_id": "uuid",
        "service": "TicketWorkflowService",
        "component": "tickets",
        "ticket_id": "...",
        "to_status": "done"
    }

The level comes from the ``level`` argument, else LOG_LEVEL, else INFO.
"""

import logging
import os
from typing import cast

import structlog
from structlog.typing import Processor

from tracker.infrastructure.observability.correlation import correlation_id_processor

LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_COMPONENT = "core"


def _resolve_level(level: str | None) -> int:
    level_name = (level or os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL)).upper()
    resolved = logging.getLevelName(level_name)
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_structlog(environment: str = "production", level: str | None = None) -> None:
    """Configure structlog once at startup.

    Args:
        environment: 'production' for JSON lines, anything else for console.
        level: Minimum level name; overrides LOG_LEVEL when given.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        cast(Processor, correlation_id_processor),
        structlog.processors.StackInfoRenderer(),
    ]

    if environment == "production":
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors += [
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_resolve_level(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_component_logger(
    component: str = DEFAULT_COMPONENT,
    service: str | None = None,
) -> structlog.BoundLogger:
    """Logger bound to a tracker component and, optionally, a service name."""
    log = structlog.get_logger().bind(component=component)
    if service is not None:
        log = log.bind(service=service)
    return log
