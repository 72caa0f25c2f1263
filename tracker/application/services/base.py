"""Logging mixin shared by the tracker services.

Each service logs under a component name and binds one logger per
operation. Ids passed as None (an anonymous actor, a ticket not yet
created) are left off the line rather than logged as null.
"""

import structlog

from tracker.infrastructure.observability.correlation import get_correlation_id
from tracker.infrastructure.observability.logging import get_component_logger


class LoggingMixin:
    """Structured logging for services.

    Attributes:
        _log: Logger bound with ``service`` (class name) and ``component``.
    """

    _log: structlog.BoundLogger

    def _init_logger(self, component: str = "core") -> None:
        self._log = get_component_logger(component, service=type(self).__name__)

    def _log_operation(
        self,
        operation: str,
        **context: object,
    ) -> structlog.BoundLogger:
        """Logger for one operation, carrying its ids and the correlation id.

        Args:
            operation: Operation name, e.g. "move" or "delete_project".
            **context: Ids and details; None values are dropped.
        """
        bound = {key: value for key, value in context.items() if value is not None}
        correlation_id = get_correlation_id()
        if correlation_id:
            bound["correlation_id"] = correlation_id
        return self._log.bind(operation=operation, **bound)

    def _log_collaborator_failure(
        self,
        operation: str,
        event: str,
        exc: Exception,
        **context: object,
    ) -> None:
        """Warn about a best-effort collaborator call that failed and was skipped."""
        self._log_operation(operation, **context).warning(
            event,
            error=str(exc),
            error_type=type(exc).__name__,
        )
