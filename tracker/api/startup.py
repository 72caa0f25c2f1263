"""Startup configuration for the Tracker Core API."""

from tracker.config.tracker_config import TrackerConfig
from tracker.infrastructure.observability import configure_structlog, get_component_logger


def configure_logging(config: TrackerConfig | None = None) -> None:
    """Configure structured logging before anything else logs.

    TRACKER_ENVIRONMENT picks the renderer: JSON lines in production,
    console output elsewhere. LOG_LEVEL picks the level.
    """
    config = config or TrackerConfig.from_environment()
    configure_structlog(environment=config.environment)

    get_component_logger("api").info(
        "structured_logging_configured",
        environment=config.environment,
        page_size=config.page_size,
        store_timeout_seconds=config.store_timeout_seconds,
    )
