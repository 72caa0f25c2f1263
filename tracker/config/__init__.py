"""Configuration module for Tracker Core.

Available Configurations:
- TrackerConfig: Pagination, store timeouts, ordering precision, logging
"""

from tracker.config.tracker_config import (
    DEFAULT_TRACKER_CONFIG,
    TEST_TRACKER_CONFIG,
    TrackerConfig,
)

__all__ = [
    "DEFAULT_TRACKER_CONFIG",
    "TEST_TRACKER_CONFIG",
    "TrackerConfig",
]
