"""Tracker Core configuration.

Environment-driven configuration with validated defaults.

Environment Variables:
- TRACKER_PAGE_SIZE: Page size when draining store listings (default: 500)
- TRACKER_STORE_TIMEOUT_SECONDS: Timeout per store call (default: 10.0)
- TRACKER_ORDER_PRECISION_DIGITS: Decimal digits a column key may use
  before the board needs renormalization (default: 4)
- TRACKER_ENVIRONMENT: 'production' for JSON logs, else console (default: production)
"""

from __future__ import annotations

import os
from dataclasses import dataclass


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable, falling back on missing/invalid."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    """Get float environment variable, falling back on missing/invalid."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class TrackerConfig:
    """Configuration for the tracker core services.

    Attributes:
        page_size: Page size used by every pagination drain.
        store_timeout_seconds: Caller-imposed timeout for each store call.
        order_precision_digits: Decimal digits allowed in an order key
            before renormalization is due.
        environment: Deployment environment, selects log rendering.
    """

    page_size: int = 500
    store_timeout_seconds: float = 10.0
    order_precision_digits: int = 4
    environment: str = "production"

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.page_size < 1:
            raise ValueError(f"page_size must be positive, got {self.page_size}")
        if self.store_timeout_seconds <= 0:
            raise ValueError(
                f"store_timeout_seconds must be positive, got {self.store_timeout_seconds}"
            )
        if not 1 <= self.order_precision_digits <= 12:
            raise ValueError(
                "order_precision_digits must be between 1 and 12, "
                f"got {self.order_precision_digits}"
            )

    @classmethod
    def from_environment(cls) -> TrackerConfig:
        """Create config from environment variables with defaults."""
        return cls(
            page_size=_get_int_env("TRACKER_PAGE_SIZE", 500),
            store_timeout_seconds=_get_float_env("TRACKER_STORE_TIMEOUT_SECONDS", 10.0),
            order_precision_digits=_get_int_env("TRACKER_ORDER_PRECISION_DIGITS", 4),
            environment=os.environ.get("TRACKER_ENVIRONMENT", "production"),
        )


DEFAULT_TRACKER_CONFIG = TrackerConfig()

# Small pages so tests exercise multi-page drains
TEST_TRACKER_CONFIG = TrackerConfig(
    page_size=2,
    store_timeout_seconds=1.0,
    environment="development",
)
