"""Domain layer for Tracker Core.

Pure rules with no I/O: models, errors, and deterministic domain services.
"""

from tracker.domain.exceptions import TrackerError

__all__: list[str] = ["TrackerError"]
