"""Domain errors for Tracker Core.

Provides specific exception classes for each failure scenario.
All exceptions inherit from TrackerError.
"""

from tracker.domain.errors.authorization import (
    AuthorizationError,
    DenialReason,
    InsufficientRoleError,
    NotAMemberError,
    OwnerProtectedError,
    RankTooHighError,
    SelfModificationError,
    UnauthenticatedError,
)
from tracker.domain.errors.concurrent_modification import ConflictError
from tracker.domain.errors.invariant import InvariantViolatedError
from tracker.domain.errors.store import NotFoundError, UnavailableError
from tracker.domain.errors.validation import ValidationFailedError

__all__: list[str] = [
    "AuthorizationError",
    "ConflictError",
    "DenialReason",
    "InsufficientRoleError",
    "InvariantViolatedError",
    "NotAMemberError",
    "NotFoundError",
    "OwnerProtectedError",
    "RankTooHighError",
    "SelfModificationError",
    "UnauthenticatedError",
    "UnavailableError",
    "ValidationFailedError",
]
