"""Identifier validation.

Every externally supplied identifier must match IDENTIFIER_PATTERN.
Malformed identifiers are rejected before any store call is made.

Usage:
    from tracker.domain.primitives.identifiers import require_identifiers

    require_identifiers(projectId=project_id, ticketId=ticket_id)
"""

from __future__ import annotations

import re

from tracker.domain.errors.validation import ValidationFailedError

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


def is_valid_identifier(value: object) -> bool:
    """Check a single value against the identifier pattern."""
    return isinstance(value, str) and IDENTIFIER_PATTERN.fullmatch(value) is not None


def identifier_errors(**identifiers: object) -> list[str]:
    """Collect a reason for every malformed identifier.

    None values are skipped so optional identifiers can be passed
    through unconditionally.

    Args:
        **identifiers: Identifier values keyed by their public field name.

    Returns:
        One reason per malformed identifier, in argument order.
    """
    return [
        f"Invalid {name} format"
        for name, value in identifiers.items()
        if value is not None and not is_valid_identifier(value)
    ]


def require_identifiers(**identifiers: object) -> None:
    """Raise ValidationFailedError if any identifier is malformed.

    Raises:
        ValidationFailedError: Listing every malformed identifier.
    """
    errors = identifier_errors(**identifiers)
    if errors:
        raise ValidationFailedError(errors)
