"""Domain primitives: identifier validation and text sanitization."""

from tracker.domain.primitives.identifiers import (
    IDENTIFIER_PATTERN,
    identifier_errors,
    is_valid_identifier,
    require_identifiers,
)
from tracker.domain.primitives.sanitize import (
    sanitize_string,
    sanitize_value,
    sanitized_json,
)

__all__: list[str] = [
    "IDENTIFIER_PATTERN",
    "identifier_errors",
    "is_valid_identifier",
    "require_identifiers",
    "sanitize_string",
    "sanitize_value",
    "sanitized_json",
]
