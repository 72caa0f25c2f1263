"""HTML-entity sanitization for audit details and stored text.

Audit details are JSON snapshots of changed fields; every string in
them (keys included) is entity-escaped before it is persisted.
"""

from __future__ import annotations

import json
from typing import Any

_ENTITIES: tuple[tuple[str, str], ...] = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#x27;"),
    ("/", "&#x2F;"),
)


def sanitize_string(value: str) -> str:
    """Escape HTML-significant characters. Ampersand is escaped first."""
    for raw, entity in _ENTITIES:
        value = value.replace(raw, entity)
    return value


def sanitize_value(value: Any) -> Any:
    """Recursively sanitize strings inside dicts, lists and tuples."""
    if isinstance(value, str):
        return sanitize_string(value)
    if isinstance(value, dict):
        return {
            sanitize_string(str(key)): sanitize_value(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [sanitize_value(item) for item in value]
    return value


def sanitized_json(details: dict[str, Any]) -> str:
    """Serialize a details snapshot to sanitized JSON."""
    return json.dumps(sanitize_value(details), sort_keys=True)
