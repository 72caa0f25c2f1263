"""Field-level validation for mutable entity fields.

Every validator collects all failing reasons before raising, so a caller
sees the full list of problems in one ValidationFailedError. Validators
return the normalized (trimmed, parsed) field values on success.

Limits:
- Ticket: title 5-200, description <= 10000, labels <= 50 chars each
- Project: name 3-100, key ^[A-Z]{2,5}$, description <= 2000
- Sprint: name 1-100, goal <= 2000, end_date >= start_date
- Comment: content 1-5000
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any

from tracker.domain.errors.validation import ValidationFailedError
from tracker.domain.models import comment as comment_model
from tracker.domain.models import sprint as sprint_model
from tracker.domain.models import ticket as ticket_model
from tracker.domain.models.role import ProjectRole
from tracker.domain.primitives.identifiers import is_valid_identifier

PROJECT_NAME_MIN_LENGTH = 3
PROJECT_NAME_MAX_LENGTH = 100
PROJECT_DESCRIPTION_MAX_LENGTH = 2_000
PROJECT_KEY_PATTERN = re.compile(r"^[A-Z]{2,5}$")

TICKET_UPDATABLE_FIELDS = frozenset(
    {"title", "description", "type", "priority", "labels", "due_date", "sprint_id"}
)
PROJECT_UPDATABLE_FIELDS = frozenset({"name", "description"})
SPRINT_UPDATABLE_FIELDS = frozenset({"name", "goal", "start_date", "end_date"})


def parse_iso_date(value: object) -> date | None:
    """Parse an ISO-8601 date or datetime string, None if it is not one."""
    if not isinstance(value, str) or not value:
        return None
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def _enum_value(enum_type: type[Enum], value: object) -> str | None:
    try:
        return enum_type(value).value
    except ValueError:
        return None


def _raise_if(reasons: list[str]) -> None:
    if reasons:
        raise ValidationFailedError(reasons)


def _reject_unknown(fields: Mapping[str, Any], allowed: frozenset[str], reasons: list[str]) -> None:
    for name in fields:
        if name not in allowed:
            reasons.append(f"Field '{name}' cannot be updated")


def validate_ticket_fields(fields: Mapping[str, Any], creating: bool = False) -> dict[str, Any]:
    """Validate and normalize ticket fields.

    Args:
        fields: Raw field values (only the supplied ones are checked,
            except that creation requires a title).
        creating: True for ticket creation, False for an update.

    Returns:
        Normalized field values.

    Raises:
        ValidationFailedError: Listing every failing field.
    """
    reasons: list[str] = []
    clean: dict[str, Any] = {}

    if not creating:
        _reject_unknown(fields, TICKET_UPDATABLE_FIELDS, reasons)
        if not fields:
            reasons.append("No valid update data provided")

    if "title" in fields or creating:
        title = fields.get("title")
        if not isinstance(title, str) or not (
            ticket_model.TITLE_MIN_LENGTH <= len(title.strip()) <= ticket_model.TITLE_MAX_LENGTH
        ):
            reasons.append(
                f"Title must be between {ticket_model.TITLE_MIN_LENGTH} and "
                f"{ticket_model.TITLE_MAX_LENGTH} characters"
            )
        else:
            clean["title"] = title.strip()

    if "description" in fields:
        description = fields["description"]
        if description is not None and not isinstance(description, str):
            reasons.append("Description must be a string")
        elif description and len(description) > ticket_model.DESCRIPTION_MAX_LENGTH:
            reasons.append(
                f"Description must be less than {ticket_model.DESCRIPTION_MAX_LENGTH} characters"
            )
        else:
            clean["description"] = description or ""

    if "type" in fields:
        value = _enum_value(ticket_model.TicketType, fields["type"])
        if value is None:
            reasons.append("Invalid ticket type")
        else:
            clean["type"] = value

    if "priority" in fields:
        value = _enum_value(ticket_model.TicketPriority, fields["priority"])
        if value is None:
            reasons.append("Invalid priority")
        else:
            clean["priority"] = value

    if "labels" in fields:
        labels = fields["labels"]
        if labels is None:
            clean["labels"] = []
        elif not isinstance(labels, (list, tuple)):
            reasons.append("Labels must be an array")
        elif not all(
            isinstance(label, str) and len(label) <= ticket_model.LABEL_MAX_LENGTH
            for label in labels
        ):
            reasons.append(
                f"Each label must be a string with max {ticket_model.LABEL_MAX_LENGTH} characters"
            )
        else:
            clean["labels"] = list(labels)

    if "due_date" in fields:
        due_date = fields["due_date"]
        if due_date and parse_iso_date(due_date) is None:
            reasons.append("Invalid due date format")
        else:
            clean["due_date"] = due_date or None

    for reference in ("sprint_id", "assignee_id"):
        if reference in fields:
            value = fields[reference]
            if value and not is_valid_identifier(value):
                reasons.append(f"Invalid {reference} format")
            else:
                clean[reference] = value or None

    _raise_if(reasons)
    return clean


def validate_project_fields(fields: Mapping[str, Any], creating: bool = False) -> dict[str, Any]:
    """Validate and normalize project fields.

    The project key is only accepted on creation; it is immutable afterwards.

    Raises:
        ValidationFailedError: Listing every failing field.
    """
    reasons: list[str] = []
    clean: dict[str, Any] = {}

    if not creating:
        if "key" in fields:
            reasons.append("Project key cannot be changed")
        _reject_unknown(
            {name: value for name, value in fields.items() if name != "key"},
            PROJECT_UPDATABLE_FIELDS,
            reasons,
        )
        if not fields:
            reasons.append("No valid update data provided")

    if "name" in fields or creating:
        name = fields.get("name")
        if not isinstance(name, str) or not (
            PROJECT_NAME_MIN_LENGTH <= len(name.strip()) <= PROJECT_NAME_MAX_LENGTH
        ):
            reasons.append(
                f"Project name must be between {PROJECT_NAME_MIN_LENGTH} and "
                f"{PROJECT_NAME_MAX_LENGTH} characters"
            )
        else:
            clean["name"] = name.strip()

    if creating:
        key = fields.get("key")
        if not isinstance(key, str) or not PROJECT_KEY_PATTERN.fullmatch(key):
            reasons.append("Project key must be 2-5 uppercase letters")
        else:
            clean["key"] = key

    if "description" in fields:
        description = fields["description"]
        if description is not None and not isinstance(description, str):
            reasons.append("Description must be a string")
        elif description and len(description) > PROJECT_DESCRIPTION_MAX_LENGTH:
            reasons.append(
                f"Description must be less than {PROJECT_DESCRIPTION_MAX_LENGTH} characters"
            )
        else:
            clean["description"] = (description or "").strip()

    _raise_if(reasons)
    return clean


def validate_sprint_fields(
    fields: Mapping[str, Any],
    creating: bool = False,
    current: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Validate and normalize sprint fields.

    ``status`` is never writable here: lifecycle transitions go through
    start() and complete() only.

    Args:
        fields: Raw field values.
        creating: True for sprint creation.
        current: Stored sprint document, used to check the date range
            when an update changes only one end of it.

    Raises:
        ValidationFailedError: Listing every failing field.
    """
    reasons: list[str] = []
    clean: dict[str, Any] = {}

    if "status" in fields:
        reasons.append("Sprint status can only change through start or complete")
    if not creating:
        _reject_unknown(
            {name: value for name, value in fields.items() if name != "status"},
            SPRINT_UPDATABLE_FIELDS,
            reasons,
        )
        if not fields:
            reasons.append("No valid update data provided")

    if "name" in fields or creating:
        name = fields.get("name")
        if not isinstance(name, str) or not (1 <= len(name.strip()) <= sprint_model.NAME_MAX_LENGTH):
            reasons.append(
                f"Sprint name must be between 1 and {sprint_model.NAME_MAX_LENGTH} characters"
            )
        else:
            clean["name"] = name.strip()

    if "goal" in fields:
        goal = fields["goal"]
        if goal is not None and not isinstance(goal, str):
            reasons.append("Goal must be a string")
        elif goal and len(goal) > sprint_model.GOAL_MAX_LENGTH:
            reasons.append(f"Goal must be less than {sprint_model.GOAL_MAX_LENGTH} characters")
        else:
            clean["goal"] = goal or ""

    dates: dict[str, date | None] = {}
    for name in ("start_date", "end_date"):
        if name in fields:
            raw = fields[name]
            parsed = parse_iso_date(raw)
            if raw and parsed is None:
                reasons.append(f"Invalid {name} format")
                continue
            clean[name] = raw or None
            dates[name] = parsed
        elif current is not None:
            dates[name] = parse_iso_date(current.get(name))

    start, end = dates.get("start_date"), dates.get("end_date")
    if start is not None and end is not None and end < start:
        reasons.append("Sprint end date must not be before its start date")

    _raise_if(reasons)
    return clean


def validate_comment_content(content: object) -> str:
    """Validate comment content and return it trimmed.

    Raises:
        ValidationFailedError: If content is missing or out of bounds.
    """
    if not isinstance(content, str) or not (
        comment_model.CONTENT_MIN_LENGTH
        <= len(content.strip())
        <= comment_model.CONTENT_MAX_LENGTH
    ):
        raise ValidationFailedError(
            [
                f"Content must be between {comment_model.CONTENT_MIN_LENGTH} and "
                f"{comment_model.CONTENT_MAX_LENGTH} characters"
            ]
        )
    return content.strip()


def parse_role(value: object) -> ProjectRole:
    """Parse a role supplied by a caller.

    Unlike stored roles (which fail closed to viewer), an unknown role in
    a request is a validation error.

    Raises:
        ValidationFailedError: If the role is not one of the four roles.
    """
    role = ProjectRole.parse(value) if isinstance(value, str) else None
    if role is None:
        raise ValidationFailedError(
            ["Invalid role. Must be one of: " + ", ".join(r.value for r in ProjectRole)]
        )
    return role
