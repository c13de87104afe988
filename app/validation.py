"""
Field validation for task documents.

Candidate fields arrive in wire form (``dueDate``) and leave in storage form
(``due_date``). Validation always runs against the complete document that
would be stored, so an update is checked exactly like a create once the
supplied fields are merged onto the current values.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from app.errors import TaskValidationError
from app.models import TaskPriority, TaskStatus, ensure_utc

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500

STATUS_VALUES = [s.value for s in TaskStatus]
PRIORITY_VALUES = [p.value for p in TaskPriority]

# Storage values for a brand new task before the candidate is applied
TASK_DEFAULTS: dict[str, Any] = {
    "title": None,
    "description": "",
    "status": TaskStatus.PENDING.value,
    "priority": TaskPriority.MEDIUM.value,
    "due_date": None,
}


def parse_due_date(value: str) -> datetime:
    """
    Parse a due date string into a UTC datetime.

    Accepts calendar dates (``YYYY-MM-DD``) and full ISO-8601 datetimes,
    including a trailing ``Z``.

    Raises:
        TaskValidationError: If the string is not an ISO date, or its UTC
            equivalent falls outside years 1-9999.
    """
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as exc:
        raise TaskValidationError(
            "dueDate", "must be an ISO date (YYYY-MM-DD or YYYY-MM-DDTHH:MM:SS)"
        ) from exc
    try:
        return ensure_utc(parsed)
    except OverflowError as exc:
        raise TaskValidationError("dueDate", "is out of range once converted to UTC") from exc


def _text(fields: Mapping[str, Any], name: str) -> str | None:
    value = fields[name]
    if value is None:
        return None
    if not isinstance(value, str):
        raise TaskValidationError(name, "must be a string")
    return value.strip()


def _normalize(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Convert the recognised wire fields to storage form, ignoring the rest."""
    cleaned: dict[str, Any] = {}

    if "title" in fields:
        cleaned["title"] = _text(fields, "title")

    if "description" in fields:
        cleaned["description"] = _text(fields, "description") or ""

    for name in ("status", "priority"):
        if name in fields:
            cleaned[name] = fields[name]

    if "dueDate" in fields:
        due = fields["dueDate"]
        if due is None or due == "":
            cleaned["due_date"] = None
        elif isinstance(due, str):
            cleaned["due_date"] = parse_due_date(due)
        else:
            raise TaskValidationError("dueDate", "must be an ISO date string or null")

    return cleaned


def _check(record: Mapping[str, Any]) -> None:
    """Enforce the constraint table on a complete storage record."""
    title = record["title"]
    if not title:
        raise TaskValidationError("title", "is required")
    if len(title) > TITLE_MAX_LENGTH:
        raise TaskValidationError(
            "title", f"must be {TITLE_MAX_LENGTH} characters or less"
        )

    if len(record["description"]) > DESCRIPTION_MAX_LENGTH:
        raise TaskValidationError(
            "description", f"must be {DESCRIPTION_MAX_LENGTH} characters or less"
        )

    if record["status"] not in STATUS_VALUES:
        raise TaskValidationError(
            "status", f"must be one of: {', '.join(STATUS_VALUES)}"
        )

    if record["priority"] not in PRIORITY_VALUES:
        raise TaskValidationError(
            "priority", f"must be one of: {', '.join(PRIORITY_VALUES)}"
        )


def validate_task(
    fields: Any, base: Mapping[str, Any] | None = None
) -> dict[str, Any]:
    """
    Validate candidate task fields and return the record to store.

    Args:
        fields: Candidate fields in wire form. Unknown keys are ignored.
        base: Current storage values of the task being updated. When None
            the candidate is applied to the creation defaults.

    Returns:
        The complete, normalized storage record.

    Raises:
        TaskValidationError: If the merged record violates any constraint.
    """
    if not isinstance(fields, Mapping):
        raise TaskValidationError("body", "must be a JSON object")

    record = dict(TASK_DEFAULTS if base is None else base)
    record.update(_normalize(fields))
    _check(record)
    return record
