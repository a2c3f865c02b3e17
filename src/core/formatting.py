"""Response shaping for bug records."""

from datetime import datetime
from typing import Any, Mapping


def _isoformat(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def format_bug_response(bug: Mapping[str, Any]) -> dict:
    """
    Map a stored bug document to its public wire shape.

    The storage key `_id` is exposed as `id` and never appears itself;
    snake_case storage fields become the camelCase names clients use.
    """
    bug_id = bug.get("_id", bug.get("id"))
    return {
        "id": str(bug_id) if bug_id is not None else None,
        "title": bug.get("title"),
        "description": bug.get("description"),
        "status": bug.get("status"),
        "priority": bug.get("priority"),
        "reporter": bug.get("reporter"),
        "assignedTo": bug.get("assigned_to"),
        "tags": list(bug.get("tags") or []),
        "createdAt": _isoformat(bug.get("created_at")),
        "updatedAt": _isoformat(bug.get("updated_at")),
    }
