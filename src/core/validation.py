"""Request validation for bug payloads, ids and list queries.

Each validator returns every violation it finds, in field order. An empty
list means the request is accepted. Nothing here rewrites the payload;
sanitization happens later, in the bug service.
"""

import re
from typing import Any, Mapping

from bson import ObjectId

from .errors import ValidationError
from .validators import is_valid_priority, is_valid_status

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 200
DESCRIPTION_MIN_LENGTH = 10

# Wire name -> stored field name for sortBy
SORTABLE_FIELDS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "title": "title",
    "status": "status",
    "priority": "priority",
    "reporter": "reporter",
    "assignedTo": "assigned_to",
}
DEFAULT_SORT = "-createdAt"


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _check_title(value: Any, required: bool) -> list[str]:
    if required and _is_blank(value):
        return ["Title is required"]
    if not isinstance(value, str) or not (
        TITLE_MIN_LENGTH <= len(value.strip()) <= TITLE_MAX_LENGTH
    ):
        return [f"Title must be {TITLE_MIN_LENGTH}-{TITLE_MAX_LENGTH} characters"]
    return []


def _check_description(value: Any, required: bool) -> list[str]:
    if required and _is_blank(value):
        return ["Description is required"]
    if not isinstance(value, str) or len(value.strip()) < DESCRIPTION_MIN_LENGTH:
        return [f"Description must be at least {DESCRIPTION_MIN_LENGTH} characters"]
    return []


def _check_optional_fields(payload: Mapping[str, Any]) -> list[str]:
    """Rules shared by create and update for the optional fields."""
    errors = []

    if "status" in payload and not is_valid_status(payload["status"]):
        errors.append("Invalid status")

    if "priority" in payload and not is_valid_priority(payload["priority"]):
        errors.append("Invalid priority")

    assigned_to = payload.get("assignedTo")
    if assigned_to is not None and not isinstance(assigned_to, str):
        errors.append("Assigned to must be a string")

    if "tags" in payload:
        tags = payload["tags"]
        if not isinstance(tags, list):
            errors.append("Tags must be an array")
        elif not all(isinstance(tag, str) for tag in tags):
            errors.append("Tags must contain only strings")

    return errors


def validate_create_payload(payload: Any) -> list[str]:
    """Collect every violation in a bug creation payload."""
    if not isinstance(payload, Mapping):
        return ["Request body must be a JSON object"]

    errors = []
    errors += _check_title(payload.get("title"), required=True)
    errors += _check_description(payload.get("description"), required=True)
    reporter = payload.get("reporter")
    if not isinstance(reporter, str) or not reporter.strip():
        errors.append("Reporter name is required")
    errors += _check_optional_fields(payload)
    return errors


def validate_update_payload(payload: Any) -> list[str]:
    """Collect every violation in a partial bug update payload."""
    if not isinstance(payload, Mapping):
        return ["Request body must be a JSON object"]

    errors = []
    if "title" in payload:
        errors += _check_title(payload["title"], required=False)
    if "description" in payload:
        errors += _check_description(payload["description"], required=False)
    errors += _check_optional_fields(payload)
    return errors


def is_valid_bug_id(bug_id: Any) -> bool:
    """Check that an id is a 24-character hex ObjectId string.

    ObjectId.is_valid also accepts 12-byte bytes and ObjectId instances;
    only strings come from a request path.
    """
    return isinstance(bug_id, str) and ObjectId.is_valid(bug_id)


def validate_bug_id(bug_id: Any) -> list[str]:
    if not is_valid_bug_id(bug_id):
        return ["Invalid bug ID format"]
    return []


def parse_sort(sort_by: str | None) -> list[tuple[str, int]]:
    """
    Turn a sortBy expression like "-createdAt priority" into a
    pymongo sort specification.

    Keys may be separated by spaces or commas; a leading "-" sorts
    descending. Raises ValidationError on unknown keys.
    """
    expression = sort_by if sort_by and sort_by.strip() else DEFAULT_SORT

    spec = []
    errors = []
    for key in re.split(r"[\s,]+", expression.strip()):
        direction = 1
        name = key
        if key.startswith("-"):
            direction = -1
            name = key[1:]
        elif key.startswith("+"):
            name = key[1:]

        field = SORTABLE_FIELDS.get(name)
        if field is None:
            errors.append(f"Invalid sort field: {name}")
            continue
        spec.append((field, direction))

    if errors:
        raise ValidationError(errors)
    return spec


def validate_list_query(status: str | None, priority: str | None) -> list[str]:
    """Check the optional equality filters of a list query."""
    errors = []
    if status and not is_valid_status(status):
        errors.append("Invalid status")
    if priority and not is_valid_priority(priority):
        errors.append("Invalid priority")
    return errors


def ensure_valid(errors: list[str]) -> None:
    """Raise a single ValidationError carrying every violation."""
    if errors:
        raise ValidationError(errors)
