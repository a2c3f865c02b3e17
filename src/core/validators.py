"""Field validators and input sanitization for bug records."""

import re
from typing import Any

BUG_STATUSES = ("open", "in-progress", "resolved", "closed")
BUG_PRIORITIES = ("low", "medium", "high", "critical")

MAX_INPUT_LENGTH = 1000

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_status(status: Any) -> bool:
    """Check that a status is one of the known bug statuses."""
    return isinstance(status, str) and status in BUG_STATUSES


def is_valid_priority(priority: Any) -> bool:
    """Check that a priority is one of the known bug priorities."""
    return isinstance(priority, str) and priority in BUG_PRIORITIES


def is_valid_email(email: Any) -> bool:
    """Coarse local@domain.tld shape check, not RFC 5322."""
    if not isinstance(email, str):
        return False
    return _EMAIL_RE.match(email) is not None


def meets_min_length(value: Any, min_length: int) -> bool:
    """Check that a string is at least min_length characters once trimmed."""
    return isinstance(value, str) and len(value.strip()) >= min_length


def sanitize_input(value: Any) -> Any:
    """
    Sanitize free-text user input.

    Strips surrounding whitespace, removes angle brackets and caps the
    result at MAX_INPUT_LENGTH characters. Anything that is not a string
    is returned untouched.

    This only drops `<` and `>`; it is not a full HTML sanitizer.
    """
    if not isinstance(value, str):
        return value

    cleaned = value.strip().replace("<", "").replace(">", "")
    return cleaned[:MAX_INPUT_LENGTH]
