"""Core validation, sanitization and formatting for bug records."""

from .errors import BugTrackerError, ValidationError, NotFoundError, StorageError
from .formatting import format_bug_response
from .validators import (
    BUG_STATUSES,
    BUG_PRIORITIES,
    is_valid_status,
    is_valid_priority,
    is_valid_email,
    meets_min_length,
    sanitize_input,
)

__all__ = [
    "BugTrackerError",
    "ValidationError",
    "NotFoundError",
    "StorageError",
    "format_bug_response",
    "BUG_STATUSES",
    "BUG_PRIORITIES",
    "is_valid_status",
    "is_valid_priority",
    "is_valid_email",
    "meets_min_length",
    "sanitize_input",
]
