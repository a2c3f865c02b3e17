"""Data models for the bug tracker."""

from .bug import Bug, BugCreate, BugUpdate, BugStatus, BugPriority, schema_errors, utc_now

__all__ = ["Bug", "BugCreate", "BugUpdate", "BugStatus", "BugPriority", "schema_errors", "utc_now"]
