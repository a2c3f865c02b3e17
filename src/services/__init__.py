"""Bug record operations and change notifications."""

from .broadcast import BugBroadcaster, get_broadcaster
from .bug_service import BugService

__all__ = ["BugBroadcaster", "get_broadcaster", "BugService"]
