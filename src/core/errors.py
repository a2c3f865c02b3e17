"""Error hierarchy for the bug tracker.

Every error carries the HTTP status it maps to; the API layer turns them
into the `{success: false, message}` envelope.
"""


class BugTrackerError(Exception):
    """Base exception for all bug tracker failures."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_response(self) -> dict:
        """Convert to the REST error envelope."""
        return {"success": False, "message": self.message}


class ValidationError(BugTrackerError):
    """Client sent a malformed id, field or query."""

    status_code = 400

    def __init__(self, errors: list[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__(", ".join(self.errors))


class NotFoundError(BugTrackerError):
    """Lookup by identifier found nothing."""

    status_code = 404


class StorageError(BugTrackerError):
    """The document store failed or timed out."""

    status_code = 500

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(message)
