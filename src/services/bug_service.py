"""Bug record operations: list, get, create, update, delete and stats.

Payloads reaching this module have already been accepted by the request
validators. Free-text fields are sanitized here, and every write is checked
against the Bug model before it reaches storage.
"""

import logging
from datetime import datetime

from pydantic import ValidationError as SchemaValidationError

from .broadcast import BugBroadcaster
from ..core.errors import NotFoundError, ValidationError
from ..core.formatting import format_bug_response
from ..core.validators import sanitize_input
from ..models import Bug, BugCreate, BugUpdate, schema_errors, utc_now
from ..repository import BugStore, SortSpec

logger = logging.getLogger(__name__)

NEWEST_FIRST: SortSpec = [("created_at", -1)]


class BugService:
    """Orchestrates bug operations over a BugStore."""

    def __init__(self, repository: BugStore, broadcaster: BugBroadcaster | None = None):
        self.repository = repository
        self.broadcaster = broadcaster

    async def _publish(self, event: dict) -> None:
        if self.broadcaster is None:
            return
        event["timestamp"] = datetime.utcnow().isoformat()
        await self.broadcaster.broadcast(event)

    async def list_bugs(
        self,
        status: str | None = None,
        priority: str | None = None,
        sort: SortSpec | None = None,
    ) -> list[dict]:
        """Return every bug matching the filters; there is no pagination."""
        query = {}
        if status:
            query["status"] = status
        if priority:
            query["priority"] = priority

        logger.info(f"Fetching bugs with query: {query}")
        docs = await self.repository.find(query, sort or NEWEST_FIRST)
        return [format_bug_response(doc) for doc in docs]

    async def get_bug(self, bug_id: str) -> dict:
        doc = await self.repository.find_by_id(bug_id)
        if not doc:
            raise NotFoundError("Bug not found")
        return format_bug_response(doc)

    async def create_bug(self, payload: BugCreate) -> dict:
        """Sanitize, apply defaults, and persist a new bug."""
        now = utc_now()
        try:
            bug = Bug(
                title=sanitize_input(payload.title),
                description=sanitize_input(payload.description),
                status=payload.status or "open",
                priority=payload.priority or "medium",
                reporter=sanitize_input(payload.reporter),
                assigned_to=sanitize_input(payload.assigned_to) or None,
                tags=payload.tags or [],
                created_at=now,
                updated_at=now,
            )
        except SchemaValidationError as e:
            raise ValidationError(schema_errors(e)) from e

        doc = await self.repository.insert(bug.to_doc())
        logger.info(f"Bug created: {doc['_id']}")

        created = format_bug_response(doc)
        await self._publish({"type": "bug_created", "bug": created})
        return created

    async def update_bug(self, bug_id: str, payload: BugUpdate) -> dict:
        """Apply a sparse update; fields not sent stay as stored."""
        existing = await self.repository.find_by_id(bug_id)
        if not existing:
            raise NotFoundError("Bug not found")

        set_fields = {}
        unset_fields = []
        if payload.is_set("title"):
            set_fields["title"] = sanitize_input(payload.title)
        if payload.is_set("description"):
            set_fields["description"] = sanitize_input(payload.description)
        if payload.is_set("status"):
            set_fields["status"] = payload.status
        if payload.is_set("priority"):
            set_fields["priority"] = payload.priority
        if payload.is_set("assigned_to"):
            assignee = sanitize_input(payload.assigned_to)
            if assignee:
                set_fields["assigned_to"] = assignee
            else:
                unset_fields.append("assigned_to")
        if payload.is_set("tags"):
            set_fields["tags"] = [tag.strip() for tag in payload.tags]
        set_fields["updated_at"] = utc_now()

        # Check the merged record before writing anything
        merged = {**existing, **set_fields}
        for field in unset_fields:
            merged.pop(field, None)
        try:
            Bug.from_doc(merged)
        except SchemaValidationError as e:
            raise ValidationError(schema_errors(e)) from e

        logger.info(f"Updating bug {bug_id} with: {set_fields}, clearing: {unset_fields}")
        doc = await self.repository.update_by_id(bug_id, set_fields, unset_fields)
        if not doc:
            raise NotFoundError("Bug not found")

        updated = format_bug_response(doc)
        await self._publish({"type": "bug_updated", "bug": updated})
        return updated

    async def delete_bug(self, bug_id: str) -> str:
        existing = await self.repository.find_by_id(bug_id)
        if not existing:
            raise NotFoundError("Bug not found")

        logger.info(f"Deleting bug: {bug_id}")
        if not await self.repository.delete_by_id(bug_id):
            raise NotFoundError("Bug not found")

        await self._publish({"type": "bug_deleted", "id": bug_id})
        return "Bug deleted successfully"

    async def bug_stats(self) -> dict:
        """Count bugs per status and per priority across the whole collection."""
        by_status = await self.repository.aggregate_count_by("status")
        by_priority = await self.repository.aggregate_count_by("priority")
        return {"byStatus": by_status, "byPriority": by_priority}
