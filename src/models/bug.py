"""Bug model and request payloads."""

from datetime import datetime
from typing import Literal, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ..core.formatting import format_bug_response
from ..core.validators import BUG_PRIORITIES, BUG_STATUSES

BugStatus = Literal["open", "in-progress", "resolved", "closed"]
BugPriority = Literal["low", "medium", "high", "critical"]

# Stored field name -> name used in messages
_FIELD_LABELS = {
    "title": "Bug title",
    "description": "Bug description",
    "reporter": "Reporter name",
    "assigned_to": "Assigned to",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}


def utc_now() -> datetime:
    """Naive UTC now, truncated to the millisecond precision MongoDB stores."""
    now = datetime.utcnow()
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


class Bug(BaseModel):
    """A bug report as stored in the bugs collection."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(default=None, alias="_id")
    title: str
    description: str
    status: str = "open"
    priority: str = "medium"
    reporter: str
    assigned_to: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("title", "description", "reporter", "assigned_to")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if isinstance(v, str) else v

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        if not v:
            raise ValueError("Bug title is required")
        if len(v) < 3:
            raise ValueError("Title must be at least 3 characters")
        if len(v) > 200:
            raise ValueError("Title cannot exceed 200 characters")
        return v

    @field_validator("description")
    @classmethod
    def check_description(cls, v: str) -> str:
        if not v:
            raise ValueError("Bug description is required")
        if len(v) < 10:
            raise ValueError("Description must be at least 10 characters")
        return v

    @field_validator("reporter")
    @classmethod
    def check_reporter(cls, v: str) -> str:
        if not v:
            raise ValueError("Reporter name is required")
        return v

    @field_validator("status")
    @classmethod
    def check_status(cls, v: str) -> str:
        if v not in BUG_STATUSES:
            raise ValueError(f"'{v}' is not a valid status")
        return v

    @field_validator("priority")
    @classmethod
    def check_priority(cls, v: str) -> str:
        if v not in BUG_PRIORITIES:
            raise ValueError(f"'{v}' is not a valid priority")
        return v

    @field_validator("tags")
    @classmethod
    def strip_tags(cls, v: list[str]) -> list[str]:
        return [tag.strip() for tag in v]

    @model_validator(mode="after")
    def check_timestamps(self) -> "Bug":
        if self.updated_at < self.created_at:
            raise ValueError("updatedAt cannot be earlier than createdAt")
        return self

    def to_doc(self) -> dict:
        """Convert to MongoDB document."""
        doc = self.model_dump(by_alias=True, exclude_none=True)
        if doc.get("_id"):
            doc["_id"] = ObjectId(doc["_id"])
        else:
            doc.pop("_id", None)
        return doc

    @classmethod
    def from_doc(cls, doc: dict) -> "Bug":
        """Create from MongoDB document."""
        doc = dict(doc)
        if doc.get("_id"):
            doc["_id"] = str(doc["_id"])
        return cls(**doc)

    def to_public(self) -> dict:
        """Return the public wire shape of this bug."""
        return format_bug_response(self.model_dump(by_alias=True))


def schema_errors(exc: ValidationError) -> list[str]:
    """Flatten a pydantic ValidationError into readable messages."""
    messages = []
    for error in exc.errors():
        field = str(error["loc"][0]) if error["loc"] else ""
        if error["type"] == "missing":
            messages.append(f"{_FIELD_LABELS.get(field, field)} is required")
            continue
        message = error["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        messages.append(message)
    return messages


class BugCreate(BaseModel):
    """
    Accepted payload for creating a bug.

    Only the wire name `assignedTo` binds; a body key `assigned_to` is ignored.
    """

    title: str
    description: str
    reporter: str
    status: Optional[BugStatus] = None
    priority: Optional[BugPriority] = None
    assigned_to: Optional[str] = Field(default=None, alias="assignedTo")
    tags: Optional[list[str]] = None


class BugUpdate(BaseModel):
    """
    Accepted payload for a partial bug update.

    Fields never sent are absent from `model_fields_set` and are left
    untouched. `assigned_to` sent as null or "" clears the assignee.
    `reporter` is not updatable and is not modelled here.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[BugStatus] = None
    priority: Optional[BugPriority] = None
    assigned_to: Optional[str] = Field(default=None, alias="assignedTo")
    tags: Optional[list[str]] = None

    def is_set(self, field: str) -> bool:
        return field in self.model_fields_set
