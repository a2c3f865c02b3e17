"""Tests for the Bug model and response formatting."""

from datetime import datetime, timedelta

import pytest
from bson import ObjectId
from pydantic import ValidationError

from src.core.formatting import format_bug_response
from src.models import Bug, BugCreate, BugUpdate, schema_errors, utc_now

WIRE_FIELDS = {
    "id", "title", "description", "status", "priority", "reporter",
    "assignedTo", "tags", "createdAt", "updatedAt",
}


def _stored_bug():
    return {
        "_id": ObjectId("507f1f77bcf86cd799439011"),
        "title": "Test Bug",
        "description": "Test Description",
        "status": "open",
        "priority": "high",
        "reporter": "John Doe",
        "assigned_to": "Jane Smith",
        "tags": ["frontend", "urgent"],
        "created_at": datetime(2024, 1, 1),
        "updated_at": datetime(2024, 1, 2),
    }


def test_format_bug_response():
    formatted = format_bug_response(_stored_bug())

    assert formatted == {
        "id": "507f1f77bcf86cd799439011",
        "title": "Test Bug",
        "description": "Test Description",
        "status": "open",
        "priority": "high",
        "reporter": "John Doe",
        "assignedTo": "Jane Smith",
        "tags": ["frontend", "urgent"],
        "createdAt": "2024-01-01T00:00:00",
        "updatedAt": "2024-01-02T00:00:00",
    }


def test_format_never_exposes_storage_id():
    doc = _stored_bug()
    formatted = format_bug_response(doc)

    assert "_id" not in formatted
    assert set(formatted) == WIRE_FIELDS
    assert formatted["id"] == str(doc["_id"])


def test_format_missing_optional_fields():
    doc = _stored_bug()
    del doc["assigned_to"]
    del doc["tags"]

    formatted = format_bug_response(doc)
    assert formatted["assignedTo"] is None
    assert formatted["tags"] == []


def test_bug_defaults():
    bug = Bug(title="Crash", description="App crashes on start", reporter="Sam")
    assert bug.status == "open"
    assert bug.priority == "medium"
    assert bug.tags == []
    assert bug.updated_at >= bug.created_at


def test_utc_now_has_millisecond_precision():
    assert utc_now().microsecond % 1000 == 0
    bug = Bug(title="Crash", description="App crashes on start", reporter="Sam")
    assert bug.created_at.microsecond % 1000 == 0


def test_payloads_bind_only_wire_names():
    payload = BugCreate.model_validate({
        "title": "Crash",
        "description": "App crashes on start",
        "reporter": "Sam",
        "assigned_to": "Mallory",
    })
    assert payload.assigned_to is None

    update = BugUpdate.model_validate({"assigned_to": 42})
    assert not update.is_set("assigned_to")


def test_bug_doc_round_trip():
    doc = _stored_bug()
    bug = Bug.from_doc(doc)

    assert bug.id == "507f1f77bcf86cd799439011"
    assert bug.to_doc() == doc
    assert bug.to_public() == format_bug_response(doc)


def test_bug_to_doc_without_id():
    bug = Bug(title="Crash", description="App crashes on start", reporter="Sam")
    doc = bug.to_doc()
    assert "_id" not in doc
    assert "assigned_to" not in doc


def test_bug_trims_text_and_tags():
    bug = Bug(
        title="  Crash  ",
        description="  App crashes on start  ",
        reporter=" Sam ",
        tags=[" ui ", "api"],
    )
    assert bug.title == "Crash"
    assert bug.description == "App crashes on start"
    assert bug.reporter == "Sam"
    assert bug.tags == ["ui", "api"]


def test_bug_schema_messages():
    with pytest.raises(ValidationError) as exc_info:
        Bug(title="ab", description="short", status="done", priority="urgent")

    assert schema_errors(exc_info.value) == [
        "Title must be at least 3 characters",
        "Description must be at least 10 characters",
        "'done' is not a valid status",
        "'urgent' is not a valid priority",
        "Reporter name is required",
    ]


def test_bug_rejects_long_title():
    with pytest.raises(ValidationError) as exc_info:
        Bug(title="a" * 201, description="long enough text", reporter="Sam")
    assert schema_errors(exc_info.value) == ["Title cannot exceed 200 characters"]


def test_bug_rejects_updated_before_created():
    created = datetime(2024, 1, 2)
    with pytest.raises(ValidationError):
        Bug(
            title="Crash",
            description="App crashes on start",
            reporter="Sam",
            created_at=created,
            updated_at=created - timedelta(seconds=1),
        )


def test_bug_update_tracks_presence():
    update = BugUpdate.model_validate({"status": "closed", "assignedTo": None})

    assert update.is_set("status")
    assert update.is_set("assigned_to")
    assert update.assigned_to is None
    assert not update.is_set("title")
    assert not update.is_set("tags")
