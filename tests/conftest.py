"""Shared fixtures: an in-memory bug store and a TestClient wired to it."""

import copy
import os
import sys
from collections import Counter
from datetime import datetime, timedelta

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from src.api.server import create_app
from src.repository import get_bug_repository


def _as_stored(fields: dict) -> dict:
    """Copy fields the way MongoDB keeps them: datetimes at millisecond precision."""
    stored = copy.deepcopy(fields)
    for key, value in stored.items():
        if isinstance(value, datetime):
            stored[key] = value.replace(microsecond=value.microsecond // 1000 * 1000)
    return stored


class InMemoryBugRepository:
    """BugStore kept in a dict, for tests that should not need MongoDB."""

    def __init__(self):
        self.docs: dict[ObjectId, dict] = {}

    def add(self, **fields) -> dict:
        """Insert a stored document directly, bypassing the service."""
        now = fields.pop("created_at", datetime.utcnow())
        doc = {
            "_id": ObjectId(),
            "status": "open",
            "priority": "medium",
            "tags": [],
            "created_at": now,
            "updated_at": fields.pop("updated_at", now),
            **fields,
        }
        self.docs[doc["_id"]] = _as_stored(doc)
        return copy.deepcopy(self.docs[doc["_id"]])

    async def find(self, query, sort=None):
        docs = [
            copy.deepcopy(doc) for doc in self.docs.values()
            if all(doc.get(key) == value for key, value in query.items())
        ]
        for field, direction in reversed(sort or []):
            docs.sort(
                key=lambda d: (d.get(field) is None, d.get(field)),
                reverse=direction < 0,
            )
        return docs

    async def find_by_id(self, bug_id):
        doc = self.docs.get(ObjectId(bug_id))
        return copy.deepcopy(doc) if doc else None

    async def insert(self, fields):
        doc = dict(fields)
        doc["_id"] = ObjectId()
        self.docs[doc["_id"]] = _as_stored(doc)
        return doc

    async def update_by_id(self, bug_id, set_fields, unset_fields=None):
        doc = self.docs.get(ObjectId(bug_id))
        if doc is None:
            return None
        doc.update(_as_stored(set_fields))
        for field in unset_fields or []:
            doc.pop(field, None)
        return copy.deepcopy(doc)

    async def delete_by_id(self, bug_id):
        return self.docs.pop(ObjectId(bug_id), None) is not None

    async def aggregate_count_by(self, field):
        counts = Counter(doc.get(field) for doc in self.docs.values())
        return [
            {"value": value, "count": count}
            for value, count in sorted(counts.items(), key=lambda item: str(item[0]))
        ]


@pytest.fixture
def repository():
    return InMemoryBugRepository()


@pytest.fixture
def app(repository):
    app = create_app()
    app.dependency_overrides[get_bug_repository] = lambda: repository
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def valid_bug():
    return {
        "title": "Login button not working",
        "description": "Users cannot click the login button on mobile devices",
        "priority": "high",
        "reporter": "John Doe",
    }


@pytest.fixture
def hours_ago():
    now = datetime.utcnow()
    return lambda hours: now - timedelta(hours=hours)
