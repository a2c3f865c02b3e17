"""Storage access for bug documents.

BugStore is the contract the bug service depends on; BugRepository is the
MongoDB implementation. Driver failures surface as StorageError and are
never retried here.
"""

import logging
from contextlib import contextmanager
from typing import Any, Protocol

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from .core.errors import StorageError
from .db import get_db

logger = logging.getLogger(__name__)

SortSpec = list[tuple[str, int]]


class BugStore(Protocol):
    """Contract for bug persistence."""
    async def find(self, query: dict, sort: SortSpec | None = None) -> list[dict]: ...
    async def find_by_id(self, bug_id: str) -> dict | None: ...
    async def insert(self, fields: dict) -> dict: ...
    async def update_by_id(
        self, bug_id: str, set_fields: dict, unset_fields: list[str] | None = None,
    ) -> dict | None: ...
    async def delete_by_id(self, bug_id: str) -> bool: ...
    async def aggregate_count_by(self, field: str) -> list[dict]: ...


@contextmanager
def _storage_errors(operation: str):
    try:
        yield
    except PyMongoError as e:
        logger.error(f"Storage failure during {operation}: {e}")
        raise StorageError() from e


class BugRepository:
    """Bug persistence backed by a motor collection."""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def find(self, query: dict, sort: SortSpec | None = None) -> list[dict]:
        with _storage_errors("find"):
            cursor = self.collection.find(query)
            if sort:
                cursor = cursor.sort(sort)
            return await cursor.to_list(length=None)

    async def find_by_id(self, bug_id: str) -> dict | None:
        with _storage_errors("find_by_id"):
            return await self.collection.find_one({"_id": ObjectId(bug_id)})

    async def insert(self, fields: dict) -> dict:
        doc = dict(fields)
        with _storage_errors("insert"):
            result = await self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    async def update_by_id(
        self, bug_id: str, set_fields: dict, unset_fields: list[str] | None = None,
    ) -> dict | None:
        update: dict[str, Any] = {}
        if set_fields:
            update["$set"] = set_fields
        if unset_fields:
            update["$unset"] = {field: "" for field in unset_fields}
        if not update:
            return await self.find_by_id(bug_id)

        with _storage_errors("update_by_id"):
            return await self.collection.find_one_and_update(
                {"_id": ObjectId(bug_id)},
                update,
                return_document=ReturnDocument.AFTER,
            )

    async def delete_by_id(self, bug_id: str) -> bool:
        with _storage_errors("delete_by_id"):
            result = await self.collection.delete_one({"_id": ObjectId(bug_id)})
        return result.deleted_count == 1

    async def aggregate_count_by(self, field: str) -> list[dict]:
        """Count documents per distinct value of `field`."""
        pipeline = [
            {"$group": {"_id": f"${field}", "count": {"$sum": 1}}},
            {"$sort": {"_id": 1}},
        ]
        with _storage_errors("aggregate_count_by"):
            cursor = self.collection.aggregate(pipeline)
            groups = await cursor.to_list(length=None)
        return [{"value": group["_id"], "count": group["count"]} for group in groups]


async def get_bug_repository() -> BugStore:
    """FastAPI dependency returning the bug repository."""
    db = await get_db()
    return BugRepository(db.bugs)
