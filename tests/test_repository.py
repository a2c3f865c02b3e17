"""Tests for the MongoDB-backed BugRepository, with the collection mocked."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import AutoReconnect

from src.core.errors import StorageError
from src.repository import BugRepository

BUG_ID = "507f1f77bcf86cd799439011"


def _cursor(docs):
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.to_list = AsyncMock(return_value=docs)
    return cursor


@pytest.mark.asyncio
async def test_find_applies_query_and_sort():
    collection = MagicMock()
    collection.find.return_value = _cursor([{"_id": ObjectId(BUG_ID)}])
    repository = BugRepository(collection)

    docs = await repository.find({"status": "open"}, [("created_at", -1)])

    collection.find.assert_called_once_with({"status": "open"})
    collection.find.return_value.sort.assert_called_once_with([("created_at", -1)])
    assert docs == [{"_id": ObjectId(BUG_ID)}]


@pytest.mark.asyncio
async def test_find_by_id_queries_object_id():
    collection = MagicMock()
    collection.find_one = AsyncMock(return_value=None)

    assert await BugRepository(collection).find_by_id(BUG_ID) is None
    collection.find_one.assert_awaited_once_with({"_id": ObjectId(BUG_ID)})


@pytest.mark.asyncio
async def test_insert_returns_document_with_id():
    collection = MagicMock()
    collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id=ObjectId(BUG_ID)))
    fields = {"title": "Crash"}

    doc = await BugRepository(collection).insert(fields)

    assert doc == {"title": "Crash", "_id": ObjectId(BUG_ID)}
    assert fields == {"title": "Crash"}


@pytest.mark.asyncio
async def test_update_builds_set_and_unset():
    collection = MagicMock()
    collection.find_one_and_update = AsyncMock(return_value={"_id": ObjectId(BUG_ID)})

    await BugRepository(collection).update_by_id(BUG_ID, {"status": "closed"}, ["assigned_to"])

    collection.find_one_and_update.assert_awaited_once_with(
        {"_id": ObjectId(BUG_ID)},
        {"$set": {"status": "closed"}, "$unset": {"assigned_to": ""}},
        return_document=ReturnDocument.AFTER,
    )


@pytest.mark.asyncio
async def test_delete_reports_whether_a_document_was_removed():
    collection = MagicMock()
    collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=0))

    assert await BugRepository(collection).delete_by_id(BUG_ID) is False


@pytest.mark.asyncio
async def test_aggregate_count_by_groups_on_field():
    collection = MagicMock()
    collection.aggregate.return_value = _cursor([
        {"_id": "high", "count": 2},
        {"_id": "low", "count": 1},
    ])

    groups = await BugRepository(collection).aggregate_count_by("priority")

    pipeline = collection.aggregate.call_args.args[0]
    assert pipeline[0] == {"$group": {"_id": "$priority", "count": {"$sum": 1}}}
    assert groups == [{"value": "high", "count": 2}, {"value": "low", "count": 1}]


@pytest.mark.asyncio
async def test_driver_errors_become_storage_errors():
    collection = MagicMock()
    collection.find_one = AsyncMock(side_effect=AutoReconnect("connection reset"))

    with pytest.raises(StorageError) as exc_info:
        await BugRepository(collection).find_by_id(BUG_ID)

    assert exc_info.value.status_code == 500
    assert "connection reset" not in exc_info.value.message
