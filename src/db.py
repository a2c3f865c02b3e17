"""Database connection for the bug tracker."""

import logging
import os

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

logger = logging.getLogger(__name__)

# Global database instance
_client: AsyncIOMotorClient | None = None
_db: AsyncIOMotorDatabase | None = None


async def connect_db() -> AsyncIOMotorDatabase:
    """Connect to MongoDB and return the database."""
    global _client, _db

    if _db is not None:
        return _db

    mongo_url = os.getenv("MONGO_URL", "mongodb://localhost:27017")
    db_name = os.getenv("MONGO_DB", "bug_tracker")

    _client = AsyncIOMotorClient(mongo_url)
    _db = _client[db_name]

    # List queries filter on status/priority and sort newest first
    await _db.bugs.create_index([
        ("status", ASCENDING),
        ("priority", DESCENDING),
        ("created_at", DESCENDING),
    ])

    logger.info(f"MongoDB connected: database {db_name}")
    return _db


async def get_db() -> AsyncIOMotorDatabase:
    """Get the database instance."""
    global _db
    if _db is None:
        return await connect_db()
    return _db


async def close_db():
    """Close the database connection."""
    global _client, _db
    if _client:
        _client.close()
        _client = None
        _db = None
        logger.info("MongoDB disconnected")
