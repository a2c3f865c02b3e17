"""
Seed the bugs collection with sample bug reports for local development.

Uses synchronous pymongo so it can be run as a standalone script without
an async event loop. Each sample goes through the same sanitization and
Bug model checks as the API.

Usage (from project root):

  # Insert the sample bugs into local Mongo
  python scripts/seed_bugs.py

  # Wipe the collection first
  python scripts/seed_bugs.py --reset

Environment variables:
  MONGO_URL  - MongoDB connection string (default: mongodb://localhost:27017)
  MONGO_DB   - Database name            (default: bug_tracker)
"""

import argparse
import os
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, List

from pymongo import MongoClient
from pymongo.errors import PyMongoError

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.core.validators import sanitize_input  # noqa: E402
from src.models import Bug, utc_now  # noqa: E402

SAMPLE_BUGS = [
    {
        "title": "Login button not working",
        "description": "Users cannot click the login button on mobile devices",
        "priority": "high",
        "reporter": "John Doe",
        "tags": ["frontend", "mobile"],
    },
    {
        "title": "Dashboard loads slowly",
        "description": "The dashboard takes more than ten seconds to render for large accounts",
        "status": "in-progress",
        "priority": "medium",
        "reporter": "Jane Smith",
        "assigned_to": "Alex Kim",
        "tags": ["performance"],
    },
    {
        "title": "Typo on pricing page",
        "description": "The word 'subscription' is misspelled in the pricing table header",
        "status": "resolved",
        "priority": "low",
        "reporter": "Sam Lee",
    },
    {
        "title": "Payments fail for EU cards",
        "description": "Checkout returns a 500 error when the card was issued in the EU",
        "priority": "critical",
        "reporter": "Maria Garcia",
        "assigned_to": "Chris Park",
        "tags": ["backend", "payments"],
    },
]


def build_bugs(samples: List[Dict], now: datetime) -> List[Dict]:
    """Build validated bug documents ready for insertion, oldest first."""
    docs = []
    for index, sample in enumerate(samples):
        created_at = now - timedelta(hours=len(samples) - 1 - index)
        bug = Bug(
            title=sanitize_input(sample["title"]),
            description=sanitize_input(sample["description"]),
            status=sample.get("status", "open"),
            priority=sample.get("priority", "medium"),
            reporter=sanitize_input(sample["reporter"]),
            assigned_to=sanitize_input(sample.get("assigned_to")),
            tags=sample.get("tags", []),
            created_at=created_at,
            updated_at=created_at,
        )
        docs.append(bug.to_doc())
    return docs


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed sample bugs into MongoDB.")
    parser.add_argument("--reset", action="store_true", help="Delete existing bugs before seeding")
    args = parser.parse_args()

    mongo_url = os.getenv("MONGO_URL", "mongodb://localhost:27017")
    db_name = os.getenv("MONGO_DB", "bug_tracker")

    # Redact password in displayed URI for safety
    display_url = mongo_url
    if "@" in mongo_url:
        prefix, rest = mongo_url.split("@", 1)
        scheme_end = prefix.find("://")
        if scheme_end != -1:
            display_url = f"{prefix[:scheme_end + 3]}***:***@{rest}"

    print(f"Connecting to MongoDB: {display_url}")
    print(f"Database: {db_name}\n")

    try:
        client = MongoClient(mongo_url, serverSelectionTimeoutMS=5000)
        client.admin.command("ping")
    except PyMongoError as exc:
        print(f"ERROR: Could not connect to MongoDB: {exc}", file=sys.stderr)
        return 1

    db = client[db_name]

    if args.reset:
        deleted = db.bugs.delete_many({}).deleted_count
        print(f"Removed {deleted} existing bugs")

    docs = build_bugs(SAMPLE_BUGS, utc_now())
    result = db.bugs.insert_many(docs)
    print(f"Inserted {len(result.inserted_ids)} bugs\n")

    print("Bugs by status:")
    for group in db.bugs.aggregate([{"$group": {"_id": "$status", "count": {"$sum": 1}}}]):
        print(f"  {group['_id']}: {group['count']}")

    client.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
