"""Bug endpoints - list, stats, get, create, update, delete."""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query

from ..core.validation import (
    ensure_valid,
    parse_sort,
    validate_bug_id,
    validate_create_payload,
    validate_list_query,
    validate_update_payload,
)
from ..models import BugCreate, BugUpdate
from ..repository import BugStore, get_bug_repository
from ..services import BugBroadcaster, BugService, get_broadcaster

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/bugs", tags=["bugs"])


async def get_bug_service(
    repository: BugStore = Depends(get_bug_repository),
    broadcaster: BugBroadcaster = Depends(get_broadcaster),
) -> BugService:
    return BugService(repository, broadcaster)


def valid_bug_id(bug_id: str) -> str:
    """Path dependency rejecting ids that are not ObjectId-shaped."""
    ensure_valid(validate_bug_id(bug_id))
    return bug_id


@router.get("")
async def list_bugs(
    status: Optional[str] = Query(default=None),
    priority: Optional[str] = Query(default=None),
    sort_by: Optional[str] = Query(default=None, alias="sortBy"),
    service: BugService = Depends(get_bug_service),
):
    """List bugs, optionally filtered by status and priority. Newest first by default."""
    ensure_valid(validate_list_query(status, priority))
    sort = parse_sort(sort_by)

    bugs = await service.list_bugs(status=status, priority=priority, sort=sort)
    return {"success": True, "count": len(bugs), "data": bugs}


@router.get("/stats")
async def bug_stats(service: BugService = Depends(get_bug_service)):
    """Bug counts grouped by status and by priority."""
    stats = await service.bug_stats()
    return {"success": True, "data": stats}


@router.get("/{bug_id}")
async def get_bug(
    bug_id: str = Depends(valid_bug_id),
    service: BugService = Depends(get_bug_service),
):
    bug = await service.get_bug(bug_id)
    return {"success": True, "data": bug}


@router.post("", status_code=201)
async def create_bug(
    payload: Any = Body(default=None),
    service: BugService = Depends(get_bug_service),
):
    """
    Create a bug.

    Every violation in the body is reported at once. Status defaults to
    "open" and priority to "medium" when not given.
    """
    ensure_valid(validate_create_payload(payload))

    bug = await service.create_bug(BugCreate.model_validate(payload))
    return {"success": True, "data": bug}


@router.put("/{bug_id}")
async def update_bug(
    bug_id: str = Depends(valid_bug_id),
    payload: Any = Body(default=None),
    service: BugService = Depends(get_bug_service),
):
    """
    Partially update a bug. Only the fields present in the body change;
    sending assignedTo as null or "" unassigns the bug.
    """
    ensure_valid(validate_update_payload(payload))
    if "reporter" in payload:
        logger.debug(f"Ignoring reporter in update of bug {bug_id}; reporter is immutable")

    bug = await service.update_bug(bug_id, BugUpdate.model_validate(payload))
    return {"success": True, "data": bug}


@router.delete("/{bug_id}")
async def delete_bug(
    bug_id: str = Depends(valid_bug_id),
    service: BugService = Depends(get_bug_service),
):
    message = await service.delete_bug(bug_id)
    return {"success": True, "message": message}
