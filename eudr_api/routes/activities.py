"""
GET /api/activities -- The activity (audit) log.

Every mutating route writes its primary record first and then an activity
entry describing it, as two separate store calls. If the second write
fails the record stays and the log is missing that line; the failure is
logged and re-raised so it surfaces as a 500.
"""

import logging

from fastapi import APIRouter, Query

from eudr_api.deps import CurrentUser, StorageDep
from eudr_api.models.schemas import Activity, ActivityCreate, User
from eudr_api.store import Storage

logger = logging.getLogger(__name__)

router = APIRouter()


def record_activity(
    storage: Storage,
    user: User,
    type: str,
    description: str,
    entity_type: str | None = None,
    entity_id: int | None = None,
) -> Activity:
    """Append one entry to the activity log on behalf of user."""
    try:
        return storage.create_activity(ActivityCreate(
            type=type,
            description=description,
            user_id=user.id,
            entity_type=entity_type,
            entity_id=entity_id,
        ))
    except Exception:
        logger.exception(
            "Activity log write failed after %s %s was saved; log is missing: %s",
            entity_type, entity_id, description,
        )
        raise


@router.get(
    "/api/activities",
    response_model=list[Activity],
    summary="Recent activity",
    description="Most recent activity log entries, newest first.",
    tags=["Activity"],
)
async def list_activities(
    storage: StorageDep,
    user: CurrentUser,
    limit: int = Query(default=10, ge=0, le=500, description="Maximum entries to return. 0 means the default."),
) -> list[Activity]:
    return storage.list_recent_activities(limit or 10)
