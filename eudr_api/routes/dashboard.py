"""
GET /api/dashboard -- Everything the landing page needs in one call.

Unlike the rest of the API this is a read-only composite: the latest
compliance metric, the risk chart, the newest activity, the next tasks,
the first few suppliers and the declaration counters. Every part is read
fresh from the store.
"""

from fastapi import APIRouter

from eudr_api import config
from eudr_api.deps import CurrentUser, StorageDep
from eudr_api.models.schemas import DashboardData

router = APIRouter()


@router.get(
    "/api/dashboard",
    response_model=DashboardData,
    summary="Dashboard data",
    tags=["Dashboard"],
)
async def dashboard(storage: StorageDep, user: CurrentUser) -> DashboardData:
    limit = config.DASHBOARD_LIST_LIMIT
    return DashboardData(
        metrics=storage.get_current_compliance_metrics(),
        risk_categories=storage.list_risk_categories(),
        recent_activities=storage.list_recent_activities(limit),
        upcoming_tasks=storage.list_upcoming_tasks(limit),
        suppliers=storage.list_suppliers()[:limit],
        declaration_stats=storage.get_declaration_stats(),
    )
