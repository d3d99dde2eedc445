"""
/api/compliance/* -- The compliance metrics time series.

The "current" metric is simply the newest entry. History is everything
inside the trailing N calendar months, oldest first, ready for a chart.
"""

import logging

from fastapi import APIRouter, HTTPException, Query

from eudr_api.deps import CurrentUser, StorageDep
from eudr_api.models.schemas import ComplianceMetric, ComplianceMetricCreate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/compliance", tags=["Dashboard"])


@router.get(
    "/history",
    response_model=list[ComplianceMetric],
    summary="Compliance history",
    description="Metrics from the last `months` calendar months, oldest first.",
)
async def compliance_history(
    storage: StorageDep,
    user: CurrentUser,
    months: int = Query(default=6, ge=0, le=120, description="0 means the default window."),
) -> list[ComplianceMetric]:
    return storage.get_compliance_history(months or 6)


@router.get("/current", response_model=ComplianceMetric, summary="Latest compliance metrics")
async def current_compliance(storage: StorageDep, user: CurrentUser) -> ComplianceMetric:
    metrics = storage.get_current_compliance_metrics()
    if metrics is None:
        raise HTTPException(status_code=404, detail="No compliance metrics recorded yet")
    return metrics


@router.post(
    "/metrics",
    response_model=ComplianceMetric,
    status_code=201,
    summary="Record a compliance snapshot",
)
async def record_metrics(
    body: ComplianceMetricCreate, storage: StorageDep, user: CurrentUser,
) -> ComplianceMetric:
    metric = storage.create_compliance_metrics(body)
    logger.info(
        "Compliance snapshot %d recorded: overall=%d issues=%d",
        metric.id, metric.overall_compliance, metric.issues_detected,
    )
    return metric
