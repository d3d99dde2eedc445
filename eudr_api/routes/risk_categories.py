"""/api/risk-categories -- Reference scores shown on the dashboard risk chart."""

from fastapi import APIRouter, HTTPException

from eudr_api.deps import CurrentUser, StorageDep
from eudr_api.models.schemas import RiskCategory, RiskCategoryCreate

router = APIRouter(prefix="/api/risk-categories", tags=["Dashboard"])


@router.get("", response_model=list[RiskCategory], summary="List risk categories")
async def list_risk_categories(storage: StorageDep, user: CurrentUser) -> list[RiskCategory]:
    return storage.list_risk_categories()


@router.get("/{category_id}", response_model=RiskCategory, summary="Get a risk category")
async def get_risk_category(category_id: int, storage: StorageDep, user: CurrentUser) -> RiskCategory:
    category = storage.get_risk_category(category_id)
    if category is None:
        raise HTTPException(status_code=404, detail="Risk category not found")
    return category


@router.post("", response_model=RiskCategory, status_code=201, summary="Add a risk category")
async def create_risk_category(
    body: RiskCategoryCreate, storage: StorageDep, user: CurrentUser,
) -> RiskCategory:
    return storage.create_risk_category(body)
