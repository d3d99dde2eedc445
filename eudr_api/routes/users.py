"""GET /api/users -- Everyone with an account, without passwords."""

from fastapi import APIRouter

from eudr_api.deps import CurrentUser, StorageDep
from eudr_api.models.schemas import UserPublic
from eudr_api.routes.auth import to_public

router = APIRouter()


@router.get(
    "/api/users",
    response_model=list[UserPublic],
    summary="List users",
    tags=["Auth"],
)
async def list_users(storage: StorageDep, user: CurrentUser) -> list[UserPublic]:
    return [to_public(u) for u in storage.list_users()]
