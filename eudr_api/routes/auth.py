"""
/api/auth/* -- Session login, logout and registration.

Login puts the user id in the signed session cookie; every other router
resolves it back to a user through deps.current_user. Passwords are
stored as pbkdf2_sha256 hashes and never leave the API.
"""

import logging

from fastapi import APIRouter, HTTPException, Request

from eudr_api.deps import SESSION_USER_KEY, StorageDep
from eudr_api.models.schemas import LoginRequest, User, UserCreate, UserPublic
from eudr_api.security import hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def to_public(user: User) -> UserPublic:
    """Strip the password before a user goes over the wire."""
    return UserPublic.model_validate(user.model_dump(exclude={"password"}))


@router.post(
    "/login",
    response_model=UserPublic,
    summary="Log in",
    description="Check username and password and start a session.",
)
async def login(body: LoginRequest, request: Request, storage: StorageDep) -> UserPublic:
    user = storage.get_user_by_username(body.username)
    if user is None:
        logger.info("Login failed: unknown username %r", body.username)
        raise HTTPException(status_code=401, detail="Invalid username")

    if not verify_password(body.password, user.password):
        logger.info("Login failed: bad password for user %d", user.id)
        raise HTTPException(status_code=401, detail="Invalid password")

    request.session.clear()
    request.session[SESSION_USER_KEY] = user.id
    logger.info("User %d logged in", user.id)
    return to_public(user)


@router.post("/logout", summary="Log out")
async def logout(request: Request) -> dict:
    request.session.clear()
    return {"success": True}


@router.get(
    "/user",
    response_model=UserPublic,
    summary="Current user",
    description="The logged-in user, or 401 when there is no session.",
)
async def session_user(request: Request, storage: StorageDep) -> UserPublic:
    user_id = request.session.get(SESSION_USER_KEY)
    user = storage.get_user(user_id) if user_id is not None else None
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return to_public(user)


@router.post(
    "/register",
    response_model=UserPublic,
    status_code=201,
    summary="Register a user",
    description="Create an account. Usernames and emails must be unused.",
)
async def register(body: UserCreate, storage: StorageDep) -> UserPublic:
    # Check-then-create: fine while every store call runs on the event loop.
    if storage.get_user_by_username(body.username):
        raise HTTPException(status_code=400, detail="Username already taken")
    if storage.get_user_by_email(body.email):
        raise HTTPException(status_code=400, detail="Email already registered")

    user = storage.create_user(
        body.model_copy(update={"password": hash_password(body.password)})
    )
    logger.info("Registered user %d (%s)", user.id, user.username)
    return to_public(user)
