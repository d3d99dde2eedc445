"""
FastAPI dependencies shared by every router.

get_storage hands out the store that create_app() attached to the app.
current_user resolves the session cookie to a User, or answers 401.
"""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Request

from eudr_api.models.schemas import User
from eudr_api.store import Storage

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_id"


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


StorageDep = Annotated[Storage, Depends(get_storage)]


def current_user(request: Request, storage: StorageDep) -> User:
    """Look up the logged-in user from the session.

    A session pointing at a user that no longer resolves is cleared and
    treated as logged out."""
    user_id = request.session.get(SESSION_USER_KEY)
    if user_id is None:
        raise HTTPException(status_code=401, detail="Unauthorized")

    user = storage.get_user(user_id)
    if user is None:
        logger.warning("Session refers to unknown user %s, clearing it", user_id)
        request.session.clear()
        raise HTTPException(status_code=401, detail="Unauthorized")

    return user


CurrentUser = Annotated[User, Depends(current_user)]
