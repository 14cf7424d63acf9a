from typing import AsyncGenerator, Optional

from fastapi import Depends, Request

from teamflow.core.config import settings
from teamflow.core.exceptions import AuthenticationError, AuthorizationError
from teamflow.db.session import AsyncSessionLocal
from teamflow.models.user import UserRole
from teamflow.schemas.user import UserInDB
from teamflow.services.session import SessionStore
from teamflow.storage.base import Storage
from teamflow.storage.database import DatabaseStorage


async def get_storage(request: Request) -> AsyncGenerator[Storage, None]:
    """
    Storage for one request: the shared in-memory store, or a DatabaseStorage
    over a fresh AsyncSession that is closed when the request ends.
    """
    if settings.STORAGE_BACKEND == "memory":
        yield request.app.state.storage
        return
    async with AsyncSessionLocal() as db:
        yield DatabaseStorage(db)


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_session_token(request: Request) -> Optional[str]:
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


async def get_current_user(
    token: Optional[str] = Depends(get_session_token),
    storage: Storage = Depends(get_storage),
    sessions: SessionStore = Depends(get_session_store),
) -> UserInDB:
    if not token:
        raise AuthenticationError()
    user_id = await sessions.get_user_id(token)
    if user_id is None:
        raise AuthenticationError()
    user = await storage.get_user(user_id)
    if user is None:
        # the account was deleted while the session was still alive
        await sessions.destroy(token)
        raise AuthenticationError()
    return user


async def get_current_admin(current_user: UserInDB = Depends(get_current_user)) -> UserInDB:
    if current_user.role != UserRole.ADMIN:
        raise AuthorizationError("Admin access required")
    return current_user
