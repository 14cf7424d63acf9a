import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Response, status

from teamflow.api.deps import get_current_user, get_session_store, get_session_token, get_storage
from teamflow.core.config import settings
from teamflow.core.exceptions import AuthenticationError
from teamflow.schemas.auth import LoginRequest
from teamflow.schemas.common import MessageResponse
from teamflow.schemas.user import User, UserInDB, UserRegister
from teamflow.services import user as user_service
from teamflow.services.session import SessionStore
from teamflow.storage.base import Storage

logger = logging.getLogger(__name__)

router = APIRouter()


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_MAX_LIFETIME,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )


@router.post("/register", response_model=User, status_code=status.HTTP_201_CREATED)
async def register(
    *,
    response: Response,
    user_in: UserRegister,
    storage: Storage = Depends(get_storage),
    sessions: SessionStore = Depends(get_session_store),
) -> Any:
    """
    Регистрация нового пользователя, сразу открывает сессию
    """
    user = await user_service.register(storage, obj_in=user_in)
    set_session_cookie(response, await sessions.create(user.id))
    return user.public()


@router.post("/login", response_model=User)
async def login(
    *,
    response: Response,
    credentials: LoginRequest,
    storage: Storage = Depends(get_storage),
    sessions: SessionStore = Depends(get_session_store),
) -> Any:
    """
    Вход по username (или email) и паролю
    """
    user = await user_service.authenticate(storage, username=credentials.username, password=credentials.password)
    if not user:
        raise AuthenticationError("Invalid credentials")
    set_session_cookie(response, await sessions.create(user.id))
    logger.info("User %s logged in", user.id)
    return user.public()


@router.post("/logout", response_model=MessageResponse)
async def logout(
    *,
    response: Response,
    token: Optional[str] = Depends(get_session_token),
    sessions: SessionStore = Depends(get_session_store),
) -> Any:
    """
    Завершает текущую сессию
    """
    if token:
        await sessions.destroy(token)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=User)
async def read_current_user(current_user: UserInDB = Depends(get_current_user)) -> Any:
    """
    Текущий пользователь по cookie сессии
    """
    return current_user.public()
