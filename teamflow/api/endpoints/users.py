from typing import Any, List

from fastapi import APIRouter, Depends

from teamflow.api.deps import get_current_user, get_storage
from teamflow.core.exceptions import AuthorizationError, NotFoundError
from teamflow.schemas.common import MessageResponse
from teamflow.schemas.user import PasswordChange, User, UserInDB, UserProfileUpdate
from teamflow.services import user as user_service
from teamflow.storage.base import Storage

router = APIRouter()


@router.get("", response_model=List[User])
async def read_users(
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    """
    Список пользователей (публичные поля), нужен для добавления в команду
    """
    return [user.public() for user in await storage.get_all_users()]


@router.get("/{user_id}", response_model=User)
async def read_user(
    user_id: int,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    user = await storage.get_user(user_id)
    if not user:
        raise NotFoundError("User not found")
    return user.public()


@router.put("/{user_id}", response_model=User)
async def update_user(
    *,
    user_id: int,
    user_in: UserProfileUpdate,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    """
    Обновление собственного профиля
    """
    if user_id != current_user.id:
        raise AuthorizationError("Not authorized to update this user")
    user = await user_service.update_profile(storage, user_id=user_id, obj_in=user_in)
    return user.public()


@router.put("/{user_id}/password", response_model=MessageResponse)
async def change_password(
    *,
    user_id: int,
    password_in: PasswordChange,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    if user_id != current_user.id:
        raise AuthorizationError("Not authorized to update this user")
    await user_service.change_password(storage, user=current_user, obj_in=password_in)
    return {"message": "Password updated successfully"}
