from typing import Any, List

from fastapi import APIRouter, Depends, status

from teamflow.api.deps import get_current_admin, get_storage
from teamflow.core.exceptions import ValidationError
from teamflow.schemas.common import MessageResponse
from teamflow.schemas.user import User, UserAdminUpdate, UserCreate, UserInDB
from teamflow.services import user as user_service
from teamflow.storage.base import Storage

router = APIRouter()


@router.get("/users", response_model=List[User])
async def read_users(
    storage: Storage = Depends(get_storage),
    current_admin: UserInDB = Depends(get_current_admin),
) -> Any:
    return [user.public() for user in await storage.get_all_users()]


@router.post("/users", response_model=User, status_code=status.HTTP_201_CREATED)
async def create_user(
    *,
    user_in: UserCreate,
    storage: Storage = Depends(get_storage),
    current_admin: UserInDB = Depends(get_current_admin),
) -> Any:
    """
    Создание пользователя администратором (с выбором глобальной роли)
    """
    user = await user_service.create_by_admin(storage, obj_in=user_in)
    return user.public()


@router.put("/users/{user_id}", response_model=User)
async def update_user(
    *,
    user_id: int,
    user_in: UserAdminUpdate,
    storage: Storage = Depends(get_storage),
    current_admin: UserInDB = Depends(get_current_admin),
) -> Any:
    user = await user_service.update_by_admin(storage, user_id=user_id, obj_in=user_in)
    return user.public()


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(
    *,
    user_id: int,
    storage: Storage = Depends(get_storage),
    current_admin: UserInDB = Depends(get_current_admin),
) -> Any:
    """
    Удаление пользователя; свой аккаунт удалить нельзя
    """
    if user_id == current_admin.id:
        raise ValidationError("Cannot delete your own account")
    await user_service.delete(storage, user_id=user_id)
    return {"message": "User deleted successfully"}
