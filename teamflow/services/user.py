import logging
from typing import Optional

from teamflow.core.config import settings
from teamflow.core.exceptions import ConflictError, NotFoundError, ValidationError
from teamflow.core.security import get_password_hash, verify_password
from teamflow.models.user import UserRole
from teamflow.schemas.user import (
    PasswordChange,
    UserAdminUpdate,
    UserCreate,
    UserInDB,
    UserProfileUpdate,
    UserRegister,
)
from teamflow.storage.base import Storage

logger = logging.getLogger(__name__)


async def _ensure_unique(
    storage: Storage, *, username: Optional[str] = None, email: Optional[str] = None, user_id: Optional[int] = None
) -> None:
    """Проверяет, что username и email не заняты другим пользователем"""
    if username is not None:
        existing = await storage.get_user_by_username(username)
        if existing and existing.id != user_id:
            raise ConflictError("Username already taken")
    if email is not None:
        existing = await storage.get_user_by_email(email)
        if existing and existing.id != user_id:
            raise ConflictError("Email already in use")


async def register(storage: Storage, *, obj_in: UserRegister) -> UserInDB:
    """Регистрирует нового пользователя с глобальной ролью member"""
    await _ensure_unique(storage, username=obj_in.username, email=obj_in.email)
    user = await storage.create_user(obj_in, get_password_hash(obj_in.password))
    logger.info("User %s registered (id=%s)", user.username, user.id)
    return user


async def create_by_admin(storage: Storage, *, obj_in: UserCreate) -> UserInDB:
    """Создает пользователя от имени администратора, роль задается явно"""
    await _ensure_unique(storage, username=obj_in.username, email=obj_in.email)
    user = await storage.create_user(obj_in, get_password_hash(obj_in.password))
    logger.info("Admin created user %s (id=%s, role=%s)", user.username, user.id, user.role.value)
    return user


async def authenticate(storage: Storage, *, username: str, password: str) -> Optional[UserInDB]:
    """
    Проверяет пользователя по username (или email) и паролю
    """
    user = await storage.get_user_by_username(username)
    if not user:
        user = await storage.get_user_by_email(username)

    if not user or not verify_password(password, user.password_hash):
        logger.warning("Failed login for %r", username)
        return None

    return user


async def update_profile(storage: Storage, *, user_id: int, obj_in: UserProfileUpdate) -> UserInDB:
    """Обновляет профиль пользователя"""
    data = obj_in.changes()
    await _ensure_unique(storage, email=data.get("email"), user_id=user_id)
    user = await storage.update_user(user_id, data)
    if not user:
        raise NotFoundError("User not found")
    return user


async def change_password(storage: Storage, *, user: UserInDB, obj_in: PasswordChange) -> None:
    """Меняет пароль после проверки текущего"""
    if not verify_password(obj_in.current_password, user.password_hash):
        raise ValidationError("Current password is incorrect")
    await storage.update_user(user.id, {"password_hash": get_password_hash(obj_in.new_password)})
    logger.info("User %s changed password", user.id)


async def update_by_admin(storage: Storage, *, user_id: int, obj_in: UserAdminUpdate) -> UserInDB:
    """Обновляет пользователя от имени администратора, включая роль и пароль"""
    data = obj_in.changes()
    await _ensure_unique(storage, username=data.get("username"), email=data.get("email"), user_id=user_id)

    # Хэшируем пароль, если он присутствует
    if "password" in data:
        data["password_hash"] = get_password_hash(data.pop("password"))

    user = await storage.update_user(user_id, data)
    if not user:
        raise NotFoundError("User not found")
    return user


async def delete(storage: Storage, *, user_id: int) -> None:
    """Удаляет пользователя вместе с его членством в командах"""
    if not await storage.delete_user(user_id):
        raise NotFoundError("User not found")
    logger.info("User %s deleted", user_id)


async def seed_first_admin(storage: Storage) -> Optional[UserInDB]:
    """Создает глобального администратора при старте, если задан пароль"""
    if not settings.FIRST_ADMIN_PASSWORD:
        return None
    if await storage.get_user_by_username(settings.FIRST_ADMIN_USERNAME):
        return None
    admin = await storage.create_user(
        UserCreate(
            username=settings.FIRST_ADMIN_USERNAME,
            email=settings.FIRST_ADMIN_EMAIL,
            password=settings.FIRST_ADMIN_PASSWORD,
            full_name="Administrator",
            role=UserRole.ADMIN,
        ),
        get_password_hash(settings.FIRST_ADMIN_PASSWORD),
    )
    logger.info("Seeded global admin %s", admin.username)
    return admin
