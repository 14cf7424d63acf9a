"""
Tests for the user service: registration, authentication, profile and admin changes.
"""
from unittest.mock import patch

import pytest

from teamflow.core.exceptions import ConflictError, NotFoundError, ValidationError
from teamflow.core.security import verify_password
from teamflow.models.user import UserRole
from teamflow.schemas.user import PasswordChange, UserAdminUpdate, UserProfileUpdate, UserRegister
from teamflow.services import user as user_service


def registration(username: str, email: str = None) -> UserRegister:
    return UserRegister(
        username=username,
        password="secret123",
        email=email or f"{username}@mail.com",
        full_name=username.capitalize(),
    )


@pytest.mark.asyncio
async def test_register_hashes_password(storage):
    user = await user_service.register(storage, obj_in=registration("alice"))
    assert user.role == UserRole.MEMBER
    assert user.password_hash != "secret123"
    assert verify_password("secret123", user.password_hash)


@pytest.mark.asyncio
async def test_register_conflicts(storage):
    await user_service.register(storage, obj_in=registration("alice"))

    with pytest.raises(ConflictError, match="Username already taken"):
        await user_service.register(storage, obj_in=registration("alice", "new@mail.com"))
    with pytest.raises(ConflictError, match="Email already in use"):
        await user_service.register(storage, obj_in=registration("alice2", "alice@mail.com"))


@pytest.mark.asyncio
async def test_authenticate(storage):
    await user_service.register(storage, obj_in=registration("alice"))

    assert (await user_service.authenticate(storage, username="alice", password="secret123")).username == "alice"
    assert await user_service.authenticate(storage, username="alice", password="wrong") is None
    assert await user_service.authenticate(storage, username="ghost", password="secret123") is None


@pytest.mark.asyncio
async def test_update_profile_keeps_unset_fields(storage):
    user = await user_service.register(storage, obj_in=registration("alice"))
    updated = await user_service.update_profile(
        storage, user_id=user.id, obj_in=UserProfileUpdate(avatar="https://img/alice.png")
    )
    assert updated.avatar == "https://img/alice.png"
    assert updated.full_name == "Alice"
    assert updated.email == "alice@mail.com"


def test_profile_update_rejects_null_email():
    with pytest.raises(ValueError):
        UserProfileUpdate(email=None)


@pytest.mark.asyncio
async def test_change_password(storage):
    user = await user_service.register(storage, obj_in=registration("alice"))

    with pytest.raises(ValidationError):
        await user_service.change_password(
            storage, user=user, obj_in=PasswordChange(current_password="nope", new_password="newsecret")
        )

    await user_service.change_password(
        storage, user=user, obj_in=PasswordChange(current_password="secret123", new_password="newsecret")
    )
    assert await user_service.authenticate(storage, username="alice", password="newsecret")


@pytest.mark.asyncio
async def test_update_by_admin(storage):
    alice = await user_service.register(storage, obj_in=registration("alice"))
    await user_service.register(storage, obj_in=registration("bob"))

    with pytest.raises(ConflictError):
        await user_service.update_by_admin(storage, user_id=alice.id, obj_in=UserAdminUpdate(username="bob"))

    updated = await user_service.update_by_admin(
        storage, user_id=alice.id, obj_in=UserAdminUpdate(role=UserRole.GUEST, password="another1")
    )
    assert updated.role == UserRole.GUEST
    assert verify_password("another1", updated.password_hash)

    with pytest.raises(NotFoundError):
        await user_service.update_by_admin(storage, user_id=999, obj_in=UserAdminUpdate(full_name="x"))


@pytest.mark.asyncio
async def test_delete_unknown_user(storage):
    with pytest.raises(NotFoundError):
        await user_service.delete(storage, user_id=999)


@pytest.mark.asyncio
async def test_seed_first_admin(storage):
    with patch.object(user_service.settings, "FIRST_ADMIN_PASSWORD", "rootpass1"):
        admin = await user_service.seed_first_admin(storage)
        assert admin.role == UserRole.ADMIN
        assert admin.username == "admin"
        # second start does not duplicate the admin
        assert await user_service.seed_first_admin(storage) is None

    assert len(await storage.get_all_users()) == 1


@pytest.mark.asyncio
async def test_seed_skipped_without_password(storage):
    assert await user_service.seed_first_admin(storage) is None
    assert await storage.get_all_users() == []
