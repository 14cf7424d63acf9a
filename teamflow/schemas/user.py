from pydantic import EmailStr, Field
from typing import Annotated, Optional

from teamflow.models.user import UserRole
from teamflow.schemas.common import CamelModel, InputModel, UpdateModel

PasswordStr = Annotated[str, Field(min_length=6, max_length=72)]
UsernameStr = Annotated[str, Field(min_length=3, max_length=50)]


class UserRegister(InputModel):
    username: UsernameStr
    password: PasswordStr
    email: EmailStr
    full_name: str = Field(min_length=1)
    avatar: Optional[str] = None


class UserCreate(UserRegister):
    """Admin-side creation, the only path that can pick a global role"""

    role: UserRole = UserRole.MEMBER


class UserProfileUpdate(UpdateModel):
    not_nullable = ("full_name", "email")

    full_name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    avatar: Optional[str] = None


class UserAdminUpdate(UserProfileUpdate):
    not_nullable = ("full_name", "email", "username", "role", "password")

    username: Optional[UsernameStr] = None
    role: Optional[UserRole] = None
    password: Optional[PasswordStr] = None


class PasswordChange(InputModel):
    current_password: str
    new_password: PasswordStr


class UserInDBBase(CamelModel):
    id: int
    username: str
    email: str
    full_name: str
    avatar: Optional[str] = None
    role: UserRole = UserRole.MEMBER


class User(UserInDBBase):
    pass


class UserInDB(UserInDBBase):
    password_hash: str

    def public(self) -> User:
        return User.model_validate(self.model_dump(exclude={"password_hash"}))
