from pydantic import Field
from typing import Optional

from teamflow.models.team import TeamRole
from teamflow.schemas.common import CamelModel, InputModel, UpdateModel
from teamflow.schemas.user import User


class TeamCreate(InputModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None


class TeamUpdate(UpdateModel):
    not_nullable = ("name",)

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None


class Team(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    created_by: Optional[int] = None


class TeamMemberCreate(InputModel):
    user_id: int
    role: TeamRole = TeamRole.MEMBER


class TeamMemberUpdate(InputModel):
    role: TeamRole


class TeamMember(CamelModel):
    id: int
    team_id: int
    user_id: int
    role: TeamRole = TeamRole.MEMBER


class TeamMemberWithUser(TeamMember):
    user: User
