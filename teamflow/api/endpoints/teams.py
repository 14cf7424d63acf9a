import logging
from typing import Any, List

from fastapi import APIRouter, Depends, status

from teamflow.api.deps import get_current_user, get_storage
from teamflow.core.exceptions import NotFoundError
from teamflow.models.team import TeamRole
from teamflow.schemas.common import MessageResponse
from teamflow.schemas.team import (
    Team,
    TeamCreate,
    TeamMember,
    TeamMemberCreate,
    TeamMemberUpdate,
    TeamMemberWithUser,
    TeamUpdate,
)
from teamflow.schemas.user import UserInDB
from teamflow.services.access import ensure_other_admin, get_team_or_404, require_membership
from teamflow.storage.base import Storage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[Team])
async def read_teams(
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    """
    Команды, в которых состоит текущий пользователь
    """
    return await storage.get_teams_by_user(current_user.id)


@router.post("", response_model=Team, status_code=status.HTTP_201_CREATED)
async def create_team(
    *,
    team_in: TeamCreate,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    """
    Создать команду; создатель становится её администратором
    """
    team = await storage.create_team(team_in, current_user.id)
    logger.info("Team %s created by user %s", team.id, current_user.id)
    return team


@router.get("/{team_id}", response_model=Team)
async def read_team(
    team_id: int,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    team = await get_team_or_404(storage, team_id)
    await require_membership(storage, current_user, team_id, message="Not authorized to view this team")
    return team


@router.put("/{team_id}", response_model=Team)
async def update_team(
    *,
    team_id: int,
    team_in: TeamUpdate,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    await get_team_or_404(storage, team_id)
    await require_membership(storage, current_user, team_id, TeamRole.ADMIN, "Not authorized to update this team")
    return await storage.update_team(team_id, team_in.changes())


@router.delete("/{team_id}", response_model=MessageResponse)
async def delete_team(
    team_id: int,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    """
    Удалить команду вместе с проектами, задачами, файлами и сообщениями
    """
    await get_team_or_404(storage, team_id)
    await require_membership(storage, current_user, team_id, TeamRole.ADMIN, "Not authorized to delete this team")
    await storage.delete_team(team_id)
    logger.info("Team %s deleted by user %s", team_id, current_user.id)
    return {"message": "Team deleted successfully"}


# Участники команды
@router.get("/{team_id}/members", response_model=List[TeamMemberWithUser])
async def read_team_members(
    team_id: int,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    await get_team_or_404(storage, team_id)
    await require_membership(storage, current_user, team_id, message="Not authorized to view this team")
    return await storage.get_team_members(team_id)


@router.get("/{team_id}/members/current", response_model=TeamMember)
async def read_current_membership(
    team_id: int,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    """
    Членство текущего пользователя (клиент по нему решает, какие действия показывать)
    """
    await get_team_or_404(storage, team_id)
    return await require_membership(storage, current_user, team_id, message="Not a member of this team")


@router.post("/{team_id}/members", response_model=TeamMember, status_code=status.HTTP_201_CREATED)
async def add_team_member(
    *,
    team_id: int,
    member_in: TeamMemberCreate,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    await get_team_or_404(storage, team_id)
    await require_membership(storage, current_user, team_id, TeamRole.ADMIN, "Not authorized to add members")
    if not await storage.get_user(member_in.user_id):
        raise NotFoundError("User not found")
    member = await storage.add_team_member(team_id, member_in.user_id, member_in.role)
    logger.info("User %s added to team %s as %s", member.user_id, team_id, member.role.value)
    return member


@router.put("/{team_id}/members/{user_id}", response_model=TeamMember)
async def update_team_member(
    *,
    team_id: int,
    user_id: int,
    member_in: TeamMemberUpdate,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    await get_team_or_404(storage, team_id)
    await require_membership(storage, current_user, team_id, TeamRole.ADMIN, "Not authorized to change member roles")
    if member_in.role != TeamRole.ADMIN:
        await ensure_other_admin(storage, team_id, user_id)
    member = await storage.update_team_member_role(team_id, user_id, member_in.role)
    if not member:
        raise NotFoundError("Team member not found")
    return member


@router.delete("/{team_id}/members/{user_id}", response_model=MessageResponse)
async def remove_team_member(
    team_id: int,
    user_id: int,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    """
    Удалить участника: администратор команды, либо сам участник (выход из команды)
    """
    await get_team_or_404(storage, team_id)
    if user_id != current_user.id:
        await require_membership(storage, current_user, team_id, TeamRole.ADMIN, "Not authorized to remove members")
    await ensure_other_admin(storage, team_id, user_id)
    if not await storage.remove_team_member(team_id, user_id):
        raise NotFoundError("Team member not found")
    logger.info("User %s removed from team %s by user %s", user_id, team_id, current_user.id)
    return {"message": "Member removed successfully"}
