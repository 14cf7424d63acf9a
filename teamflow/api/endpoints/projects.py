import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query, status

from teamflow.api.deps import get_current_user, get_storage
from teamflow.models.team import TeamRole
from teamflow.schemas.common import MessageResponse
from teamflow.schemas.project import Project, ProjectCreate, ProjectUpdate
from teamflow.schemas.user import UserInDB
from teamflow.services.access import get_project_or_404, get_team_or_404, require_membership
from teamflow.storage.base import Storage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[Project])
async def read_projects(
    team_id: Optional[int] = Query(None, alias="teamId"),
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    """
    Проекты команды, либо все проекты команд текущего пользователя
    """
    if team_id is not None:
        await get_team_or_404(storage, team_id)
        await require_membership(storage, current_user, team_id, message="Not authorized to view projects of this team")
        return await storage.get_projects_by_team(team_id)

    projects = []
    for team in await storage.get_teams_by_user(current_user.id):
        projects.extend(await storage.get_projects_by_team(team.id))
    return projects


@router.post("", response_model=Project, status_code=status.HTTP_201_CREATED)
async def create_project(
    *,
    project_in: ProjectCreate,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    await get_team_or_404(storage, project_in.team_id)
    await require_membership(
        storage, current_user, project_in.team_id, message="Not authorized to create projects in this team"
    )
    return await storage.create_project(project_in)


@router.get("/{project_id}", response_model=Project)
async def read_project(
    project_id: int,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    project = await get_project_or_404(storage, project_id)
    await require_membership(storage, current_user, project.team_id, message="Not authorized to view this project")
    return project


@router.put("/{project_id}", response_model=Project)
async def update_project(
    *,
    project_id: int,
    project_in: ProjectUpdate,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    project = await get_project_or_404(storage, project_id)
    await require_membership(
        storage, current_user, project.team_id, TeamRole.ADMIN, "Not authorized to update this project"
    )
    return await storage.update_project(project_id, project_in.changes())


@router.delete("/{project_id}", response_model=MessageResponse)
async def delete_project(
    project_id: int,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    """
    Удалить проект вместе с задачами и файлами (только администратор команды)
    """
    project = await get_project_or_404(storage, project_id)
    await require_membership(
        storage, current_user, project.team_id, TeamRole.ADMIN, "Not authorized to delete this project"
    )
    await storage.delete_project(project_id)
    logger.info("Project %s deleted by user %s", project_id, current_user.id)
    return {"message": "Project deleted successfully"}
