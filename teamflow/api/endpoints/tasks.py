import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query, status

from teamflow.api.deps import get_current_user, get_storage
from teamflow.core.exceptions import AuthorizationError
from teamflow.schemas.common import MessageResponse
from teamflow.schemas.task import Task, TaskCreate, TaskStatusUpdate, TaskUpdate
from teamflow.schemas.user import UserInDB
from teamflow.services.access import (
    check_task_access,
    get_project_or_404,
    get_task_team_id,
    require_assignable,
    require_membership,
)
from teamflow.storage.base import Storage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[Task])
async def read_tasks(
    project_id: Optional[int] = Query(None, alias="projectId"),
    assignee_id: Optional[int] = Query(None, alias="assigneeId"),
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    """
    Задачи проекта (порядок канбан-доски) или задачи, назначенные текущему пользователю
    """
    if project_id is not None:
        project = await get_project_or_404(storage, project_id)
        await require_membership(storage, current_user, project.team_id, message="Not authorized to view these tasks")
        tasks = await storage.get_tasks_by_project(project_id)
        if assignee_id is not None:
            tasks = [task for task in tasks if task.assignee_id == assignee_id]
        return tasks

    if assignee_id is not None and assignee_id != current_user.id:
        raise AuthorizationError("Not authorized to view tasks assigned to other users")
    return await storage.get_tasks_by_assignee(current_user.id)


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(
    *,
    task_in: TaskCreate,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    project = await get_project_or_404(storage, task_in.project_id)
    await require_membership(
        storage, current_user, project.team_id, message="Not authorized to create tasks in this project"
    )
    await require_assignable(storage, project.team_id, task_in.assignee_id)
    return await storage.create_task(task_in)


@router.get("/{task_id}", response_model=Task)
async def read_task(
    task_id: int,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    return await check_task_access(storage, task_id, current_user, "Not authorized to view this task")


@router.put("/{task_id}", response_model=Task)
async def update_task(
    *,
    task_id: int,
    task_in: TaskUpdate,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    task = await check_task_access(storage, task_id, current_user, "Not authorized to update this task")
    changes = task_in.changes()
    if changes.get("assignee_id") is not None:
        await require_assignable(storage, await get_task_team_id(storage, task), changes["assignee_id"])
    return await storage.update_task(task_id, changes)


@router.put("/{task_id}/status", response_model=Task)
async def update_task_status(
    *,
    task_id: int,
    status_in: TaskStatusUpdate,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    """
    Перемещение задачи по канбан-доске: меняются только статус и позиция
    """
    await check_task_access(storage, task_id, current_user, "Not authorized to update this task")
    return await storage.update_task_status(task_id, status_in.status, status_in.order)


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: int,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    await check_task_access(storage, task_id, current_user, "Not authorized to delete this task")
    await storage.delete_task(task_id)
    logger.info("Task %s deleted by user %s", task_id, current_user.id)
    return {"message": "Task deleted successfully"}
