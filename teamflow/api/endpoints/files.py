from typing import Any, List

from fastapi import APIRouter, Depends, status

from teamflow.api.deps import get_current_user, get_storage
from teamflow.core.exceptions import NotFoundError, ValidationError
from teamflow.schemas.common import MessageResponse
from teamflow.schemas.file import File, FileCreate
from teamflow.schemas.user import UserInDB
from teamflow.services.access import (
    check_task_access,
    get_project_or_404,
    get_task_or_404,
    require_author_or_admin,
    require_membership,
)
from teamflow.storage.base import Storage

router = APIRouter()


@router.get("/projects/{project_id}/files", response_model=List[File])
async def read_project_files(
    project_id: int,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    project = await get_project_or_404(storage, project_id)
    await require_membership(storage, current_user, project.team_id, message="Not authorized to view these files")
    return await storage.get_files_by_project(project_id)


@router.get("/tasks/{task_id}/files", response_model=List[File])
async def read_task_files(
    task_id: int,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    await check_task_access(storage, task_id, current_user, "Not authorized to view these files")
    return await storage.get_files_by_task(task_id)


@router.post("/files", response_model=File, status_code=status.HTTP_201_CREATED)
async def upload_file(
    *,
    file_in: FileCreate,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    """
    Регистрирует вложение; сам файл хранится снаружи, здесь только URL и метаданные
    """
    project = await get_project_or_404(storage, file_in.project_id)
    await require_membership(
        storage, current_user, project.team_id, message="Not authorized to upload files to this project"
    )
    if file_in.task_id is not None:
        task = await get_task_or_404(storage, file_in.task_id)
        if task.project_id != project.id:
            raise ValidationError("Task does not belong to this project")
    return await storage.create_file(file_in, current_user.id)


@router.delete("/files/{file_id}", response_model=MessageResponse)
async def delete_file(
    file_id: int,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    file = await storage.get_file(file_id)
    if not file:
        raise NotFoundError("File not found")
    project = await get_project_or_404(storage, file.project_id)
    await require_author_or_admin(
        storage, current_user, project.team_id, file.uploaded_by, "Not authorized to delete this file"
    )
    await storage.delete_file(file_id)
    return {"message": "File deleted successfully"}
