from typing import Any, List

from fastapi import APIRouter, Depends, status

from teamflow.api.deps import get_current_user, get_storage
from teamflow.core.exceptions import NotFoundError
from teamflow.schemas.common import MessageResponse
from teamflow.schemas.task import CommentCreate, CommentWithUser
from teamflow.schemas.user import UserInDB
from teamflow.services.access import check_task_access, get_task_or_404, get_task_team_id, require_author_or_admin
from teamflow.storage.base import Storage

router = APIRouter()


@router.get("/tasks/{task_id}/comments", response_model=List[CommentWithUser])
async def read_task_comments(
    task_id: int,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    """
    Комментарии к задаче, новые первыми
    """
    await check_task_access(storage, task_id, current_user, "Not authorized to view comments on this task")
    return await storage.get_comments_by_task(task_id)


@router.post("/tasks/{task_id}/comments", response_model=CommentWithUser, status_code=status.HTTP_201_CREATED)
async def create_task_comment(
    *,
    task_id: int,
    comment_in: CommentCreate,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    await check_task_access(storage, task_id, current_user, "Not authorized to comment on this task")
    comment = await storage.create_comment(comment_in, task_id, current_user.id)
    return CommentWithUser(**comment.model_dump(), user=current_user.public())


@router.delete("/comments/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: int,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    """
    Удалить комментарий может автор или администратор команды
    """
    comment = await storage.get_comment(comment_id)
    if not comment:
        raise NotFoundError("Comment not found")
    task = await get_task_or_404(storage, comment.task_id)
    team_id = await get_task_team_id(storage, task)
    await require_author_or_admin(
        storage, current_user, team_id, comment.user_id, "Not authorized to delete this comment"
    )
    await storage.delete_comment(comment_id)
    return {"message": "Comment deleted successfully"}
