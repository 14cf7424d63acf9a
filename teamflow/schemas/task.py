from pydantic import Field
from typing import Optional, List

from teamflow.models.task import TaskStatus, TaskPriority
from teamflow.schemas.common import CamelModel, InputModel, UpdateModel, UTCDateTime
from teamflow.schemas.user import User


class TaskBase(CamelModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    project_id: int
    assignee_id: Optional[int] = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[UTCDateTime] = None
    tags: List[str] = []
    order: int = Field(default=0, ge=0)


class TaskCreate(TaskBase, InputModel):
    pass


# Moving a task to another project is not supported; status/order go through
# the dedicated status endpoint or this body alike.
class TaskUpdate(UpdateModel):
    not_nullable = ("title", "status", "priority", "tags", "order")

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    assignee_id: Optional[int] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[UTCDateTime] = None
    tags: Optional[List[str]] = None
    order: Optional[int] = Field(default=None, ge=0)


class TaskStatusUpdate(InputModel):
    status: TaskStatus
    order: int = Field(ge=0)


class Task(TaskBase):
    id: int


class CommentCreate(InputModel):
    content: str = Field(min_length=1)


class Comment(CamelModel):
    id: int
    content: str
    task_id: int
    user_id: int
    created_at: UTCDateTime


class CommentWithUser(Comment):
    user: User
