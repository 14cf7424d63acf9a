"""
Storage interface shared by the in-memory and the SQL backends.

Every method is async and returns pydantic entity models from
``teamflow.schemas`` (never ORM objects), so route handlers do not care
which backend is plugged in.

Contract:

* ``get_*`` by id returns the entity or ``None``.
* list reads return a (possibly empty) list in a stable order.
* ``update_*(id, data)`` merges only the keys present in ``data`` and
  returns the updated entity, or ``None`` when the id is unknown.
* ``delete_*`` returns ``True`` only if something was removed.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from teamflow.models.task import TaskStatus
from teamflow.models.team import TeamRole
from teamflow.schemas.file import File, FileCreate
from teamflow.schemas.message import MessageCreate, MessageWithUser, Message
from teamflow.schemas.project import Project, ProjectCreate
from teamflow.schemas.task import Comment, CommentCreate, CommentWithUser, Task, TaskCreate
from teamflow.schemas.team import Team, TeamCreate, TeamMember, TeamMemberWithUser
from teamflow.schemas.user import UserInDB, UserRegister


class Storage(ABC):
    # Users
    @abstractmethod
    async def get_user(self, id: int) -> Optional[UserInDB]: ...

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Optional[UserInDB]: ...

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[UserInDB]: ...

    @abstractmethod
    async def get_all_users(self) -> List[UserInDB]: ...

    @abstractmethod
    async def create_user(self, obj_in: UserRegister, password_hash: str) -> UserInDB:
        """Persist a user. ``obj_in.role`` is honoured only when the model carries one."""

    @abstractmethod
    async def update_user(self, id: int, data: Dict[str, Any]) -> Optional[UserInDB]: ...

    @abstractmethod
    async def delete_user(self, id: int) -> bool:
        """Remove memberships, authored rows and assignments, then the user itself."""

    # Teams
    @abstractmethod
    async def get_team(self, id: int) -> Optional[Team]: ...

    @abstractmethod
    async def get_teams_by_user(self, user_id: int) -> List[Team]: ...

    @abstractmethod
    async def create_team(self, obj_in: TeamCreate, created_by: int) -> Team:
        """Create the team together with the creator's admin membership."""

    @abstractmethod
    async def update_team(self, id: int, data: Dict[str, Any]) -> Optional[Team]: ...

    @abstractmethod
    async def delete_team(self, id: int) -> bool: ...

    # Team members
    @abstractmethod
    async def get_team_members(self, team_id: int) -> List[TeamMemberWithUser]: ...

    @abstractmethod
    async def get_team_member(self, team_id: int, user_id: int) -> Optional[TeamMember]: ...

    @abstractmethod
    async def add_team_member(self, team_id: int, user_id: int, role: TeamRole = TeamRole.MEMBER) -> TeamMember:
        """Raises ConflictError when the user is already in the team."""

    @abstractmethod
    async def remove_team_member(self, team_id: int, user_id: int) -> bool: ...

    @abstractmethod
    async def update_team_member_role(self, team_id: int, user_id: int, role: TeamRole) -> Optional[TeamMember]: ...

    # Projects
    @abstractmethod
    async def get_project(self, id: int) -> Optional[Project]: ...

    @abstractmethod
    async def get_projects_by_team(self, team_id: int) -> List[Project]: ...

    @abstractmethod
    async def create_project(self, obj_in: ProjectCreate) -> Project: ...

    @abstractmethod
    async def update_project(self, id: int, data: Dict[str, Any]) -> Optional[Project]: ...

    @abstractmethod
    async def delete_project(self, id: int) -> bool: ...

    # Tasks
    @abstractmethod
    async def get_task(self, id: int) -> Optional[Task]: ...

    @abstractmethod
    async def get_tasks_by_project(self, project_id: int) -> List[Task]: ...

    @abstractmethod
    async def get_tasks_by_assignee(self, assignee_id: int) -> List[Task]: ...

    @abstractmethod
    async def create_task(self, obj_in: TaskCreate) -> Task: ...

    @abstractmethod
    async def update_task(self, id: int, data: Dict[str, Any]) -> Optional[Task]: ...

    @abstractmethod
    async def update_task_status(self, id: int, status: TaskStatus, order: int) -> Optional[Task]:
        """Change only status and order; other fields are left untouched."""

    @abstractmethod
    async def delete_task(self, id: int) -> bool: ...

    # Comments
    @abstractmethod
    async def get_comment(self, id: int) -> Optional[Comment]: ...

    @abstractmethod
    async def get_comments_by_task(self, task_id: int) -> List[CommentWithUser]: ...

    @abstractmethod
    async def create_comment(self, obj_in: CommentCreate, task_id: int, user_id: int) -> Comment: ...

    @abstractmethod
    async def delete_comment(self, id: int) -> bool: ...

    # Files
    @abstractmethod
    async def get_file(self, id: int) -> Optional[File]: ...

    @abstractmethod
    async def get_files_by_project(self, project_id: int) -> List[File]: ...

    @abstractmethod
    async def get_files_by_task(self, task_id: int) -> List[File]: ...

    @abstractmethod
    async def create_file(self, obj_in: FileCreate, uploaded_by: int) -> File: ...

    @abstractmethod
    async def delete_file(self, id: int) -> bool: ...

    # Messages
    @abstractmethod
    async def get_message(self, id: int) -> Optional[Message]: ...

    @abstractmethod
    async def get_messages_by_team(self, team_id: int) -> List[MessageWithUser]: ...

    @abstractmethod
    async def create_message(self, obj_in: MessageCreate, team_id: int, user_id: int) -> Message: ...

    @abstractmethod
    async def delete_message(self, id: int) -> bool: ...
