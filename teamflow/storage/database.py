import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

import teamflow.repo.file as file_repo
import teamflow.repo.message as message_repo
import teamflow.repo.project as project_repo
import teamflow.repo.task as task_repo
import teamflow.repo.team as team_repo
import teamflow.repo.user as user_repo
from teamflow.core.exceptions import ConflictError, InternalError
from teamflow.models import file as file_model
from teamflow.models import message as message_model
from teamflow.models import project as project_model
from teamflow.models import task as task_model
from teamflow.models import team as team_model
from teamflow.models import user as user_model
from teamflow.models.task import TaskStatus
from teamflow.models.team import TeamRole
from teamflow.models.user import UserRole
from teamflow.schemas.file import File, FileCreate
from teamflow.schemas.message import Message, MessageCreate, MessageWithUser
from teamflow.schemas.project import Project, ProjectCreate
from teamflow.schemas.task import Comment, CommentCreate, CommentWithUser, Task, TaskCreate
from teamflow.schemas.team import Team, TeamCreate, TeamMember, TeamMemberWithUser
from teamflow.schemas.user import User, UserInDB, UserRegister
from teamflow.storage.base import Storage

# make sure relationship() declarations are registered before the mappers configure
import teamflow.models.relationships  # noqa: F401

logger = logging.getLogger(__name__)


def _to(schema, obj):
    return schema.model_validate(obj) if obj is not None else None


def _author(user: Optional[user_model.User], owner: str) -> User:
    if user is None:
        logger.error("%s references a missing user", owner)
        raise InternalError(f"{owner} references a missing user")
    return User.model_validate(user)


class DatabaseStorage(Storage):
    """Storage backed by SQLAlchemy; one instance wraps one AsyncSession"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _integrity_conflict(self, exc: IntegrityError, message: str) -> ConflictError:
        await self.db.rollback()
        logger.warning("Integrity error: %s", exc.orig)
        return ConflictError(message)

    # Users
    async def get_user(self, id: int) -> Optional[UserInDB]:
        return _to(UserInDB, await user_repo.get_user_by_id(self.db, id))

    async def get_user_by_username(self, username: str) -> Optional[UserInDB]:
        return _to(UserInDB, await user_repo.get_user_by_username(self.db, username))

    async def get_user_by_email(self, email: str) -> Optional[UserInDB]:
        return _to(UserInDB, await user_repo.get_user_by_email(self.db, email))

    async def get_all_users(self) -> List[UserInDB]:
        return [UserInDB.model_validate(u) for u in await user_repo.get_all_users(self.db)]

    async def create_user(self, obj_in: UserRegister, password_hash: str) -> UserInDB:
        db_obj = user_model.User(
            username=obj_in.username,
            email=obj_in.email,
            password_hash=password_hash,
            full_name=obj_in.full_name,
            avatar=obj_in.avatar,
            role=getattr(obj_in, "role", UserRole.MEMBER),
        )
        try:
            await user_repo.create_user_in_db(self.db, db_obj)
        except IntegrityError as exc:
            raise await self._integrity_conflict(exc, "Username or email already in use")
        return UserInDB.model_validate(db_obj)

    async def update_user(self, id: int, data: Dict[str, Any]) -> Optional[UserInDB]:
        db_obj = await user_repo.get_user_by_id(self.db, id)
        if not db_obj:
            return None
        try:
            await user_repo.update_user_in_db(self.db, db_obj, data)
        except IntegrityError as exc:
            raise await self._integrity_conflict(exc, "Username or email already in use")
        return UserInDB.model_validate(db_obj)

    async def delete_user(self, id: int) -> bool:
        return await user_repo.delete_user_from_db(self.db, id)

    # Teams
    async def get_team(self, id: int) -> Optional[Team]:
        return _to(Team, await team_repo.get_team_by_id(self.db, id))

    async def get_teams_by_user(self, user_id: int) -> List[Team]:
        return [Team.model_validate(t) for t in await team_repo.get_teams_by_user(self.db, user_id)]

    async def create_team(self, obj_in: TeamCreate, created_by: int) -> Team:
        db_obj = team_model.Team(name=obj_in.name, description=obj_in.description, created_by=created_by)
        await team_repo.create_team_with_admin(self.db, db_obj)
        return Team.model_validate(db_obj)

    async def update_team(self, id: int, data: Dict[str, Any]) -> Optional[Team]:
        db_obj = await team_repo.get_team_by_id(self.db, id)
        if not db_obj:
            return None
        await team_repo.update_team_in_db(self.db, db_obj, data)
        return Team.model_validate(db_obj)

    async def delete_team(self, id: int) -> bool:
        return await team_repo.delete_team_from_db(self.db, id)

    # Team members
    async def get_team_members(self, team_id: int) -> List[TeamMemberWithUser]:
        rows = await team_repo.get_members_with_users(self.db, team_id)
        return [
            TeamMemberWithUser(
                **TeamMember.model_validate(member).model_dump(),
                user=_author(user, f"Team member {member.id}"),
            )
            for member, user in rows
        ]

    async def get_team_member(self, team_id: int, user_id: int) -> Optional[TeamMember]:
        return _to(TeamMember, await team_repo.get_team_member(self.db, team_id, user_id))

    async def add_team_member(self, team_id: int, user_id: int, role: TeamRole = TeamRole.MEMBER) -> TeamMember:
        if await team_repo.get_team_member(self.db, team_id, user_id):
            raise ConflictError("User is already a member of this team")
        db_obj = team_model.TeamMember(team_id=team_id, user_id=user_id, role=role)
        try:
            await team_repo.create_team_member_in_db(self.db, db_obj)
        except IntegrityError as exc:
            raise await self._integrity_conflict(exc, "User is already a member of this team")
        return TeamMember.model_validate(db_obj)

    async def remove_team_member(self, team_id: int, user_id: int) -> bool:
        return await team_repo.delete_team_member_from_db(self.db, team_id, user_id)

    async def update_team_member_role(self, team_id: int, user_id: int, role: TeamRole) -> Optional[TeamMember]:
        return _to(TeamMember, await team_repo.update_member_role_in_db(self.db, team_id, user_id, role))

    # Projects
    async def get_project(self, id: int) -> Optional[Project]:
        return _to(Project, await project_repo.get_project_by_id(self.db, id))

    async def get_projects_by_team(self, team_id: int) -> List[Project]:
        return [Project.model_validate(p) for p in await project_repo.get_projects_by_team(self.db, team_id)]

    async def create_project(self, obj_in: ProjectCreate) -> Project:
        db_obj = project_model.Project(**obj_in.model_dump())
        await project_repo.create_project_in_db(self.db, db_obj)
        return Project.model_validate(db_obj)

    async def update_project(self, id: int, data: Dict[str, Any]) -> Optional[Project]:
        db_obj = await project_repo.get_project_by_id(self.db, id)
        if not db_obj:
            return None
        await project_repo.update_project_in_db(self.db, db_obj, data)
        return Project.model_validate(db_obj)

    async def delete_project(self, id: int) -> bool:
        return await project_repo.delete_project_from_db(self.db, id)

    # Tasks
    async def get_task(self, id: int) -> Optional[Task]:
        return _to(Task, await task_repo.get_task_by_id(self.db, id))

    async def get_tasks_by_project(self, project_id: int) -> List[Task]:
        return [Task.model_validate(t) for t in await task_repo.get_tasks_by_project(self.db, project_id)]

    async def get_tasks_by_assignee(self, assignee_id: int) -> List[Task]:
        return [Task.model_validate(t) for t in await task_repo.get_tasks_by_assignee(self.db, assignee_id)]

    async def create_task(self, obj_in: TaskCreate) -> Task:
        db_obj = task_model.Task(**obj_in.model_dump())
        await task_repo.create_task_in_db(self.db, db_obj)
        return Task.model_validate(db_obj)

    async def update_task(self, id: int, data: Dict[str, Any]) -> Optional[Task]:
        db_obj = await task_repo.get_task_by_id(self.db, id)
        if not db_obj:
            return None
        await task_repo.update_task_in_db(self.db, db_obj, data)
        return Task.model_validate(db_obj)

    async def update_task_status(self, id: int, status: TaskStatus, order: int) -> Optional[Task]:
        if not await task_repo.update_task_status_in_db(self.db, id, status, order):
            return None
        return await self.get_task(id)

    async def delete_task(self, id: int) -> bool:
        return await task_repo.delete_task_from_db(self.db, id)

    # Comments
    async def get_comment(self, id: int) -> Optional[Comment]:
        return _to(Comment, await task_repo.get_comment_by_id(self.db, id))

    async def get_comments_by_task(self, task_id: int) -> List[CommentWithUser]:
        rows = await task_repo.get_comments_with_users(self.db, task_id)
        return [
            CommentWithUser(
                **Comment.model_validate(comment).model_dump(),
                user=_author(user, f"Comment {comment.id}"),
            )
            for comment, user in rows
        ]

    async def create_comment(self, obj_in: CommentCreate, task_id: int, user_id: int) -> Comment:
        db_obj = task_model.Comment(content=obj_in.content, task_id=task_id, user_id=user_id)
        await task_repo.create_comment_in_db(self.db, db_obj)
        return Comment.model_validate(db_obj)

    async def delete_comment(self, id: int) -> bool:
        return await task_repo.delete_comment_from_db(self.db, id)

    # Files
    async def get_file(self, id: int) -> Optional[File]:
        return _to(File, await file_repo.get_file_by_id(self.db, id))

    async def get_files_by_project(self, project_id: int) -> List[File]:
        return [File.model_validate(f) for f in await file_repo.get_files_by_project(self.db, project_id)]

    async def get_files_by_task(self, task_id: int) -> List[File]:
        return [File.model_validate(f) for f in await file_repo.get_files_by_task(self.db, task_id)]

    async def create_file(self, obj_in: FileCreate, uploaded_by: int) -> File:
        db_obj = file_model.File(uploaded_by=uploaded_by, **obj_in.model_dump())
        await file_repo.create_file_in_db(self.db, db_obj)
        return File.model_validate(db_obj)

    async def delete_file(self, id: int) -> bool:
        return await file_repo.delete_file_from_db(self.db, id)

    # Messages
    async def get_message(self, id: int) -> Optional[Message]:
        return _to(Message, await message_repo.get_message_by_id(self.db, id))

    async def get_messages_by_team(self, team_id: int) -> List[MessageWithUser]:
        rows = await message_repo.get_messages_with_users(self.db, team_id)
        return [
            MessageWithUser(
                **Message.model_validate(message).model_dump(),
                user=_author(user, f"Message {message.id}"),
            )
            for message, user in rows
        ]

    async def create_message(self, obj_in: MessageCreate, team_id: int, user_id: int) -> Message:
        db_obj = message_model.Message(content=obj_in.content, team_id=team_id, user_id=user_id)
        await message_repo.create_message_in_db(self.db, db_obj)
        return Message.model_validate(db_obj)

    async def delete_message(self, id: int) -> bool:
        return await message_repo.delete_message_from_db(self.db, id)
