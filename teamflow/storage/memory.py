import logging
from itertools import count
from typing import Any, Dict, List, Optional

from teamflow.core.exceptions import ConflictError, InternalError
from teamflow.models.task import TaskStatus, utcnow
from teamflow.models.team import TeamRole
from teamflow.models.user import UserRole
from teamflow.schemas.file import File, FileCreate
from teamflow.schemas.message import Message, MessageCreate, MessageWithUser
from teamflow.schemas.project import Project, ProjectCreate
from teamflow.schemas.task import Comment, CommentCreate, CommentWithUser, Task, TaskCreate
from teamflow.schemas.team import Team, TeamCreate, TeamMember, TeamMemberWithUser
from teamflow.schemas.user import UserInDB, UserRegister
from teamflow.storage.base import Storage

logger = logging.getLogger(__name__)


def _newest_first(rows, stamp: str) -> list:
    return sorted(rows, key=lambda row: (getattr(row, stamp), row.id), reverse=True)


class MemStorage(Storage):
    """
    Process-local storage: one dict and one id counter per entity type.

    Entities are stored as pydantic models and copied on the way in and out,
    so callers never hold a reference into the store.
    """

    def __init__(self):
        self.users: Dict[int, UserInDB] = {}
        self.teams: Dict[int, Team] = {}
        self.team_members: Dict[int, TeamMember] = {}
        self.projects: Dict[int, Project] = {}
        self.tasks: Dict[int, Task] = {}
        self.comments: Dict[int, Comment] = {}
        self.files: Dict[int, File] = {}
        self.messages: Dict[int, Message] = {}
        self._ids = {
            name: count(1)
            for name in ("user", "team", "team_member", "project", "task", "comment", "file", "message")
        }

    def _next_id(self, entity: str) -> int:
        return next(self._ids[entity])

    @staticmethod
    def _merge(entity, data: Dict[str, Any]):
        # re-validate so merged values get the same coercion as created ones
        return type(entity).model_validate({**entity.model_dump(), **data})

    # Users
    async def get_user(self, id: int) -> Optional[UserInDB]:
        user = self.users.get(id)
        return user.model_copy() if user else None

    async def get_user_by_username(self, username: str) -> Optional[UserInDB]:
        for user in self.users.values():
            if user.username == username:
                return user.model_copy()
        return None

    async def get_user_by_email(self, email: str) -> Optional[UserInDB]:
        for user in self.users.values():
            if user.email == email:
                return user.model_copy()
        return None

    async def get_all_users(self) -> List[UserInDB]:
        return [user.model_copy() for _, user in sorted(self.users.items())]

    async def create_user(self, obj_in: UserRegister, password_hash: str) -> UserInDB:
        user = UserInDB(
            id=self._next_id("user"),
            username=obj_in.username,
            email=obj_in.email,
            full_name=obj_in.full_name,
            avatar=obj_in.avatar,
            role=getattr(obj_in, "role", UserRole.MEMBER),
            password_hash=password_hash,
        )
        self.users[user.id] = user
        return user.model_copy()

    async def update_user(self, id: int, data: Dict[str, Any]) -> Optional[UserInDB]:
        user = self.users.get(id)
        if not user:
            return None
        self.users[id] = self._merge(user, data)
        return self.users[id].model_copy()

    async def delete_user(self, id: int) -> bool:
        if id not in self.users:
            return False
        # memberships go first so the user never appears in a team without a profile
        self.team_members = {k: m for k, m in self.team_members.items() if m.user_id != id}
        self.comments = {k: c for k, c in self.comments.items() if c.user_id != id}
        self.messages = {k: m for k, m in self.messages.items() if m.user_id != id}
        self.files = {k: f for k, f in self.files.items() if f.uploaded_by != id}
        for task_id, task in self.tasks.items():
            if task.assignee_id == id:
                self.tasks[task_id] = self._merge(task, {"assignee_id": None})
        for team_id, team in self.teams.items():
            if team.created_by == id:
                self.teams[team_id] = self._merge(team, {"created_by": None})
        del self.users[id]
        return True

    # Teams
    async def get_team(self, id: int) -> Optional[Team]:
        team = self.teams.get(id)
        return team.model_copy() if team else None

    async def get_teams_by_user(self, user_id: int) -> List[Team]:
        team_ids = {m.team_id for m in self.team_members.values() if m.user_id == user_id}
        return [self.teams[i].model_copy() for i in sorted(team_ids) if i in self.teams]

    async def create_team(self, obj_in: TeamCreate, created_by: int) -> Team:
        team = Team(id=self._next_id("team"), created_by=created_by, **obj_in.model_dump())
        self.teams[team.id] = team
        try:
            await self.add_team_member(team.id, created_by, TeamRole.ADMIN)
        except Exception:
            # undo the half-created team
            del self.teams[team.id]
            raise
        return team.model_copy()

    async def update_team(self, id: int, data: Dict[str, Any]) -> Optional[Team]:
        team = self.teams.get(id)
        if not team:
            return None
        self.teams[id] = self._merge(team, data)
        return self.teams[id].model_copy()

    async def delete_team(self, id: int) -> bool:
        if id not in self.teams:
            return False
        for project_id in [p.id for p in self.projects.values() if p.team_id == id]:
            await self.delete_project(project_id)
        self.messages = {k: m for k, m in self.messages.items() if m.team_id != id}
        self.team_members = {k: m for k, m in self.team_members.items() if m.team_id != id}
        del self.teams[id]
        return True

    # Team members
    async def get_team_members(self, team_id: int) -> List[TeamMemberWithUser]:
        result = []
        for member in sorted(self.team_members.values(), key=lambda m: m.id):
            if member.team_id != team_id:
                continue
            user = self.users.get(member.user_id)
            if not user:
                raise InternalError(f"Team member {member.id} references missing user {member.user_id}")
            result.append(TeamMemberWithUser(**member.model_dump(), user=user.public()))
        return result

    async def get_team_member(self, team_id: int, user_id: int) -> Optional[TeamMember]:
        for member in self.team_members.values():
            if member.team_id == team_id and member.user_id == user_id:
                return member.model_copy()
        return None

    async def add_team_member(self, team_id: int, user_id: int, role: TeamRole = TeamRole.MEMBER) -> TeamMember:
        if await self.get_team_member(team_id, user_id):
            raise ConflictError("User is already a member of this team")
        member = TeamMember(id=self._next_id("team_member"), team_id=team_id, user_id=user_id, role=role)
        self.team_members[member.id] = member
        return member.model_copy()

    async def remove_team_member(self, team_id: int, user_id: int) -> bool:
        for key, member in list(self.team_members.items()):
            if member.team_id == team_id and member.user_id == user_id:
                del self.team_members[key]
                return True
        return False

    async def update_team_member_role(self, team_id: int, user_id: int, role: TeamRole) -> Optional[TeamMember]:
        for key, member in self.team_members.items():
            if member.team_id == team_id and member.user_id == user_id:
                self.team_members[key] = self._merge(member, {"role": role})
                return self.team_members[key].model_copy()
        return None

    # Projects
    async def get_project(self, id: int) -> Optional[Project]:
        project = self.projects.get(id)
        return project.model_copy() if project else None

    async def get_projects_by_team(self, team_id: int) -> List[Project]:
        return [p.model_copy() for _, p in sorted(self.projects.items()) if p.team_id == team_id]

    async def create_project(self, obj_in: ProjectCreate) -> Project:
        project = Project(id=self._next_id("project"), **obj_in.model_dump())
        self.projects[project.id] = project
        return project.model_copy()

    async def update_project(self, id: int, data: Dict[str, Any]) -> Optional[Project]:
        project = self.projects.get(id)
        if not project:
            return None
        self.projects[id] = self._merge(project, data)
        return self.projects[id].model_copy()

    async def delete_project(self, id: int) -> bool:
        if id not in self.projects:
            return False
        for task_id in [t.id for t in self.tasks.values() if t.project_id == id]:
            await self.delete_task(task_id)
        self.files = {k: f for k, f in self.files.items() if f.project_id != id}
        del self.projects[id]
        return True

    # Tasks
    async def get_task(self, id: int) -> Optional[Task]:
        task = self.tasks.get(id)
        return task.model_copy(deep=True) if task else None

    async def get_tasks_by_project(self, project_id: int) -> List[Task]:
        tasks = [t for t in self.tasks.values() if t.project_id == project_id]
        return [t.model_copy(deep=True) for t in sorted(tasks, key=lambda t: (t.order, t.id))]

    async def get_tasks_by_assignee(self, assignee_id: int) -> List[Task]:
        return [t.model_copy(deep=True) for _, t in sorted(self.tasks.items()) if t.assignee_id == assignee_id]

    async def create_task(self, obj_in: TaskCreate) -> Task:
        task = Task(id=self._next_id("task"), **obj_in.model_dump())
        self.tasks[task.id] = task
        return task.model_copy(deep=True)

    async def update_task(self, id: int, data: Dict[str, Any]) -> Optional[Task]:
        task = self.tasks.get(id)
        if not task:
            return None
        self.tasks[id] = self._merge(task, data)
        return self.tasks[id].model_copy(deep=True)

    async def update_task_status(self, id: int, status: TaskStatus, order: int) -> Optional[Task]:
        return await self.update_task(id, {"status": status, "order": order})

    async def delete_task(self, id: int) -> bool:
        if id not in self.tasks:
            return False
        self.comments = {k: c for k, c in self.comments.items() if c.task_id != id}
        self.files = {k: f for k, f in self.files.items() if f.task_id != id}
        del self.tasks[id]
        return True

    # Comments
    async def get_comment(self, id: int) -> Optional[Comment]:
        comment = self.comments.get(id)
        return comment.model_copy() if comment else None

    async def get_comments_by_task(self, task_id: int) -> List[CommentWithUser]:
        comments = [c for c in self.comments.values() if c.task_id == task_id]
        return [
            CommentWithUser(**c.model_dump(), user=self._author(c.user_id))
            for c in _newest_first(comments, "created_at")
        ]

    async def create_comment(self, obj_in: CommentCreate, task_id: int, user_id: int) -> Comment:
        comment = Comment(
            id=self._next_id("comment"),
            content=obj_in.content,
            task_id=task_id,
            user_id=user_id,
            created_at=utcnow(),
        )
        self.comments[comment.id] = comment
        return comment.model_copy()

    async def delete_comment(self, id: int) -> bool:
        return self.comments.pop(id, None) is not None

    # Files
    async def get_file(self, id: int) -> Optional[File]:
        file = self.files.get(id)
        return file.model_copy() if file else None

    async def get_files_by_project(self, project_id: int) -> List[File]:
        files = [f for f in self.files.values() if f.project_id == project_id]
        return [f.model_copy() for f in _newest_first(files, "uploaded_at")]

    async def get_files_by_task(self, task_id: int) -> List[File]:
        files = [f for f in self.files.values() if f.task_id == task_id]
        return [f.model_copy() for f in _newest_first(files, "uploaded_at")]

    async def create_file(self, obj_in: FileCreate, uploaded_by: int) -> File:
        file = File(
            id=self._next_id("file"),
            uploaded_by=uploaded_by,
            uploaded_at=utcnow(),
            **obj_in.model_dump(),
        )
        self.files[file.id] = file
        return file.model_copy()

    async def delete_file(self, id: int) -> bool:
        return self.files.pop(id, None) is not None

    # Messages
    async def get_message(self, id: int) -> Optional[Message]:
        message = self.messages.get(id)
        return message.model_copy() if message else None

    async def get_messages_by_team(self, team_id: int) -> List[MessageWithUser]:
        messages = [m for m in self.messages.values() if m.team_id == team_id]
        return [
            MessageWithUser(**m.model_dump(), user=self._author(m.user_id))
            for m in _newest_first(messages, "created_at")
        ]

    async def create_message(self, obj_in: MessageCreate, team_id: int, user_id: int) -> Message:
        message = Message(
            id=self._next_id("message"),
            content=obj_in.content,
            team_id=team_id,
            user_id=user_id,
            created_at=utcnow(),
        )
        self.messages[message.id] = message
        return message.model_copy()

    async def delete_message(self, id: int) -> bool:
        return self.messages.pop(id, None) is not None

    def _author(self, user_id: int):
        user = self.users.get(user_id)
        if not user:
            logger.error("Row references missing user %s", user_id)
            raise InternalError(f"User {user_id} not found")
        return user.public()
