"""
Team-scoped authorization checks.

Every team-owned entity (project, task, comment, file, message) is
authorized by walking up to its team and looking up the caller's
TeamMember row there. The global user role plays no part in these checks.
"""
import logging
from typing import Optional

from teamflow.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from teamflow.models.team import TeamRole
from teamflow.schemas.project import Project
from teamflow.schemas.task import Task
from teamflow.schemas.team import Team, TeamMember
from teamflow.schemas.user import User
from teamflow.storage.base import Storage

logger = logging.getLogger(__name__)

ROLE_RANK = {
    TeamRole.GUEST: 0,
    TeamRole.MEMBER: 1,
    TeamRole.ADMIN: 2,
}


def role_at_least(role: TeamRole, min_role: TeamRole) -> bool:
    return ROLE_RANK[role] >= ROLE_RANK[min_role]


async def require_membership(
    storage: Storage,
    user: User,
    team_id: int,
    min_role: Optional[TeamRole] = None,
    message: str = "Not a member of this team",
) -> TeamMember:
    """
    Return the caller's membership in the team or raise AuthorizationError.

    With ``min_role`` set the membership must also rank at least that high
    (guest < member < admin).
    """
    member = await storage.get_team_member(team_id, user.id)
    if member is None:
        logger.warning("User %s denied: not a member of team %s", user.id, team_id)
        raise AuthorizationError(message)
    if min_role is not None and not role_at_least(member.role, min_role):
        logger.warning("User %s denied: role %s below %s in team %s", user.id, member.role.value, min_role.value, team_id)
        raise AuthorizationError(message)
    return member


async def require_author_or_admin(
    storage: Storage,
    user: User,
    team_id: int,
    author_id: int,
    message: str = "Not authorized",
) -> None:
    """The author may always act on their own row; anyone else must be a team admin"""
    if user.id == author_id:
        return
    await require_membership(storage, user, team_id, TeamRole.ADMIN, message)


async def get_team_or_404(storage: Storage, team_id: int) -> Team:
    team = await storage.get_team(team_id)
    if team is None:
        raise NotFoundError("Team not found")
    return team


async def get_project_or_404(storage: Storage, project_id: int) -> Project:
    project = await storage.get_project(project_id)
    if project is None:
        raise NotFoundError("Project not found")
    return project


async def get_task_or_404(storage: Storage, task_id: int) -> Task:
    task = await storage.get_task(task_id)
    if task is None:
        raise NotFoundError("Task not found")
    return task


async def get_task_team_id(storage: Storage, task: Task) -> int:
    """Resolves task -> project -> team"""
    project = await get_project_or_404(storage, task.project_id)
    return project.team_id


async def check_task_access(storage: Storage, task_id: int, user: User, message: str) -> Task:
    """Loads the task and checks the caller's membership in its team"""
    task = await get_task_or_404(storage, task_id)
    team_id = await get_task_team_id(storage, task)
    await require_membership(storage, user, team_id, message=message)
    return task


async def require_assignable(storage: Storage, team_id: int, assignee_id: Optional[int]) -> None:
    """A task can only be assigned to an existing user who belongs to the task's team"""
    if assignee_id is None:
        return
    if await storage.get_user(assignee_id) is None:
        raise NotFoundError("User not found")
    if await storage.get_team_member(team_id, assignee_id) is None:
        raise ValidationError("Assignee is not a member of this team")


async def ensure_other_admin(storage: Storage, team_id: int, user_id: int) -> None:
    """Raises when ``user_id`` is the team's last admin and is about to lose the role"""
    member = await storage.get_team_member(team_id, user_id)
    if member is None or member.role != TeamRole.ADMIN:
        return
    admins = [m for m in await storage.get_team_members(team_id) if m.role == TeamRole.ADMIN]
    if len(admins) <= 1:
        raise ValidationError("Team must keep at least one admin")
