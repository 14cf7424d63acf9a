from typing import List, Optional, Dict, Any, Tuple

from sqlalchemy import update, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from teamflow.models.team import Team, TeamMember, TeamRole
from teamflow.models.user import User
from teamflow.models.message import Message
from teamflow.models.project import Project
from teamflow.repo.project import delete_projects_where


async def get_team_by_id(db: AsyncSession, id: int) -> Optional[Team]:
    """Получает команду по идентификатору"""
    result = await db.execute(select(Team).where(Team.id == id))
    return result.scalars().first()


async def get_teams_by_user(db: AsyncSession, user_id: int) -> List[Team]:
    """Получает команды, в которых состоит пользователь"""
    result = await db.execute(
        select(Team)
        .join(TeamMember, TeamMember.team_id == Team.id)
        .where(TeamMember.user_id == user_id)
        .order_by(Team.id)
    )
    return result.scalars().unique().all()


async def create_team_with_admin(db: AsyncSession, team: Team) -> TeamMember:
    """
    Создает команду и членство создателя с ролью admin в одной транзакции.
    При ошибке на любом шаге откатываются обе записи.
    """
    try:
        db.add(team)
        await db.flush()
        admin = TeamMember(team_id=team.id, user_id=team.created_by, role=TeamRole.ADMIN)
        db.add(admin)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    await db.refresh(team)
    await db.refresh(admin)
    return admin


async def update_team_in_db(db: AsyncSession, team: Team, data: Dict[str, Any]) -> None:
    """Обновляет команду в базе данных"""
    for field, value in data.items():
        setattr(team, field, value)
    db.add(team)
    await db.commit()
    await db.refresh(team)


async def delete_team_from_db(db: AsyncSession, id: int) -> bool:
    """Удаляет команду со всеми проектами, сообщениями и участниками"""
    try:
        await delete_projects_where(db, Project.team_id == id)
        await db.execute(delete(Message).where(Message.team_id == id))
        await db.execute(delete(TeamMember).where(TeamMember.team_id == id))
        result = await db.execute(delete(Team).where(Team.id == id))
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    return result.rowcount > 0


# Участники команды
async def create_team_member_in_db(db: AsyncSession, team_member: TeamMember) -> None:
    """Создает членство в команде"""
    db.add(team_member)
    await db.commit()
    await db.refresh(team_member)


async def delete_team_member_from_db(db: AsyncSession, team_id: int, user_id: int) -> bool:
    """Удаляет пользователя из команды"""
    result = await db.execute(
        delete(TeamMember).where((TeamMember.team_id == team_id) & (TeamMember.user_id == user_id))
    )
    await db.commit()
    return result.rowcount > 0


async def update_member_role_in_db(
    db: AsyncSession, team_id: int, user_id: int, role: TeamRole
) -> Optional[TeamMember]:
    """Обновляет роль пользователя в команде"""
    result = await db.execute(
        update(TeamMember)
        .where((TeamMember.team_id == team_id) & (TeamMember.user_id == user_id))
        .values(role=role)
    )
    await db.commit()
    if result.rowcount == 0:
        return None
    return await get_team_member(db, team_id, user_id)


async def get_members_with_users(db: AsyncSession, team_id: int) -> List[Tuple[TeamMember, Optional[User]]]:
    """Получает участников команды вместе с пользователями"""
    result = await db.execute(
        select(TeamMember, User)
        .outerjoin(User, User.id == TeamMember.user_id)
        .where(TeamMember.team_id == team_id)
        .order_by(TeamMember.id)
    )
    return result.all()


async def get_team_member(db: AsyncSession, team_id: int, user_id: int) -> Optional[TeamMember]:
    """Получает запись о членстве в команде"""
    result = await db.execute(
        select(TeamMember)
        .where((TeamMember.team_id == team_id) & (TeamMember.user_id == user_id))
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()
