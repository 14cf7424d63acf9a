from typing import Optional, List, Dict, Any
from sqlalchemy import update, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from teamflow.models.user import User
from teamflow.models.team import Team, TeamMember
from teamflow.models.task import Task, Comment
from teamflow.models.file import File
from teamflow.models.message import Message


async def get_user_by_id(db: AsyncSession, id: int) -> Optional[User]:
    """Получает пользователя по идентификатору"""
    result = await db.execute(select(User).where(User.id == id))
    return result.scalars().first()


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    """Получает пользователя по email"""
    result = await db.execute(select(User).where(User.email == email))
    return result.scalars().first()


async def get_user_by_username(db: AsyncSession, username: str) -> Optional[User]:
    """Получает пользователя по имени пользователя"""
    result = await db.execute(select(User).where(User.username == username))
    return result.scalars().first()


async def get_all_users(db: AsyncSession) -> List[User]:
    """Получает список всех пользователей"""
    result = await db.execute(select(User).order_by(User.id))
    return result.scalars().all()


async def create_user_in_db(db: AsyncSession, user: User) -> None:
    """Создает пользователя в базе данных"""
    db.add(user)
    await db.commit()
    await db.refresh(user)


async def update_user_in_db(db: AsyncSession, user: User, data: Dict[str, Any]) -> None:
    """Обновляет пользователя в базе данных"""
    for field, value in data.items():
        setattr(user, field, value)
    db.add(user)
    await db.commit()
    await db.refresh(user)


async def delete_user_from_db(db: AsyncSession, id: int) -> bool:
    """
    Удаляет пользователя вместе с его членством в командах.

    Членство удаляется первым, затем комментарии, сообщения и файлы
    пользователя; назначенные задачи и созданные команды отвязываются.
    Все шаги выполняются в одной транзакции.
    """
    try:
        await db.execute(delete(TeamMember).where(TeamMember.user_id == id))
        await db.execute(delete(Comment).where(Comment.user_id == id))
        await db.execute(delete(Message).where(Message.user_id == id))
        await db.execute(delete(File).where(File.uploaded_by == id))
        await db.execute(update(Task).where(Task.assignee_id == id).values(assignee_id=None))
        await db.execute(update(Team).where(Team.created_by == id).values(created_by=None))
        result = await db.execute(delete(User).where(User.id == id))
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    return result.rowcount > 0
