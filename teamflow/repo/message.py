from typing import List, Optional, Tuple

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from teamflow.models.message import Message
from teamflow.models.user import User


async def get_message_by_id(db: AsyncSession, id: int) -> Optional[Message]:
    """Получает сообщение по идентификатору"""
    result = await db.execute(select(Message).where(Message.id == id))
    return result.scalars().first()


async def get_messages_with_users(db: AsyncSession, team_id: int) -> List[Tuple[Message, Optional[User]]]:
    """Получает сообщения команды вместе с авторами, новые первыми"""
    result = await db.execute(
        select(Message, User)
        .outerjoin(User, User.id == Message.user_id)
        .where(Message.team_id == team_id)
        .order_by(Message.created_at.desc(), Message.id.desc())
    )
    return result.all()


async def create_message_in_db(db: AsyncSession, message: Message) -> None:
    """Создает сообщение в базе данных"""
    db.add(message)
    await db.commit()
    await db.refresh(message)


async def delete_message_from_db(db: AsyncSession, id: int) -> bool:
    """Удаляет сообщение из базы данных"""
    result = await db.execute(delete(Message).where(Message.id == id))
    await db.commit()
    return result.rowcount > 0
