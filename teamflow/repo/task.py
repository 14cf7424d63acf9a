from typing import List, Optional, Dict, Any, Tuple

from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from teamflow.models.task import Task, Comment, TaskStatus
from teamflow.models.file import File
from teamflow.models.user import User


async def get_task_by_id(db: AsyncSession, id: int) -> Optional[Task]:
    """Получает задачу по идентификатору"""
    result = await db.execute(select(Task).where(Task.id == id).execution_options(populate_existing=True))
    return result.scalars().first()


async def get_tasks_by_project(db: AsyncSession, project_id: int) -> List[Task]:
    """Получает задачи проекта в порядке колонок канбан-доски"""
    result = await db.execute(
        select(Task).where(Task.project_id == project_id).order_by(Task.order, Task.id)
    )
    return result.scalars().all()


async def get_tasks_by_assignee(db: AsyncSession, assignee_id: int) -> List[Task]:
    """Получает задачи, назначенные пользователю"""
    result = await db.execute(
        select(Task).where(Task.assignee_id == assignee_id).order_by(Task.id)
    )
    return result.scalars().all()


async def create_task_in_db(db: AsyncSession, task: Task) -> None:
    """Создает задачу в базе данных"""
    db.add(task)
    await db.commit()
    await db.refresh(task)


async def update_task_in_db(db: AsyncSession, task: Task, data: Dict[str, Any]) -> None:
    """Обновляет задачу в базе данных"""
    for field, value in data.items():
        setattr(task, field, value)
    db.add(task)
    await db.commit()
    await db.refresh(task)


async def update_task_status_in_db(db: AsyncSession, id: int, status: TaskStatus, order: int) -> bool:
    """Меняет статус и позицию задачи одним UPDATE"""
    result = await db.execute(
        update(Task)
        .where(Task.id == id)
        .values(status=status, order=order)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount > 0


async def delete_tasks_where(db: AsyncSession, clause) -> int:
    # no commit: callers own the transaction
    task_ids = select(Task.id).where(clause)
    await db.execute(
        delete(Comment).where(Comment.task_id.in_(task_ids)).execution_options(synchronize_session=False)
    )
    await db.execute(
        delete(File).where(File.task_id.in_(task_ids)).execution_options(synchronize_session=False)
    )
    result = await db.execute(delete(Task).where(clause).execution_options(synchronize_session=False))
    return result.rowcount


async def delete_task_from_db(db: AsyncSession, id: int) -> bool:
    """Удаляет задачу вместе с комментариями и файлами"""
    try:
        removed = await delete_tasks_where(db, Task.id == id)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    return removed > 0


# Функции для работы с комментариями
async def get_comment_by_id(db: AsyncSession, id: int) -> Optional[Comment]:
    """Получает комментарий по идентификатору"""
    result = await db.execute(select(Comment).where(Comment.id == id))
    return result.scalars().first()


async def create_comment_in_db(db: AsyncSession, comment: Comment) -> None:
    """Создает комментарий в базе данных"""
    db.add(comment)
    await db.commit()
    await db.refresh(comment)


async def get_comments_with_users(db: AsyncSession, task_id: int) -> List[Tuple[Comment, Optional[User]]]:
    """Получает комментарии к задаче вместе с авторами, новые первыми"""
    result = await db.execute(
        select(Comment, User)
        .outerjoin(User, User.id == Comment.user_id)
        .where(Comment.task_id == task_id)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    )
    return result.all()


async def delete_comment_from_db(db: AsyncSession, comment_id: int) -> bool:
    """Удаляет комментарий из базы данных"""
    result = await db.execute(delete(Comment).where(Comment.id == comment_id))
    await db.commit()
    return result.rowcount > 0
