from typing import List, Optional, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import delete

from teamflow.models.project import Project
from teamflow.models.task import Task
from teamflow.models.file import File
from teamflow.repo.task import delete_tasks_where


async def get_project_by_id(db: AsyncSession, id: int) -> Optional[Project]:
    result = await db.execute(select(Project).where(Project.id == id))
    return result.scalars().first()


async def get_projects_by_team(db: AsyncSession, team_id: int) -> List[Project]:
    result = await db.execute(select(Project).where(Project.team_id == team_id).order_by(Project.id))
    return result.scalars().all()


async def create_project_in_db(db: AsyncSession, project: Project) -> None:
    db.add(project)
    await db.commit()
    await db.refresh(project)


async def update_project_in_db(db: AsyncSession, project: Project, data: Dict[str, Any]) -> None:
    for field, value in data.items():
        setattr(project, field, value)
    db.add(project)
    await db.commit()
    await db.refresh(project)


async def delete_projects_where(db: AsyncSession, clause) -> int:
    # no commit: callers own the transaction
    project_ids = select(Project.id).where(clause)
    await delete_tasks_where(db, Task.project_id.in_(project_ids))
    await db.execute(
        delete(File).where(File.project_id.in_(project_ids)).execution_options(synchronize_session=False)
    )
    result = await db.execute(delete(Project).where(clause).execution_options(synchronize_session=False))
    return result.rowcount


async def delete_project_from_db(db: AsyncSession, id: int) -> bool:
    try:
        removed = await delete_projects_where(db, Project.id == id)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    return removed > 0
