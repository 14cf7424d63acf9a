from typing import List, Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from teamflow.models.file import File


async def get_file_by_id(db: AsyncSession, id: int) -> Optional[File]:
    result = await db.execute(select(File).where(File.id == id))
    return result.scalars().first()


async def get_files_by_project(db: AsyncSession, project_id: int) -> List[File]:
    result = await db.execute(
        select(File).where(File.project_id == project_id).order_by(File.uploaded_at.desc(), File.id.desc())
    )
    return result.scalars().all()


async def get_files_by_task(db: AsyncSession, task_id: int) -> List[File]:
    result = await db.execute(
        select(File).where(File.task_id == task_id).order_by(File.uploaded_at.desc(), File.id.desc())
    )
    return result.scalars().all()


async def create_file_in_db(db: AsyncSession, file: File) -> None:
    db.add(file)
    await db.commit()
    await db.refresh(file)


async def delete_file_from_db(db: AsyncSession, id: int) -> bool:
    result = await db.execute(delete(File).where(File.id == id))
    await db.commit()
    return result.rowcount > 0
