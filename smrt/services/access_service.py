# smrt/services/access_service.py
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from smrt.models.project import Project, project_members
from smrt.services import session_service


async def resolve_user(db: AsyncSession, session_id: str) -> Optional[str]:
    return await session_service.get_user(db, session_id)


async def is_member(db: AsyncSession, user_id: str, project_id: str) -> bool:
    q = await db.execute(
        select(Project.id)
        .join(project_members, project_members.c.project_id == Project.id)
        .where(Project.id == project_id, project_members.c.user_id == user_id)
    )
    return q.scalars().first() is not None


async def ensure_project_access(db: AsyncSession, session_id: str, project_id: str) -> Optional[str]:
    """
    Returns the session's user id if that user is a member of the project.
    A missing project and someone else's project both give None, so callers
    cannot tell them apart.
    """
    user_id = await resolve_user(db, session_id)
    if not user_id:
        return None
    if not await is_member(db, user_id, project_id):
        return None
    return user_id
