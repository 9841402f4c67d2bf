# smrt/services/session_service.py
import logging
from typing import Optional

from sqlalchemy import update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from smrt.models.session import SessionRecord

logger = logging.getLogger("smrt.session")

_INSERTS = {"postgresql": pg_insert, "sqlite": sqlite_insert}


async def touch(db: AsyncSession, session_id: str) -> None:
    """
    Count one visit for `session_id`, creating the row on first sight.
    Single INSERT .. ON CONFLICT statement so concurrent requests carrying
    the same cookie never lose an increment.
    """
    insert = _INSERTS.get(db.bind.dialect.name)
    if insert is None:
        raise RuntimeError(f"Unsupported database dialect for session upsert: {db.bind.dialect.name}")
    stmt = insert(SessionRecord).values(session_id=session_id, visits=1)
    stmt = stmt.on_conflict_do_update(
        index_elements=[SessionRecord.session_id],
        set_={"visits": SessionRecord.visits + 1},
    )
    await db.execute(stmt)
    await db.commit()


async def get_session(db: AsyncSession, session_id: str) -> Optional[SessionRecord]:
    q = await db.execute(select(SessionRecord).filter_by(session_id=session_id))
    return q.scalars().first()


async def get_user(db: AsyncSession, session_id: str) -> Optional[str]:
    """User id linked to the session, or None when anonymous."""
    q = await db.execute(select(SessionRecord.user_id).filter_by(session_id=session_id))
    return q.scalars().first()


async def link_user(db: AsyncSession, session_id: str, user_id: Optional[str]) -> None:
    """Set (login) or clear (logout) the session's user. Does not commit."""
    await db.execute(
        update(SessionRecord).where(SessionRecord.session_id == session_id).values(user_id=user_id)
    )
    logger.debug(f"Session {session_id} linked to user {user_id}")
