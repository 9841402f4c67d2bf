# smrt/deps.py
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from smrt.errors import Unauthorized
from smrt.models.project import Key
from smrt.services import access_service, key_service
from smrt.utils.database import get_db


@dataclass(frozen=True)
class SessionContext:
    """What the session stage learned about the caller, handed to each route."""
    session_id: str
    is_new: bool


def get_session_context(request: Request) -> SessionContext:
    # populated by the session middleware before any route runs
    return request.state.session


async def get_current_user_id(
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
) -> str:
    """
    User id linked to the caller's session.
    Raises 401 for anonymous sessions.
    """
    user_id = await access_service.resolve_user(db, ctx.session_id)
    if not user_id:
        raise Unauthorized()
    return user_id


async def require_project_access(
    project_id: str,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
) -> str:
    """
    Gate for every /session/project/{project_id}/... route.
    Not-a-member and no-such-project both answer 401.
    """
    user_id = await access_service.ensure_project_access(db, ctx.session_id, project_id)
    if not user_id:
        raise Unauthorized()
    return user_id


async def require_cli_key(
    project_id: str,
    key_id: str,
    x_cli_secret: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
) -> Key:
    """Gate for /cli/{project_id}/{key_id}/... routes; see key_service.validate_key."""
    return await key_service.validate_key(db, project_id, key_id, x_cli_secret)
