from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from smrt.deps import SessionContext, get_session_context
from smrt.errors import STORE_ERRORS
from smrt.schemas import LoginIn, RegisterIn, StatusOut, UserOut
from smrt.services import user_service
from smrt.utils.database import get_db

router = APIRouter(prefix="/api/open", tags=["auth"])

logger = logging.getLogger("smrt.auth")

SENTINEL = "SMRT-V1-READY"


# ---------------------- HEALTH ----------------------
@router.get("/status/health", response_model=StatusOut)
async def health():
    return {"status": "ok"}


@router.get("/health/api")
async def health_api():
    return {"sentinel": SENTINEL}


@router.get("/health/db")
async def health_db(db: AsyncSession = Depends(get_db)):
    try:
        await db.execute(text("SELECT 1"))
    except STORE_ERRORS as e:
        logger.error(f"Database health check failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"sentinel": "OFFLINE", "error": "Database unavailable"},
        )
    return {"sentinel": SENTINEL}


# ---------------------- USERS ----------------------
@router.post("/user/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterIn,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    logger.info(f"POST /user/register received for email: {payload.email}")
    return await user_service.register(db, ctx.session_id, payload.email, payload.password, payload.name)


@router.post("/user/login", response_model=UserOut)
async def login(
    payload: LoginIn,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    logger.info(f"POST /user/login received for email: {payload.email}")
    return await user_service.login(db, ctx.session_id, payload.email, payload.password)


@router.post("/user/logout", response_model=StatusOut)
async def logout(
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    await user_service.logout(db, ctx.session_id)
    return {"status": "ok"}
