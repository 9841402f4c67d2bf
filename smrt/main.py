# smrt/main.py
import logging
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# --- Import Core Backend Components ---
from smrt.config import (
    CORS_ORIGINS,
    DATABASE_URL,
    DB_ECHO,
    HOST,
    LOG_LEVEL,
    PORT,
    SESSION_COOKIE_NAME,
    SESSION_COOKIE_SECURE,
)
from smrt.deps import SessionContext
from smrt.errors import STORE_ERRORS
from smrt.models import project, session, user  # noqa: F401  (register tables on Base.metadata)
from smrt.routers import auth, cli, projects
from smrt.services import session_service
from smrt.utils.database import create_engine_and_sessionmaker, init_models

logging.basicConfig(level=LOG_LEVEL)
# engine and driver loggers would otherwise inherit the root level and print
# rows and bound parameters, password and key hashes included
logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if DB_ECHO else logging.WARNING)
logging.getLogger("aiosqlite").setLevel(logging.WARNING)
logger = logging.getLogger("smrt")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("SMRT API starting, ensuring schema")
    await init_models(app.state.engine)
    logger.info("Schema ready")
    yield
    await app.state.engine.dispose()
    logger.info("SMRT API stopped, engine disposed")


def _parse_session_cookie(value: Optional[str]) -> Optional[str]:
    """Only well-formed UUIDs are accepted as session ids; anything else gets a fresh one."""
    if not value:
        return None
    try:
        return str(uuid.UUID(value))
    except ValueError:
        return None


# --- Session stage: runs before every route ---
async def session_middleware(request: Request, call_next):
    session_id = _parse_session_cookie(request.cookies.get(SESSION_COOKIE_NAME))
    is_new = session_id is None
    if is_new:
        session_id = str(uuid.uuid4())

    try:
        async with request.app.state.sessionmaker() as db:
            await session_service.touch(db, session_id)
    except STORE_ERRORS:
        logger.exception(f"Session store unavailable for {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )

    logger.debug(f"[Session] SID: {session_id} (New: {is_new}) for {request.method} {request.url.path}")
    request.state.session = SessionContext(session_id=session_id, is_new=is_new)

    response = await call_next(request)
    if is_new:
        response.set_cookie(
            SESSION_COOKIE_NAME,
            session_id,
            path="/",
            httponly=True,
            samesite="lax",
            secure=SESSION_COOKIE_SECURE,
        )
    return response


# --- Error handlers: every failure is a flat {"error": "..."} body ---
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = "Invalid request"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


async def database_exception_handler(request: Request, exc: Exception):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def create_app(database_url: Optional[str] = None) -> FastAPI:
    """Build the API with its own engine; pass `database_url` to point it at another database."""
    app = FastAPI(title="SMRT API", lifespan=lifespan)
    app.state.engine, app.state.sessionmaker = create_engine_and_sessionmaker(database_url or DATABASE_URL)

    # registered first so CORS wraps the session stage
    app.middleware("http")(session_middleware)
    app.add_middleware(
        CORSMiddleware, allow_origins=CORS_ORIGINS, allow_credentials=True,
        allow_methods=["*"], allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    for exc_class in STORE_ERRORS:
        app.add_exception_handler(exc_class, database_exception_handler)
    # anything else reaches Starlette's outermost error middleware
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --- Include Routers ---
    app.include_router(auth.router)      # /api/open/...
    app.include_router(projects.router)  # /api/session/...
    app.include_router(cli.router)       # /api/cli/{project_id}/{key_id}/...
    logger.debug(f"Routes registered: {len(app.routes)}")
    return app


app = create_app()


def run():
    import uvicorn

    uvicorn.run("smrt.main:app", host=HOST, port=PORT, log_level=LOG_LEVEL.lower())
