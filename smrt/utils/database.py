# smrt/utils/database.py
from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base

from smrt.config import DB_ECHO

Base = declarative_base()


def create_engine_and_sessionmaker(database_url: str):
    """
    Builds the async engine and the session factory for one app instance.
    Called once at process start; the pair is the app's persistence handle.
    """
    # bound values stay out of SQL logs and error messages
    engine = create_async_engine(database_url, echo=DB_ECHO, future=True, hide_parameters=True)
    if engine.dialect.name == "sqlite":
        # sqlite ships with FK enforcement off, and cascades depend on it
        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    return engine, session_factory


async def init_models(engine):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# Dependency for route injection
async def get_db(request: Request):
    async with request.app.state.sessionmaker() as session:
        yield session
