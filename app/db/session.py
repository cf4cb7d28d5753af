import asyncio
from typing import AsyncGenerator, Awaitable, TypeVar

from sqlalchemy.exc import InterfaceError, OperationalError, TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from app.core.config import settings
from app.core.exceptions import StoreUnavailable
from app.core.logger import logger
from app.db import models  # noqa: F401

T = TypeVar("T")

def engine_options(url: str) -> dict:
    options = {"echo": settings.DB_ECHO, "future": True}
    # SQLite drivers do not use a QueuePool
    if not url.startswith("sqlite"):
        options.update(pool_timeout=settings.DB_POOL_TIMEOUT, pool_pre_ping=True)
    return options

engine = create_async_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))
async_session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise

async def store_call(awaitable: Awaitable[T], operation: str = "query") -> T:
    """
    Await a storage operation bounded by STORE_TIMEOUT_SECONDS.

    Timeouts and connectivity failures surface as StoreUnavailable so callers
    can retry with backoff. Constraint violations are left to the caller.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=settings.STORE_TIMEOUT_SECONDS)
    except asyncio.TimeoutError as exc:
        logger.warning(f"Store timeout | Operation: {operation} | Limit: {settings.STORE_TIMEOUT_SECONDS}s")
        raise StoreUnavailable(f"Storage did not respond within {settings.STORE_TIMEOUT_SECONDS}s") from exc
    except (OperationalError, InterfaceError, PoolTimeoutError) as exc:
        logger.error(f"Store unavailable | Operation: {operation} | Error: {exc}")
        raise StoreUnavailable("Storage is currently unavailable") from exc

async def init_db() -> None:
    # Development bootstrap; production schemas are managed out of band
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
