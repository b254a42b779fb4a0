# dentflow/core/db.py
from collections.abc import AsyncGenerator
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from dentflow.core.config import settings


def _engine_options(url: str) -> dict:
    # aiosqlite connections are bound to the loop that opened them
    if url.startswith("sqlite"):
        return {"poolclass": NullPool}
    return {"pool_pre_ping": True, "pool_recycle": 1800}

engine = create_async_engine(settings.async_database_url, echo=False, **_engine_options(settings.async_database_url))
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

class Base(DeclarativeBase):
    pass

def utcnow() -> datetime:
    """Naive UTC timestamp; every DateTime column in the schema is stored naive."""
    return datetime.now(tz=timezone.utc).replace(tzinfo=None)

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with SessionLocal() as session:
        yield session
