from typing import Any, AsyncGenerator, Dict

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.core.config import settings


class Base(DeclarativeBase):
    """Declarative base for users, attendance records and activities."""


def engine_options(database_url: str) -> Dict[str, Any]:
    """Pool settings for a server database; SQLite files keep the driver defaults."""
    if make_url(database_url).get_backend_name() == "sqlite":
        return {"echo": False}
    # pool_pre_ping: check the connection is alive before use (idle connections may be closed).
    # pool_recycle: discard connections after this many seconds.
    return {"echo": False, "pool_pre_ping": True, "pool_recycle": 300}


engine = create_async_engine(settings.database_url, **engine_options(settings.database_url))

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session
