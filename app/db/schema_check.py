import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncEngine

# Importing the models registers their tables on Base.metadata
from app.auth.models import User  # noqa: F401
from app.core.models import Activity, AttendanceRecord  # noqa: F401
from app.db.session import Base, engine

logger = logging.getLogger(__name__)


async def ensure_tables(db_engine: AsyncEngine) -> None:
    """
    Ensure that all tables and the attendance (student_id, date) unique
    constraint exist in the connected database. Existing tables are left as is.
    """
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tables ensured: %s", ", ".join(sorted(Base.metadata.tables)))


async def main() -> None:
    from app.core.config import settings
    from app.core.logging_config import configure_logging

    configure_logging(settings.log_level)
    await ensure_tables(engine)
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
