"""User lookups. get_user_by_id is the identity resolver used by attendance and activities."""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User
from app.core.enums import UserRole
from app.core.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


async def get_user_by_id(db: AsyncSession, user_id) -> Optional[User]:
    """Return the user for an id, or None. Ids that are not UUIDs resolve to None."""
    if not isinstance(user_id, UUID):
        try:
            user_id = UUID(str(user_id))
        except (TypeError, ValueError):
            return None
    try:
        return await db.get(User, user_id)
    except SQLAlchemyError as e:
        logger.error("User lookup failed for %s: %s", user_id, e)
        raise StoreUnavailableError() from e


async def get_student(db: AsyncSession, student_id) -> Optional[User]:
    """Return the user only if it exists and is a student."""
    user = await get_user_by_id(db, student_id)
    if not user or user.role != UserRole.STUDENT.value:
        return None
    return user


async def list_students(db: AsyncSession, active_only: bool = True) -> List[User]:
    stmt = select(User).where(User.role == UserRole.STUDENT.value)
    if active_only:
        stmt = stmt.where(User.status == "ACTIVE")
    stmt = stmt.order_by(User.full_name)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def count_students(db: AsyncSession) -> int:
    stmt = select(func.count(User.id)).where(
        User.role == UserRole.STUDENT.value,
        User.status == "ACTIVE",
    )
    return (await db.execute(stmt)).scalar_one()
