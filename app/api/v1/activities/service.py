"""Co-curriculum activity service."""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.v1.users.service import get_student
from app.core.dates import parse_calendar_day
from app.core.enums import ActivityCategory
from app.core.exceptions import BadRequestError, InvalidDateError, NotFoundError
from app.core.models import Activity

from .schemas import ActivityCreate, ActivityFilter, ActivityResponse

logger = logging.getLogger(__name__)


def _to_response(activity: Activity) -> ActivityResponse:
    return ActivityResponse(
        id=activity.id,
        student_id=activity.student_id,
        student_name=activity.student.full_name if activity.student else None,
        title=activity.title,
        description=activity.description,
        category=activity.category,
        date=activity.date,
        added_by=activity.added_by,
        added_by_name=activity.adder.full_name if activity.adder else None,
        created_at=activity.created_at,
    )


async def _load(db: AsyncSession, activity_id: UUID) -> Optional[Activity]:
    stmt = (
        select(Activity)
        .options(selectinload(Activity.student), selectinload(Activity.adder))
        .where(Activity.id == activity_id)
        .execution_options(populate_existing=True)
    )
    return (await db.execute(stmt)).scalar_one_or_none()


async def add_activity(db: AsyncSession, payload: ActivityCreate, added_by: UUID) -> ActivityResponse:
    student = await get_student(db, payload.student_id)
    if not student:
        raise NotFoundError("Student not found")
    activity = Activity(
        student_id=student.id,
        title=payload.title,
        description=payload.description or None,
        category=payload.category.value,
        date=payload.date,
        added_by=added_by,
    )
    db.add(activity)
    await db.commit()
    logger.info("Activity %s added for student %s by %s", activity.id, student.id, added_by)
    return _to_response(await _load(db, activity.id))


def build_filter(
    student_id: Optional[str] = None,
    category: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> ActivityFilter:
    flt = ActivityFilter()
    if student_id:
        try:
            flt.student_id = UUID(student_id)
        except ValueError:
            raise BadRequestError(f"Invalid studentId: {student_id}")
    if category:
        try:
            flt.category = ActivityCategory(category)
        except ValueError:
            raise BadRequestError(f"Invalid category: {category}")
    try:
        if start_date:
            flt.date_from = parse_calendar_day(start_date)
        if end_date:
            flt.date_to = parse_calendar_day(end_date)
    except InvalidDateError as e:
        raise BadRequestError(e.message)
    return flt


async def list_activities(
    db: AsyncSession,
    flt: ActivityFilter,
    limit: Optional[int] = None,
) -> List[ActivityResponse]:
    """Activities matching the filter, most recent date first."""
    stmt = select(Activity).options(selectinload(Activity.student), selectinload(Activity.adder))
    if flt.student_id is not None:
        stmt = stmt.where(Activity.student_id == flt.student_id)
    if flt.category is not None:
        stmt = stmt.where(Activity.category == flt.category.value)
    if flt.date_from is not None:
        stmt = stmt.where(Activity.date >= flt.date_from)
    if flt.date_to is not None:
        stmt = stmt.where(Activity.date <= flt.date_to)
    stmt = stmt.order_by(Activity.date.desc(), Activity.created_at.desc())
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return [_to_response(a) for a in result.scalars().all()]


async def count_activities(db: AsyncSession) -> int:
    return (await db.execute(select(func.count(Activity.id)))).scalar_one()


async def delete_activity(db: AsyncSession, activity_id: UUID, deleted_by: UUID) -> None:
    activity = await db.get(Activity, activity_id)
    if not activity:
        raise NotFoundError("Activity not found")
    await db.delete(activity)
    await db.commit()
    logger.info("Activity %s deleted by %s", activity_id, deleted_by)
