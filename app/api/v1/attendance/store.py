"""
Attendance store: keyed storage for attendance records.

One row per (student_id, date), enforced by uq_attendance_student_date.
Marks go through a single INSERT ... ON CONFLICT DO UPDATE so concurrent
marks for the same key resolve last-writer-wins without duplicates.
"""

import logging
import uuid
from datetime import date, datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.enums import AttendanceStatus
from app.core.exceptions import ConflictError, InvalidStatusError, NotFoundError, StoreUnavailableError
from app.core.models import AttendanceRecord

from .schemas import ATTENDANCE_STATUSES, AttendanceFilter

logger = logging.getLogger(__name__)

_DIALECT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def validate_status(value) -> str:
    if isinstance(value, AttendanceStatus):
        return value.value
    if not isinstance(value, str) or value not in ATTENDANCE_STATUSES:
        raise InvalidStatusError(f"Invalid status: {value}")
    return value


def _insert_for(db: AsyncSession):
    dialect = db.get_bind().dialect.name
    try:
        return _DIALECT_INSERTS[dialect]
    except KeyError:
        raise NotImplementedError(f"Attendance upsert is not supported on {dialect}")


async def upsert(
    db: AsyncSession,
    student_id: UUID,
    day: date,
    status: str,
    marked_by: UUID,
) -> AttendanceRecord:
    """Insert the (student_id, day) record or replace its status and marker. Commits."""
    status = validate_status(status)
    now = datetime.now(timezone.utc)
    insert = _insert_for(db)
    stmt = insert(AttendanceRecord).values(
        id=uuid.uuid4(),
        student_id=student_id,
        date=day,
        status=status,
        marked_by=marked_by,
        created_at=now,
        updated_at=now,
    )
    # id and created_at survive a re-mark
    stmt = stmt.on_conflict_do_update(
        index_elements=[AttendanceRecord.student_id, AttendanceRecord.date],
        set_={
            "status": stmt.excluded.status,
            "marked_by": stmt.excluded.marked_by,
            "updated_at": stmt.excluded.updated_at,
        },
    ).returning(AttendanceRecord)
    try:
        result = await db.scalars(stmt, execution_options={"populate_existing": True})
        record = result.one()
        await db.commit()
    except IntegrityError as e:
        # key conflicts are absorbed by ON CONFLICT; this is a missing student or marker
        await db.rollback()
        logger.warning("Attendance upsert rejected for student %s on %s: %s", student_id, day, e.orig)
        raise ConflictError("Attendance record references an unknown user") from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Attendance upsert failed for student %s on %s: %s", student_id, day, e)
        raise StoreUnavailableError() from e
    return record


async def query(
    db: AsyncSession,
    flt: AttendanceFilter,
    limit: Optional[int] = None,
) -> List[AttendanceRecord]:
    """Filtered records, most recent date first."""
    stmt = select(AttendanceRecord).options(
        selectinload(AttendanceRecord.student),
        selectinload(AttendanceRecord.marker),
    )
    if flt.student_id is not None:
        stmt = stmt.where(AttendanceRecord.student_id == flt.student_id)
    if flt.status is not None:
        stmt = stmt.where(AttendanceRecord.status == flt.status.value)
    if flt.date_from is not None:
        stmt = stmt.where(AttendanceRecord.date >= flt.date_from)
    if flt.date_to is not None:
        stmt = stmt.where(AttendanceRecord.date <= flt.date_to)
    stmt = (
        stmt.order_by(AttendanceRecord.date.desc(), AttendanceRecord.created_at.desc())
        .execution_options(populate_existing=True)
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    try:
        result = await db.execute(stmt)
    except SQLAlchemyError as e:
        logger.error("Attendance query failed: %s", e)
        raise StoreUnavailableError() from e
    return list(result.scalars().all())


async def get(db: AsyncSession, record_id: UUID) -> Optional[AttendanceRecord]:
    try:
        return await db.get(AttendanceRecord, record_id)
    except SQLAlchemyError as e:
        raise StoreUnavailableError() from e


async def delete(db: AsyncSession, record_id: UUID) -> None:
    """Delete one record. Missing records are an error, not a no-op."""
    record = await get(db, record_id)
    if not record:
        raise NotFoundError("Attendance record not found")
    try:
        await db.delete(record)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Attendance delete failed for %s: %s", record_id, e)
        raise StoreUnavailableError() from e
