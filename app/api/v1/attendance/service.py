"""Attendance service: batch marking, reports and report export."""

import csv
import io
import logging
from typing import Any, List, Optional, Tuple
from uuid import UUID

from openpyxl import Workbook
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.users.service import get_student
from app.core.dates import parse_calendar_day, today
from app.core.enums import AttendanceStatus
from app.core.exceptions import BadRequestError, InvalidDateError, InvalidStatusError
from app.core.models import AttendanceRecord

from . import store
from .schemas import (
    AttendanceFilter,
    AttendanceMarkItem,
    AttendanceMarkResult,
    AttendanceRecordResponse,
    AttendanceReportResponse,
    AttendanceStats,
)

logger = logging.getLogger(__name__)

REASON_INVALID_RECORD = "invalid record"
REASON_STUDENT_NOT_FOUND = "student not found"
REASON_INVALID_STATUS = "invalid status"
REASON_INVALID_DATE = "invalid date"

EXPORT_HEADERS = ("Student ID", "Student Name", "Date", "Status")
EXPORT_MEDIA_TYPES = {
    "csv": "text/csv",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def _to_response(record: AttendanceRecord, with_names: bool = False) -> AttendanceRecordResponse:
    """Build the API shape. Names are only read when the relationships were eager-loaded."""
    student_name = None
    marked_by_name = None
    if with_names:
        student_name = record.student.full_name if record.student else None
        marked_by_name = record.marker.full_name if record.marker else None
    return AttendanceRecordResponse(
        id=record.id,
        student_id=record.student_id,
        student_name=student_name,
        date=record.date,
        status=record.status,
        marked_by=record.marked_by,
        marked_by_name=marked_by_name,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def _failure(student_id: Any, reason: str) -> AttendanceMarkResult:
    return AttendanceMarkResult(
        student_id=None if student_id is None else str(student_id),
        success=False,
        reason=reason,
    )


async def _mark_one(db: AsyncSession, raw: Any, marked_by: UUID) -> AttendanceMarkResult:
    """Mark a single entry. Per-item problems come back as a failed result, never raised."""
    if not isinstance(raw, dict):
        return _failure(None, REASON_INVALID_RECORD)
    item = AttendanceMarkItem.model_validate(raw)
    if item.student_id is None or item.student_id == "":
        return _failure(None, REASON_INVALID_RECORD)

    student = await get_student(db, item.student_id)
    if not student:
        return _failure(item.student_id, REASON_STUDENT_NOT_FOUND)

    try:
        status = store.validate_status(item.status)
    except InvalidStatusError:
        return _failure(item.student_id, REASON_INVALID_STATUS)
    try:
        day = parse_calendar_day(item.date)
    except InvalidDateError:
        return _failure(item.student_id, REASON_INVALID_DATE)

    # StoreUnavailableError propagates and fails the whole call
    record = await store.upsert(db, student.id, day, status, marked_by)
    return AttendanceMarkResult(
        student_id=str(item.student_id),
        success=True,
        record=_to_response(record),
    )


async def mark_batch(
    db: AsyncSession,
    records: Any,
    marked_by: UUID,
) -> List[AttendanceMarkResult]:
    """
    Mark attendance for many students. Results are returned in input order.

    The call fails only if records is missing, not a list, or empty; every
    other problem is reported against its own entry. Each successful entry is
    committed on its own, so earlier writes stay even if a later one hits a
    store outage.
    """
    if not records or not isinstance(records, list):
        raise BadRequestError("Please provide attendance records")

    results: List[AttendanceMarkResult] = []
    for raw in records:
        results.append(await _mark_one(db, raw, marked_by))

    failed = sum(1 for r in results if not r.success)
    logger.info(
        "Attendance batch by %s: %d marked, %d failed",
        marked_by,
        len(results) - failed,
        failed,
    )
    return results


def build_filter(
    student_id: Optional[str] = None,
    status: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> AttendanceFilter:
    """Parse raw query values. Any bad value rejects the whole request."""
    flt = AttendanceFilter()
    if student_id:
        try:
            flt.student_id = UUID(student_id)
        except ValueError:
            raise BadRequestError(f"Invalid studentId: {student_id}")
    if status:
        try:
            flt.status = AttendanceStatus(status)
        except ValueError:
            raise BadRequestError(f"Invalid status: {status}")
    # Both bounds: inclusive range; one bound: open on the other side; neither: unbounded
    try:
        if start_date:
            flt.date_from = parse_calendar_day(start_date)
        if end_date:
            flt.date_to = parse_calendar_day(end_date)
    except InvalidDateError as e:
        raise BadRequestError(e.message)
    return flt


def compute_stats(records: List[AttendanceRecord]) -> AttendanceStats:
    stats = AttendanceStats(total=len(records))
    for rec in records:
        if rec.status == AttendanceStatus.PRESENT.value:
            stats.present += 1
        elif rec.status == AttendanceStatus.ABSENT.value:
            stats.absent += 1
        elif rec.status == AttendanceStatus.LATE.value:
            stats.late += 1
    return stats


async def report(
    db: AsyncSession,
    flt: AttendanceFilter,
    limit: Optional[int] = None,
) -> AttendanceReportResponse:
    """Filtered records (date descending) with present/absent/late counts over what is returned."""
    records = await store.query(db, flt, limit=limit)
    return AttendanceReportResponse(
        count=len(records),
        stats=compute_stats(records),
        data=[_to_response(r, with_names=True) for r in records],
    )


def _export_rows(records: List[AttendanceRecordResponse]) -> List[List[str]]:
    return [
        [str(r.student_id), r.student_name or "", r.date.isoformat(), r.status]
        for r in records
    ]


def _build_csv(rows: List[List[str]]) -> bytes:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)
    writer.writerows(rows)
    return buf.getvalue().encode("utf-8")


def _build_xlsx(rows: List[List[str]]) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Attendance"
    ws.append(list(EXPORT_HEADERS))
    for row in rows:
        ws.append(row)
    out = io.BytesIO()
    wb.save(out)
    return out.getvalue()


async def export_report(
    db: AsyncSession,
    flt: AttendanceFilter,
    fmt: str = "csv",
) -> Tuple[bytes, str, str]:
    """Report rows as a CSV or Excel file. Returns (content, media_type, filename)."""
    fmt = (fmt or "csv").lower()
    if fmt not in EXPORT_MEDIA_TYPES:
        raise BadRequestError(f"Unsupported export format: {fmt}")
    result = await report(db, flt)
    rows = _export_rows(result.data)
    content = _build_csv(rows) if fmt == "csv" else _build_xlsx(rows)
    filename = f"attendance_report_{today().isoformat()}.{fmt}"
    return content, EXPORT_MEDIA_TYPES[fmt], filename


async def delete_record(db: AsyncSession, record_id: UUID, deleted_by: UUID) -> None:
    await store.delete(db, record_id)
    logger.info("Attendance record %s deleted by %s", record_id, deleted_by)

