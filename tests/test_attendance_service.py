"""Attendance service: batch marking with per-record results, reports and export."""

import csv
import io
from datetime import date
from uuid import uuid4

import pytest
from openpyxl import load_workbook
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.attendance import service
from app.api.v1.attendance.schemas import AttendanceFilter
from app.core.exceptions import BadRequestError
from app.core.models import AttendanceRecord


async def _all_records(db: AsyncSession):
    return (await db.execute(select(AttendanceRecord))).scalars().all()


@pytest.mark.parametrize("records", [None, [], {}, "records", {"studentId": "1"}])
@pytest.mark.asyncio
async def test_mark_batch_rejects_bad_shape(db_session: AsyncSession, teacher, records) -> None:
    with pytest.raises(BadRequestError):
        await service.mark_batch(db_session, records, teacher.id)
    assert await _all_records(db_session) == []


@pytest.mark.asyncio
async def test_mark_then_remark_keeps_one_record(db_session: AsyncSession, teacher, student) -> None:
    sid = str(student.id)
    await service.mark_batch(db_session, [{"studentId": sid, "date": "2024-11-20", "status": "present"}], teacher.id)
    results = await service.mark_batch(
        db_session, [{"studentId": sid, "date": "2024-11-20", "status": "late"}], teacher.id
    )

    assert results[0].success is True
    assert results[0].record.status == "late"
    records = await _all_records(db_session)
    assert len(records) == 1
    assert records[0].status == "late"


@pytest.mark.asyncio
async def test_time_of_day_hits_same_record(db_session: AsyncSession, teacher, student) -> None:
    sid = str(student.id)
    first = await service.mark_batch(
        db_session, [{"studentId": sid, "date": "2024-11-20T15:00:00", "status": "present"}], teacher.id
    )
    second = await service.mark_batch(
        db_session, [{"studentId": sid, "date": "2024-11-20T00:00:00", "status": "absent"}], teacher.id
    )

    assert first[0].record.id == second[0].record.id
    assert second[0].record.date == date(2024, 11, 20)
    assert len(await _all_records(db_session)) == 1


@pytest.mark.asyncio
async def test_partial_failure(db_session: AsyncSession, teacher, student) -> None:
    missing = str(uuid4())
    results = await service.mark_batch(
        db_session,
        [
            {"studentId": str(student.id), "date": "2024-11-20", "status": "present"},
            {"studentId": missing, "date": "2024-11-20", "status": "present"},
        ],
        teacher.id,
    )

    assert len(results) == 2
    assert [r.success for r in results] == [True, False]
    assert results[1].student_id == missing
    assert results[1].reason == "student not found"
    assert results[1].record is None

    records = await _all_records(db_session)
    assert len(records) == 1
    assert records[0].student_id == student.id


@pytest.mark.asyncio
async def test_results_keep_input_order(db_session: AsyncSession, make_user, teacher) -> None:
    students = [await make_user("student", f"Student {i}") for i in range(3)]
    batch = [
        {"studentId": str(students[2].id), "date": "2024-11-20", "status": "present"},
        {"studentId": "not-a-uuid", "date": "2024-11-20", "status": "present"},
        {"studentId": str(students[0].id), "date": "2024-11-20", "status": "absent"},
        {"studentId": str(students[1].id), "date": "2024-11-20", "status": "late"},
    ]
    results = await service.mark_batch(db_session, batch, teacher.id)
    assert [r.student_id for r in results] == [item["studentId"] for item in batch]
    assert [r.success for r in results] == [True, False, True, True]


@pytest.mark.asyncio
async def test_non_student_is_not_a_mark_target(db_session: AsyncSession, teacher) -> None:
    results = await service.mark_batch(
        db_session,
        [{"studentId": str(teacher.id), "date": "2024-11-20", "status": "present"}],
        teacher.id,
    )
    assert results[0].success is False
    assert results[0].reason == "student not found"
    assert await _all_records(db_session) == []


@pytest.mark.asyncio
async def test_per_item_validation_failures(db_session: AsyncSession, teacher, student) -> None:
    sid = str(student.id)
    results = await service.mark_batch(
        db_session,
        [
            {"studentId": sid, "date": "2024-11-20", "status": "excused"},
            {"studentId": sid, "date": "yesterday", "status": "present"},
            "not-an-object",
            {"date": "2024-11-20", "status": "present"},
            {"studentId": sid, "date": "2024-11-21", "status": "present"},
        ],
        teacher.id,
    )

    assert [r.reason for r in results] == [
        "invalid status",
        "invalid date",
        "invalid record",
        "invalid record",
        None,
    ]
    assert results[4].success is True
    assert len(await _all_records(db_session)) == 1


@pytest.mark.asyncio
async def test_marked_by_is_acting_identity(db_session: AsyncSession, make_user, teacher, student) -> None:
    admin = await make_user("admin", "Admin User")
    sid = str(student.id)
    await service.mark_batch(db_session, [{"studentId": sid, "date": "2024-11-20", "status": "present"}], teacher.id)
    results = await service.mark_batch(
        db_session, [{"studentId": sid, "date": "2024-11-20", "status": "present"}], admin.id
    )
    assert results[0].record.marked_by == admin.id


async def _seed_five(db: AsyncSession, make_user, teacher) -> None:
    """3 present, 1 absent, 1 late, all on 2024-11-20."""
    statuses = ["present", "present", "present", "absent", "late"]
    batch = []
    for i, status in enumerate(statuses):
        s = await make_user("student", f"Pupil {i}")
        batch.append({"studentId": str(s.id), "date": "2024-11-20", "status": status})
    await service.mark_batch(db, batch, teacher.id)


@pytest.mark.asyncio
async def test_report_stats_unfiltered(db_session: AsyncSession, make_user, teacher) -> None:
    await _seed_five(db_session, make_user, teacher)
    result = await service.report(db_session, AttendanceFilter())
    assert result.count == 5
    assert result.stats.model_dump() == {"total": 5, "present": 3, "absent": 1, "late": 1}


@pytest.mark.asyncio
async def test_report_status_filter(db_session: AsyncSession, make_user, teacher) -> None:
    await _seed_five(db_session, make_user, teacher)
    flt = service.build_filter(status="absent")
    result = await service.report(db_session, flt)
    assert result.stats.model_dump() == {"total": 1, "present": 0, "absent": 1, "late": 0}
    assert len(result.data) == 1


@pytest.mark.asyncio
async def test_report_empty(db_session: AsyncSession) -> None:
    result = await service.report(db_session, AttendanceFilter())
    assert result.count == 0
    assert result.data == []
    assert result.stats.model_dump() == {"total": 0, "present": 0, "absent": 0, "late": 0}


@pytest.mark.asyncio
async def test_report_ordering_and_names(db_session: AsyncSession, teacher, student) -> None:
    sid = str(student.id)
    for day in ("2024-11-10", "2024-11-20", "2024-11-15"):
        await service.mark_batch(db_session, [{"studentId": sid, "date": day, "status": "present"}], teacher.id)

    result = await service.report(db_session, AttendanceFilter())
    assert [r.date.isoformat() for r in result.data] == ["2024-11-20", "2024-11-15", "2024-11-10"]
    assert result.data[0].student_name == "Ahmad Razak"
    assert result.data[0].marked_by_name == "Encik Rosli"


@pytest.mark.parametrize(
    "start_date,end_date,expected",
    [
        ("2024-11-12", "2024-11-18", ["2024-11-15"]),
        ("2024-11-15", None, ["2024-11-20", "2024-11-15"]),
        (None, "2024-11-15", ["2024-11-15", "2024-11-10"]),
        (None, None, ["2024-11-20", "2024-11-15", "2024-11-10"]),
        ("2024-11-10", "2024-11-20", ["2024-11-20", "2024-11-15", "2024-11-10"]),
    ],
)
@pytest.mark.asyncio
async def test_report_date_range_cases(
    db_session: AsyncSession, teacher, student, start_date, end_date, expected
) -> None:
    sid = str(student.id)
    batch = [{"studentId": sid, "date": d, "status": "present"} for d in ("2024-11-10", "2024-11-15", "2024-11-20")]
    for item in batch:
        await service.mark_batch(db_session, [item], teacher.id)

    flt = service.build_filter(start_date=start_date, end_date=end_date)
    result = await service.report(db_session, flt)
    assert [r.date.isoformat() for r in result.data] == expected
    assert result.stats.total == result.stats.present + result.stats.absent + result.stats.late


@pytest.mark.parametrize(
    "kwargs",
    [
        {"student_id": "not-a-uuid"},
        {"status": "excused"},
        {"start_date": "2024-02-30"},
        {"end_date": "soon"},
    ],
)
def test_build_filter_rejects_invalid_values(kwargs) -> None:
    with pytest.raises(BadRequestError):
        service.build_filter(**kwargs)


@pytest.mark.asyncio
async def test_export_csv(db_session: AsyncSession, teacher, student) -> None:
    await service.mark_batch(
        db_session, [{"studentId": str(student.id), "date": "2024-11-20", "status": "late"}], teacher.id
    )
    content, media_type, filename = await service.export_report(db_session, AttendanceFilter(), "csv")

    assert media_type == "text/csv"
    assert filename.startswith("attendance_report_") and filename.endswith(".csv")
    rows = list(csv.reader(io.StringIO(content.decode("utf-8"))))
    assert rows[0] == ["Student ID", "Student Name", "Date", "Status"]
    assert rows[1] == [str(student.id), "Ahmad Razak", "2024-11-20", "late"]


@pytest.mark.asyncio
async def test_export_xlsx(db_session: AsyncSession, teacher, student) -> None:
    await service.mark_batch(
        db_session, [{"studentId": str(student.id), "date": "2024-11-20", "status": "present"}], teacher.id
    )
    content, _, filename = await service.export_report(db_session, AttendanceFilter(), "xlsx")

    assert filename.endswith(".xlsx")
    ws = load_workbook(io.BytesIO(content)).active
    rows = [list(r) for r in ws.iter_rows(values_only=True)]
    assert rows[0] == ["Student ID", "Student Name", "Date", "Status"]
    assert rows[1][1:] == ["Ahmad Razak", "2024-11-20", "present"]


@pytest.mark.asyncio
async def test_export_unknown_format(db_session: AsyncSession) -> None:
    with pytest.raises(BadRequestError):
        await service.export_report(db_session, AttendanceFilter(), "pdf")
