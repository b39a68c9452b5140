"""Attendance API router."""

from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.rbac import require_roles
from app.auth.schemas import CurrentUser
from app.core.enums import STAFF_ROLES
from app.core.exceptions import ServiceError
from app.db.session import get_db

from . import service
from .schemas import AttendanceMarkResponse, AttendanceReportResponse

router = APIRouter(prefix="/api/v1/attendance", tags=["attendance"])


@router.post("/mark", response_model=AttendanceMarkResponse)
async def mark_attendance(
    body: Any = Body(None),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(*STAFF_ROLES)),
):
    """Mark attendance for students. Per-student failures are listed in data; the call still returns 200."""
    try:
        results = await service.mark_batch(
            db,
            body.get("records") if isinstance(body, dict) else None,
            current_user.id,
        )
        return AttendanceMarkResponse(data=results)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/report", response_model=AttendanceReportResponse)
async def get_attendance_report(
    student_id: Optional[str] = Query(None, alias="studentId"),
    status: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Attendance records (most recent first) with total/present/absent/late counts."""
    try:
        flt = service.build_filter(student_id, status, start_date, end_date)
        return await service.report(db, flt)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/report/export",
    dependencies=[Depends(require_roles(*STAFF_ROLES))],
)
async def export_attendance_report(
    student_id: Optional[str] = Query(None, alias="studentId"),
    status: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    fmt: str = Query("csv", alias="format", description="csv or xlsx"),
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Download the filtered report as CSV or Excel."""
    try:
        flt = service.build_filter(student_id, status, start_date, end_date)
        content, media_type, filename = await service.export_report(db, flt, fmt)
        return Response(
            content=content,
            media_type=media_type,
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/{record_id}")
async def delete_attendance_record(
    record_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(*STAFF_ROLES)),
):
    """Delete one attendance record. 404 if it does not exist."""
    try:
        await service.delete_record(db, record_id, current_user.id)
        return {"success": True, "data": {}}
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
