from datetime import date, datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import AttendanceStatus

ATTENDANCE_STATUSES = tuple(s.value for s in AttendanceStatus)


# ----- Mark -----
class AttendanceMarkItem(BaseModel):
    """One entry of a batch mark. Values are checked per item by the service."""

    student_id: Any = Field(None, alias="studentId")
    date: Any = None
    status: Any = None

    model_config = ConfigDict(populate_by_name=True)


class AttendanceRecordResponse(BaseModel):
    """Single stored attendance record."""

    id: UUID
    student_id: UUID = Field(..., alias="studentId")
    student_name: Optional[str] = Field(None, alias="studentName")
    date: date
    status: str
    marked_by: UUID = Field(..., alias="markedBy")
    marked_by_name: Optional[str] = Field(None, alias="markedByName")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    model_config = ConfigDict(populate_by_name=True)


class AttendanceMarkResult(BaseModel):
    """Outcome for one entry of a batch mark."""

    student_id: Optional[str] = Field(None, alias="studentId")
    success: bool
    reason: Optional[str] = None
    record: Optional[AttendanceRecordResponse] = None

    model_config = ConfigDict(populate_by_name=True)


class AttendanceMarkResponse(BaseModel):
    success: bool = True
    data: List[AttendanceMarkResult]


# ----- Report -----
class AttendanceStats(BaseModel):
    total: int = 0
    present: int = 0
    absent: int = 0
    late: int = 0


class AttendanceReportResponse(BaseModel):
    success: bool = True
    count: int
    stats: AttendanceStats
    data: List[AttendanceRecordResponse]


class AttendanceFilter(BaseModel):
    """Parsed report filter; date bounds are inclusive calendar days."""

    student_id: Optional[UUID] = None
    status: Optional[AttendanceStatus] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
