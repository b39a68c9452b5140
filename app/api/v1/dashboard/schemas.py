from typing import List

from pydantic import BaseModel, ConfigDict, Field

from app.api.v1.activities.schemas import ActivityResponse
from app.api.v1.attendance.schemas import AttendanceRecordResponse


class DashboardStats(BaseModel):
    """Headline numbers for the dashboard. presentToday counts late arrivals as present."""

    total_students: int = Field(..., alias="totalStudents")
    present_today: int = Field(..., alias="presentToday")
    absent_today: int = Field(..., alias="absentToday")
    total_activities: int = Field(..., alias="totalActivities")
    attendance_rate: int = Field(..., alias="attendanceRate")
    recent_attendance: List[AttendanceRecordResponse] = Field(default_factory=list, alias="recentAttendance")
    recent_activities: List[ActivityResponse] = Field(default_factory=list, alias="recentActivities")

    model_config = ConfigDict(populate_by_name=True)
