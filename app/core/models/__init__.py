from app.core.models.activity import Activity
from app.core.models.attendance import AttendanceRecord

__all__ = [
    "Activity",
    "AttendanceRecord",
]
