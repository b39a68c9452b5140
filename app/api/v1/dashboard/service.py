from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.activities import service as activity_service
from app.api.v1.activities.schemas import ActivityFilter
from app.api.v1.attendance import service as attendance_service
from app.api.v1.attendance.schemas import AttendanceFilter
from app.api.v1.users import service as user_service
from app.core.dates import today

from .schemas import DashboardStats

RECENT_ATTENDANCE_LIMIT = 5
RECENT_ACTIVITIES_LIMIT = 4


async def get_dashboard_stats(db: AsyncSession) -> DashboardStats:
    day = today()
    todays = await attendance_service.report(db, AttendanceFilter(date_from=day, date_to=day))
    present = todays.stats.present + todays.stats.late
    rate = round(present / todays.count * 100) if todays.count else 0

    recent = await attendance_service.report(db, AttendanceFilter(), limit=RECENT_ATTENDANCE_LIMIT)
    activities = await activity_service.list_activities(db, ActivityFilter(), limit=RECENT_ACTIVITIES_LIMIT)

    return DashboardStats(
        total_students=await user_service.count_students(db),
        present_today=present,
        absent_today=todays.stats.absent,
        total_activities=await activity_service.count_activities(db),
        attendance_rate=rate,
        recent_attendance=recent.data,
        recent_activities=activities,
    )
