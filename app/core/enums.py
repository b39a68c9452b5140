from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"


class ActivityCategory(str, Enum):
    SPORTS = "Sports"
    ACADEMIC = "Academic"
    ARTS = "Arts"
    COMMUNITY_SERVICE = "Community Service"
    LEADERSHIP = "Leadership"
    CULTURAL = "Cultural"
    TECHNOLOGY = "Technology"
    OTHER = "Other"


# Roles allowed to mark attendance and delete records
STAFF_ROLES = (UserRole.TEACHER.value, UserRole.ADMIN.value)
