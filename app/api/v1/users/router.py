"""Users API router."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rbac import require_roles
from app.core.enums import STAFF_ROLES
from app.db.session import get_db

from . import service
from .schemas import StudentListResponse, StudentResponse

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get(
    "/students",
    response_model=StudentListResponse,
    dependencies=[Depends(require_roles(*STAFF_ROLES))],
)
async def list_students(db: AsyncSession = Depends(get_db)):
    """Active students ordered by name, for the attendance marking sheet."""
    students = await service.list_students(db)
    return StudentListResponse(
        count=len(students),
        data=[
            StudentResponse(
                id=s.id,
                name=s.full_name,
                email=s.email,
                role=s.role,
                created_at=s.created_at,
            )
            for s in students
        ],
    )
