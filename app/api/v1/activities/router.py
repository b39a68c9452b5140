"""Co-curriculum activities API router."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.rbac import require_roles
from app.auth.schemas import CurrentUser
from app.core.enums import STAFF_ROLES
from app.core.exceptions import ServiceError
from app.db.session import get_db

from . import service
from .schemas import ActivityCreate, ActivityCreateResponse, ActivityListResponse

router = APIRouter(prefix="/api/v1/activities", tags=["activities"])


@router.post("", response_model=ActivityCreateResponse, status_code=status.HTTP_201_CREATED)
async def add_activity(
    payload: ActivityCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        activity = await service.add_activity(db, payload, current_user.id)
        return ActivityCreateResponse(data=activity)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=ActivityListResponse)
async def list_activities(
    student_id: Optional[str] = Query(None, alias="studentId"),
    category: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Activities, most recent first. Filters: studentId, category, startDate/endDate (inclusive)."""
    try:
        flt = service.build_filter(student_id, category, start_date, end_date)
        activities = await service.list_activities(db, flt)
        return ActivityListResponse(count=len(activities), data=activities)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/{activity_id}")
async def delete_activity(
    activity_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(*STAFF_ROLES)),
):
    try:
        await service.delete_activity(db, activity_id, current_user.id)
        return {"success": True, "data": {}}
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
