"""Dashboard API router."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.core.exceptions import ServiceError
from app.db.session import get_db

from . import service
from .schemas import DashboardStats

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


@router.get(
    "/stats",
    response_model=DashboardStats,
    dependencies=[Depends(get_current_user)],
)
async def get_dashboard_stats(db: AsyncSession = Depends(get_db)):
    """Today's attendance counts, totals, and the most recent attendance and activities."""
    try:
        return await service.get_dashboard_stats(db)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
