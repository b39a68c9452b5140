from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.dates import parse_calendar_day
from app.core.enums import ActivityCategory
from app.core.exceptions import InvalidDateError


class ActivityCreate(BaseModel):
    """Log a co-curriculum activity for a student."""

    student_id: UUID = Field(..., alias="studentId")
    title: str = Field(..., max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    category: ActivityCategory
    date: date

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("title")
    @classmethod
    def title_required(cls, v: str) -> str:
        if not v:
            raise ValueError("Title is required")
        return v

    @field_validator("date", mode="before")
    @classmethod
    def to_calendar_day(cls, v):
        try:
            return parse_calendar_day(v)
        except InvalidDateError as e:
            raise ValueError(e.message)


class ActivityResponse(BaseModel):
    id: UUID
    student_id: UUID = Field(..., alias="studentId")
    student_name: Optional[str] = Field(None, alias="studentName")
    title: str
    description: Optional[str] = None
    category: str
    date: date
    added_by: UUID = Field(..., alias="addedBy")
    added_by_name: Optional[str] = Field(None, alias="addedByName")
    created_at: datetime = Field(..., alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)


class ActivityCreateResponse(BaseModel):
    success: bool = True
    data: ActivityResponse


class ActivityListResponse(BaseModel):
    success: bool = True
    count: int
    data: List[ActivityResponse]


class ActivityFilter(BaseModel):
    student_id: Optional[UUID] = None
    category: Optional[ActivityCategory] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
