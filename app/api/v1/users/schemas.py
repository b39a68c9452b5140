from datetime import datetime
from typing import List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class StudentResponse(BaseModel):
    id: UUID
    name: str
    email: str
    role: str
    created_at: datetime = Field(..., alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)


class StudentListResponse(BaseModel):
    success: bool = True
    count: int
    data: List[StudentResponse]
