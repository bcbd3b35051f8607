from datetime import datetime
from typing import List
from uuid import UUID

from pydantic import Field

from school_admin.core.schemas import WireModel


class ClassCreate(WireModel):
    school_id: UUID
    sclass_name: str = Field(..., min_length=1, max_length=50)


class ClassResponse(WireModel):
    id: UUID = Field(..., alias="_id")
    school_id: UUID
    sclass_name: str
    break_after_period: int
    created_at: datetime


class RemoveAllStudentsResponse(WireModel):
    message: str
    count: int
    student_ids: List[UUID] = []
