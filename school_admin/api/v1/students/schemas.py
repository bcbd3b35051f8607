from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from school_admin.core.schemas import ClassRef, WireModel


class StudentCreate(WireModel):
    school_id: UUID
    name: str = Field(..., min_length=1, max_length=255)
    roll_num: Optional[int] = Field(None, ge=0)
    class_id: Optional[UUID] = Field(None, description="Enroll directly; omit to create an unassigned student")


class StudentResponse(WireModel):
    id: UUID = Field(..., alias="_id")
    school_id: UUID
    name: str
    roll_num: Optional[int] = None
    # None = unassigned
    sclass_name: Optional[ClassRef] = None
    created_at: datetime
