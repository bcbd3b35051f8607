from datetime import datetime
from uuid import UUID

from pydantic import Field

from school_admin.core.schemas import WireModel


class SchoolCreate(WireModel):
    name: str = Field(..., min_length=1, max_length=255)


class SchoolResponse(WireModel):
    id: UUID = Field(..., alias="_id")
    name: str
    created_at: datetime
