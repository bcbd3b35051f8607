"""Shared wire schemas. Fields are snake_case in Python and camelCase on the wire;
entity ids go out as ``_id``."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class ClassRef(WireModel):
    """Populated class reference, e.g. a student's ``sclassName``."""

    id: UUID = Field(..., alias="_id")
    sclass_name: str


class TeacherRef(WireModel):
    id: UUID = Field(..., alias="_id")
    name: str


class SubjectRef(WireModel):
    id: UUID = Field(..., alias="_id")
    sub_name: str
    sub_code: Optional[str] = None
    # Owning class id
    sclass_name: UUID


class MessageResponse(WireModel):
    message: str
    count: Optional[int] = None
