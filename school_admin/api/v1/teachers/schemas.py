from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from school_admin.core.schemas import ClassRef, SubjectRef, WireModel


class TeacherCreate(WireModel):
    school_id: UUID
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    teach_sclass: Optional[UUID] = Field(None, description="Optional first class to teach in")
    teach_subject: Optional[UUID] = Field(None, description="Optional first subject; its class is linked too")


class TeacherClassPayload(WireModel):
    teacher_id: UUID
    class_id: UUID


class TeacherSubjectPayload(WireModel):
    teacher_id: UUID
    subject_id: UUID


class TeacherSubjectsRemovePayload(WireModel):
    teacher_id: UUID
    subject_ids: List[UUID] = Field(..., min_length=1)


class TeacherResponse(WireModel):
    id: UUID = Field(..., alias="_id")
    school_id: UUID
    name: str
    email: str
    teach_sclass: List[ClassRef] = []
    teach_subject: List[SubjectRef] = []
    class_teacher_of: List[ClassRef] = []
    created_at: datetime
