from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from school_admin.core.schemas import ClassRef, TeacherRef, WireModel


class SubjectItem(WireModel):
    sub_name: str = Field(..., min_length=1, max_length=255)
    sub_code: str = Field(..., min_length=1, max_length=50)
    sessions: Optional[str] = Field(None, max_length=50, description="Session / year label")


class SubjectBulkCreate(WireModel):
    """Create several subjects for one class: {"classId": ..., "subjects": [{subName, subCode, sessions}]}"""

    class_id: UUID
    subjects: List[SubjectItem] = Field(..., min_length=1)


class SubjectsFromMasterCreate(WireModel):
    class_id: UUID
    master_subject_ids: List[UUID] = Field(..., min_length=1)
    sessions: Optional[str] = Field(None, max_length=50, description="Defaults to the current year")


class SubjectResponse(WireModel):
    id: UUID = Field(..., alias="_id")
    school_id: UUID
    sclass_name: ClassRef
    sub_name: str
    sub_code: str
    sessions: Optional[str] = None
    teacher: Optional[TeacherRef] = None
    created_at: datetime


class MasterSubjectCreate(WireModel):
    sub_name: str = Field(..., min_length=1, max_length=255)
    school_id: UUID = Field(..., alias="school")


class MasterSubjectUpdate(WireModel):
    sub_name: str = Field(..., min_length=1, max_length=255)


class MasterSubjectResponse(WireModel):
    id: UUID = Field(..., alias="_id")
    school_id: UUID = Field(..., alias="school")
    sub_name: str
    created_at: datetime
