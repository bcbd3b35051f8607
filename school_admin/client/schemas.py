"""Views of backend payloads as seen by the client.

A student's ``sclassName`` may come back as a bare class id or as a populated
``{"_id": ..., "sclassName": ...}`` object; both become a ``ClassRef``.
"""

from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from school_admin.core.schemas import ClassRef, SubjectRef, WireModel


class ClientClassRef(ClassRef):
    # Unknown when only the id was sent
    sclass_name: Optional[str] = None


def _normalize_class_ref(value: Any) -> Any:
    if value is None or value == "":
        return None
    if isinstance(value, (str, UUID)):
        return {"_id": value}
    return value


class StudentView(WireModel):
    id: UUID = Field(..., alias="_id")
    school_id: Optional[UUID] = None
    name: str
    roll_num: Optional[int] = None
    sclass_name: Optional[ClientClassRef] = None

    @field_validator("sclass_name", mode="before")
    @classmethod
    def normalize_class(cls, value: Any) -> Any:
        return _normalize_class_ref(value)

    @property
    def class_id(self) -> Optional[UUID]:
        return self.sclass_name.id if self.sclass_name is not None else None


class TeacherView(WireModel):
    id: UUID = Field(..., alias="_id")
    school_id: Optional[UUID] = None
    name: str
    email: Optional[str] = None
    teach_sclass: List[ClientClassRef] = []
    teach_subject: List[SubjectRef] = []
    class_teacher_of: List[ClientClassRef] = []

    @field_validator("teach_sclass", "class_teacher_of", mode="before")
    @classmethod
    def normalize_classes(cls, value: Any) -> Any:
        if value is None:
            return []
        return [_normalize_class_ref(v) for v in value if v is not None and v != ""]

    def teaches_in(self, class_id: UUID) -> bool:
        return any(c.id == class_id for c in self.teach_sclass)


class BulkFailure(BaseModel):
    item_id: UUID
    message: str
    status_code: Optional[int] = None


class BulkResult(BaseModel):
    """Outcome of a sequential bulk call. ``skipped`` were never attempted."""

    succeeded: List[UUID] = []
    failed: Optional[BulkFailure] = None
    skipped: List[UUID] = []

    @property
    def ok(self) -> bool:
        return self.failed is None
