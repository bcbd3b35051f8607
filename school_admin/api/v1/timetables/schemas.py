from typing import List, Optional
from uuid import UUID

from pydantic import Field

from school_admin.core.enums import Weekday
from school_admin.core.schemas import WireModel
from school_admin.core.timetable_grid import PERIOD_COUNT


class TimetableEntryIn(WireModel):
    class_id: Optional[UUID] = None
    day: Weekday
    period_number: int = Field(..., ge=1, le=PERIOD_COUNT)
    # Subject id
    subject: UUID
    admin_id: Optional[UUID] = Field(None, alias="adminID")


class TimetableSave(WireModel):
    """Full replacement of one class's timetable. Cells left out are emptied."""

    entries: List[TimetableEntryIn] = []
    admin_id: Optional[UUID] = Field(None, alias="adminID")
    break_after_period: Optional[int] = Field(None, ge=0, le=PERIOD_COUNT)
    class_id: Optional[UUID] = Field(None, description="Required when entries is empty")


class TimetableSlotUpdate(WireModel):
    subject_id: UUID = Field(..., alias="subject")


class TimetableSlotResponse(WireModel):
    id: UUID = Field(..., alias="_id")
    class_id: UUID
    class_name: str
    day: str
    period_number: int
    subject_id: UUID = Field(..., alias="subject")
    subject_name: str
    teacher_id: Optional[UUID] = None
    teacher_name: Optional[str] = None
    # Class-level setting, repeated on every row
    break_after_period: int


class GridCellResponse(WireModel):
    kind: str  # slot | free | break
    period_number: Optional[int] = None
    subject_id: Optional[UUID] = None
    subject_name: Optional[str] = None
    class_name: Optional[str] = None
    is_current: bool = False


class GridDayResponse(WireModel):
    day: str
    cells: List[GridCellResponse]


class TimetableGridResponse(WireModel):
    owner_id: UUID
    break_after_period: int
    columns: List[str]
    days: List[GridDayResponse]
    current_day: Optional[str] = None
    current_period: Optional[int] = None
