import datetime as dt
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from school_admin.core.enums import AttendanceStatus
from school_admin.core.schemas import WireModel


class AttendanceCreate(WireModel):
    """One day's status; a second record for the same student/subject/date replaces the first."""

    student_id: UUID
    subject_id: Optional[UUID] = None
    date: dt.date
    status: AttendanceStatus


class AttendanceResponse(WireModel):
    id: UUID = Field(..., alias="_id")
    student_id: UUID
    subject_id: Optional[UUID] = None
    subject_name: Optional[str] = None
    date: dt.date
    status: str
    created_at: dt.datetime


class AttendanceDay(WireModel):
    date: Optional[dt.date] = None
    status: str


class SubjectAttendance(WireModel):
    subject_id: Optional[UUID] = None
    subject_name: str
    sessions: Optional[str] = None
    present: int
    absent: int
    percentage: float
    display: str
    records: List[AttendanceDay]


class AttendanceSummary(WireModel):
    student_id: UUID
    total: int
    overall_percentage: float
    absent_percentage: float
    display: str
    subjects: List[SubjectAttendance]
