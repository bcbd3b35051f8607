import uuid
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship

from school_admin.db.session import Base


class AttendanceRecord(Base):
    """Daily attendance of a student, optionally for one subject."""

    __tablename__ = "attendance_records"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id = Column(Uuid, ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    subject_id = Column(Uuid, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=True)
    date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False)  # Present, Absent
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    student = relationship("Student", foreign_keys=[student_id])
    subject = relationship("Subject", foreign_keys=[subject_id])
