import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint, Uuid

from school_admin.db.session import Base


class Teacher(Base):
    """Teaching staff. Subjects taught are the subjects whose teacher_id points here."""

    __tablename__ = "teachers"
    __table_args__ = (
        UniqueConstraint("school_id", "email", name="uq_teacher_school_email"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    school_id = Column(Uuid, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
