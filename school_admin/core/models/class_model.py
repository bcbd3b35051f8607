"""School classes (Sclass). Model named SchoolClass to avoid Python 'class' keyword."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from school_admin.db.session import Base


class SchoolClass(Base):
    """A cohort of students. Also holds the class-level timetable break setting."""

    __tablename__ = "classes"
    __table_args__ = (
        UniqueConstraint("school_id", "name", name="uq_class_school_name"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    school_id = Column(Uuid, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(50), nullable=False)
    # 0 = no break; otherwise the break column follows this period
    break_after_period = Column(Integer, nullable=False, default=4)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    school = relationship("School")
