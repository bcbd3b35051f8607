"""Per-school reusable subject names used to bulk-create class subjects."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint, Uuid

from school_admin.db.session import Base


class MasterSubject(Base):
    __tablename__ = "master_subjects"
    __table_args__ = (
        UniqueConstraint("school_id", "sub_name", name="uq_master_subject_school_name"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    school_id = Column(Uuid, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False)
    sub_name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
