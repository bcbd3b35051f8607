"""School: root owner of classes, subjects, teachers and students."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String, Uuid

from school_admin.db.session import Base


class School(Base):
    __tablename__ = "schools"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
