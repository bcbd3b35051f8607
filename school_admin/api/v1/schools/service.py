import logging
from typing import Optional
from uuid import UUID

from fastapi import status
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.core.exceptions import ServiceError
from school_admin.core.models import School

from .schemas import SchoolCreate, SchoolResponse

logger = logging.getLogger(__name__)


def _to_response(s: School) -> SchoolResponse:
    return SchoolResponse(id=s.id, name=s.name, created_at=s.created_at)


async def create_school(db: AsyncSession, payload: SchoolCreate) -> SchoolResponse:
    obj = School(name=payload.name.strip())
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    logger.info("Created school %s (%s)", obj.id, obj.name)
    return _to_response(obj)


async def get_school(db: AsyncSession, school_id: UUID) -> Optional[SchoolResponse]:
    obj = await db.get(School, school_id)
    return _to_response(obj) if obj else None


async def get_school_or_error(
    db: AsyncSession,
    school_id: UUID,
    status_code: int = status.HTTP_400_BAD_REQUEST,
) -> School:
    obj = await db.get(School, school_id)
    if not obj:
        raise ServiceError("Invalid school", status_code)
    return obj
