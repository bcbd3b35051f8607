import logging
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.core.exceptions import ServiceError, not_found
from school_admin.core.models import AttendanceRecord, SchoolClass, Student
from school_admin.core.schemas import ClassRef

from school_admin.api.v1.schools import service as school_service

from .schemas import StudentCreate, StudentResponse

logger = logging.getLogger(__name__)


def student_to_response(s: Student, school_class: Optional[SchoolClass]) -> StudentResponse:
    ref = None
    if s.class_id is not None and school_class is not None:
        ref = ClassRef(id=school_class.id, sclass_name=school_class.name)
    return StudentResponse(
        id=s.id,
        school_id=s.school_id,
        name=s.name,
        roll_num=s.roll_num,
        sclass_name=ref,
        created_at=s.created_at,
    )


async def _class_map(db: AsyncSession, class_ids: Iterable[Optional[UUID]]) -> Dict[UUID, SchoolClass]:
    ids = {c for c in class_ids if c is not None}
    if not ids:
        return {}
    result = await db.execute(select(SchoolClass).where(SchoolClass.id.in_(ids)))
    return {c.id: c for c in result.scalars().all()}


async def students_to_response(db: AsyncSession, students: List[Student]) -> List[StudentResponse]:
    classes = await _class_map(db, (s.class_id for s in students))
    return [student_to_response(s, classes.get(s.class_id)) for s in students]


async def get_student_or_error(db: AsyncSession, student_id: UUID) -> Student:
    obj = await db.get(Student, student_id)
    if not obj:
        raise not_found("Student")
    return obj


async def create_student(db: AsyncSession, payload: StudentCreate) -> StudentResponse:
    await school_service.get_school_or_error(db, payload.school_id)
    cl = None
    if payload.class_id is not None:
        cl = await db.get(SchoolClass, payload.class_id)
        if not cl or cl.school_id != payload.school_id:
            raise ServiceError("Invalid class for this school", status.HTTP_400_BAD_REQUEST)
    obj = Student(
        school_id=payload.school_id,
        class_id=payload.class_id,
        name=payload.name.strip(),
        roll_num=payload.roll_num,
    )
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    logger.info("Created student %s in school %s (class %s)", obj.id, obj.school_id, obj.class_id)
    return student_to_response(obj, cl)


async def get_student(db: AsyncSession, student_id: UUID) -> Optional[StudentResponse]:
    obj = await db.get(Student, student_id)
    if not obj:
        return None
    cl = await db.get(SchoolClass, obj.class_id) if obj.class_id else None
    return student_to_response(obj, cl)


async def list_students(db: AsyncSession, school_id: UUID) -> List[StudentResponse]:
    result = await db.execute(
        select(Student).where(Student.school_id == school_id).order_by(Student.name)
    )
    return await students_to_response(db, list(result.scalars().all()))


async def list_unassigned_students(db: AsyncSession, school_id: UUID) -> List[StudentResponse]:
    result = await db.execute(
        select(Student)
        .where(Student.school_id == school_id, Student.class_id.is_(None))
        .order_by(Student.name)
    )
    return [student_to_response(s, None) for s in result.scalars().all()]


async def delete_student(db: AsyncSession, student_id: UUID) -> bool:
    obj = await db.get(Student, student_id)
    if not obj:
        return False
    await db.execute(delete(AttendanceRecord).where(AttendanceRecord.student_id == student_id))
    await db.delete(obj)
    await db.commit()
    logger.info("Deleted student %s", student_id)
    return True
