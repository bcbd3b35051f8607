"""Classes and class membership (student enrollment).

Enrollment changes are single-row updates of ``Student.class_id``; callers
re-fetch the class roster and the unassigned list afterwards.
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.core.config import settings
from school_admin.core.exceptions import ServiceError
from school_admin.core.models import (
    AttendanceRecord,
    ClassTeacherAssignment,
    SchoolClass,
    Student,
    Subject,
    TeacherClassAssignment,
    TimetableSlot,
)

from school_admin.api.v1.schools import service as school_service
from school_admin.api.v1.students import service as student_service
from school_admin.api.v1.students.schemas import StudentResponse

from .schemas import ClassCreate, ClassResponse, RemoveAllStudentsResponse

logger = logging.getLogger(__name__)


def _class_to_response(c: SchoolClass) -> ClassResponse:
    return ClassResponse(
        id=c.id,
        school_id=c.school_id,
        sclass_name=c.name,
        break_after_period=c.break_after_period,
        created_at=c.created_at,
    )


async def get_class_or_error(
    db: AsyncSession,
    class_id: UUID,
    status_code: int = status.HTTP_404_NOT_FOUND,
) -> SchoolClass:
    obj = await db.get(SchoolClass, class_id)
    if not obj:
        raise ServiceError("Class not found", status_code)
    return obj


async def create_class(db: AsyncSession, payload: ClassCreate) -> ClassResponse:
    await school_service.get_school_or_error(db, payload.school_id)
    try:
        obj = SchoolClass(
            school_id=payload.school_id,
            name=payload.sclass_name.strip(),
            break_after_period=settings.default_break_after_period,
        )
        db.add(obj)
        await db.commit()
        await db.refresh(obj)
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Class name already exists for this school", status.HTTP_409_CONFLICT)
    logger.info("Created class %s (%s) in school %s", obj.id, obj.name, obj.school_id)
    return _class_to_response(obj)


async def list_classes(db: AsyncSession, school_id: UUID) -> List[ClassResponse]:
    result = await db.execute(
        select(SchoolClass).where(SchoolClass.school_id == school_id).order_by(SchoolClass.name)
    )
    return [_class_to_response(c) for c in result.scalars().all()]


async def get_class(db: AsyncSession, class_id: UUID) -> Optional[ClassResponse]:
    obj = await db.get(SchoolClass, class_id)
    return _class_to_response(obj) if obj else None


async def delete_class(db: AsyncSession, class_id: UUID) -> bool:
    """Delete a class. Its subjects and timetable go with it; students become unassigned
    and teachers lose the class (and any class-teacher role for it)."""
    obj = await db.get(SchoolClass, class_id)
    if not obj:
        return False
    subject_ids = select(Subject.id).where(Subject.class_id == class_id)
    await db.execute(delete(AttendanceRecord).where(AttendanceRecord.subject_id.in_(subject_ids)))
    await db.execute(delete(TimetableSlot).where(TimetableSlot.class_id == class_id))
    await db.execute(delete(Subject).where(Subject.class_id == class_id))
    await db.execute(update(Student).where(Student.class_id == class_id).values(class_id=None))
    await db.execute(delete(TeacherClassAssignment).where(TeacherClassAssignment.class_id == class_id))
    await db.execute(delete(ClassTeacherAssignment).where(ClassTeacherAssignment.class_id == class_id))
    await db.delete(obj)
    await db.commit()
    logger.info("Deleted class %s", class_id)
    return True


async def get_class_students(db: AsyncSession, class_id: UUID) -> List[StudentResponse]:
    cl = await get_class_or_error(db, class_id)
    result = await db.execute(
        select(Student).where(Student.class_id == class_id).order_by(Student.name)
    )
    return [student_service.student_to_response(s, cl) for s in result.scalars().all()]


async def assign_student_to_class(
    db: AsyncSession,
    class_id: UUID,
    student_id: UUID,
) -> StudentResponse:
    cl = await get_class_or_error(db, class_id)
    student = await student_service.get_student_or_error(db, student_id)
    if student.school_id != cl.school_id:
        raise ServiceError("Student and class belong to different schools", status.HTTP_400_BAD_REQUEST)
    if student.class_id == class_id:
        return student_service.student_to_response(student, cl)
    if student.class_id is not None:
        logger.warning("Refused to assign student %s to class %s: enrolled in %s", student_id, class_id, student.class_id)
        raise ServiceError("Student is already assigned to another class", status.HTTP_409_CONFLICT)
    student.class_id = class_id
    await db.commit()
    await db.refresh(student)
    logger.info("Assigned student %s to class %s", student_id, class_id)
    return student_service.student_to_response(student, cl)


async def remove_student_from_class(
    db: AsyncSession,
    class_id: UUID,
    student_id: UUID,
) -> StudentResponse:
    """Return the student to the unassigned pool. Removing an unassigned student is a no-op."""
    await get_class_or_error(db, class_id)
    student = await student_service.get_student_or_error(db, student_id)
    if student.class_id is None:
        return student_service.student_to_response(student, None)
    if student.class_id != class_id:
        raise ServiceError("Student is not enrolled in this class", status.HTTP_400_BAD_REQUEST)
    student.class_id = None
    await db.commit()
    await db.refresh(student)
    logger.info("Removed student %s from class %s", student_id, class_id)
    return student_service.student_to_response(student, None)


async def remove_all_students_from_class(
    db: AsyncSession,
    class_id: UUID,
) -> RemoveAllStudentsResponse:
    await get_class_or_error(db, class_id)
    result = await db.execute(select(Student).where(Student.class_id == class_id))
    students = list(result.scalars().all())
    for s in students:
        s.class_id = None
    await db.commit()
    removed = [s.id for s in students]
    logger.info("Removed %d students from class %s", len(removed), class_id)
    return RemoveAllStudentsResponse(
        message=f"{len(removed)} students removed from class",
        count=len(removed),
        student_ids=removed,
    )
