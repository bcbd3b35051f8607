"""Teacher assignments.

A teacher's relations are kept consistent here:
- teachSclass: TeacherClassAssignment rows.
- teachSubject: subjects whose teacher_id is the teacher.
- classTeacherOf: ClassTeacherAssignment rows (one class teacher per class).

Assigning a subject also links its class. Removing a teacher from a class
clears their subjects and class-teacher role in that class. A class-teacher
role requires the teacher to teach in the class.
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.core.exceptions import ServiceError, not_found
from school_admin.core.models import (
    ClassTeacherAssignment,
    SchoolClass,
    Subject,
    Teacher,
    TeacherClassAssignment,
)
from school_admin.core.schemas import ClassRef, SubjectRef

from school_admin.api.v1.classes import service as class_service
from school_admin.api.v1.schools import service as school_service
from school_admin.api.v1.subjects import service as subject_service

from .schemas import (
    TeacherClassPayload,
    TeacherCreate,
    TeacherResponse,
    TeacherSubjectPayload,
    TeacherSubjectsRemovePayload,
)

logger = logging.getLogger(__name__)


async def _to_response(db: AsyncSession, t: Teacher) -> TeacherResponse:
    classes = await db.execute(
        select(SchoolClass)
        .join(TeacherClassAssignment, TeacherClassAssignment.class_id == SchoolClass.id)
        .where(TeacherClassAssignment.teacher_id == t.id)
        .order_by(SchoolClass.name)
    )
    subjects = await db.execute(
        select(Subject).where(Subject.teacher_id == t.id).order_by(Subject.sub_name)
    )
    class_teacher_of = await db.execute(
        select(SchoolClass)
        .join(ClassTeacherAssignment, ClassTeacherAssignment.class_id == SchoolClass.id)
        .where(ClassTeacherAssignment.teacher_id == t.id)
        .order_by(SchoolClass.name)
    )
    return TeacherResponse(
        id=t.id,
        school_id=t.school_id,
        name=t.name,
        email=t.email,
        teach_sclass=[ClassRef(id=c.id, sclass_name=c.name) for c in classes.scalars().all()],
        teach_subject=[
            SubjectRef(id=s.id, sub_name=s.sub_name, sub_code=s.sub_code, sclass_name=s.class_id)
            for s in subjects.scalars().all()
        ],
        class_teacher_of=[ClassRef(id=c.id, sclass_name=c.name) for c in class_teacher_of.scalars().all()],
        created_at=t.created_at,
    )


async def get_teacher_or_error(db: AsyncSession, teacher_id: UUID) -> Teacher:
    obj = await db.get(Teacher, teacher_id)
    if not obj:
        raise not_found("Teacher")
    return obj


def _check_same_school(teacher: Teacher, school_id: UUID) -> None:
    if teacher.school_id != school_id:
        raise ServiceError("Teacher belongs to a different school", status.HTTP_400_BAD_REQUEST)


async def _class_link(db: AsyncSession, teacher_id: UUID, class_id: UUID) -> Optional[TeacherClassAssignment]:
    result = await db.execute(
        select(TeacherClassAssignment).where(
            TeacherClassAssignment.teacher_id == teacher_id,
            TeacherClassAssignment.class_id == class_id,
        )
    )
    return result.scalar_one_or_none()


async def _ensure_class_link(db: AsyncSession, teacher_id: UUID, class_id: UUID) -> bool:
    """Add class to the teacher's teachSclass. True if a link was created."""
    if await _class_link(db, teacher_id, class_id):
        return False
    db.add(TeacherClassAssignment(teacher_id=teacher_id, class_id=class_id))
    await db.flush()
    return True


async def create_teacher(db: AsyncSession, payload: TeacherCreate) -> TeacherResponse:
    await school_service.get_school_or_error(db, payload.school_id)
    subject = None
    cl = None
    if payload.teach_subject is not None:
        subject = await db.get(Subject, payload.teach_subject)
        if not subject or subject.school_id != payload.school_id:
            raise ServiceError("Invalid subject for this school", status.HTTP_400_BAD_REQUEST)
    if payload.teach_sclass is not None:
        cl = await db.get(SchoolClass, payload.teach_sclass)
        if not cl or cl.school_id != payload.school_id:
            raise ServiceError("Invalid class for this school", status.HTTP_400_BAD_REQUEST)
    try:
        obj = Teacher(
            school_id=payload.school_id,
            name=payload.name.strip(),
            email=payload.email.strip().lower(),
        )
        db.add(obj)
        await db.flush()
        if cl is not None:
            await _ensure_class_link(db, obj.id, cl.id)
        if subject is not None:
            subject.teacher_id = obj.id
            await _ensure_class_link(db, obj.id, subject.class_id)
        await db.commit()
        await db.refresh(obj)
    except IntegrityError:
        await db.rollback()
        raise ServiceError("A teacher with this email already exists", status.HTTP_409_CONFLICT)
    logger.info("Created teacher %s in school %s", obj.id, obj.school_id)
    return await _to_response(db, obj)


async def list_teachers(db: AsyncSession, school_id: UUID) -> List[TeacherResponse]:
    result = await db.execute(
        select(Teacher).where(Teacher.school_id == school_id).order_by(Teacher.name)
    )
    return [await _to_response(db, t) for t in result.scalars().all()]


async def get_teacher(db: AsyncSession, teacher_id: UUID) -> Optional[TeacherResponse]:
    obj = await db.get(Teacher, teacher_id)
    return await _to_response(db, obj) if obj else None


async def delete_teacher(db: AsyncSession, teacher_id: UUID) -> bool:
    obj = await db.get(Teacher, teacher_id)
    if not obj:
        return False
    result = await db.execute(select(Subject).where(Subject.teacher_id == teacher_id))
    for s in result.scalars().all():
        s.teacher_id = None
    await db.execute(delete(TeacherClassAssignment).where(TeacherClassAssignment.teacher_id == teacher_id))
    await db.execute(delete(ClassTeacherAssignment).where(ClassTeacherAssignment.teacher_id == teacher_id))
    await db.delete(obj)
    await db.commit()
    logger.info("Deleted teacher %s", teacher_id)
    return True


async def assign_teacher_to_class(db: AsyncSession, payload: TeacherClassPayload) -> TeacherResponse:
    teacher = await get_teacher_or_error(db, payload.teacher_id)
    cl = await class_service.get_class_or_error(db, payload.class_id)
    _check_same_school(teacher, cl.school_id)
    try:
        created = await _ensure_class_link(db, teacher.id, cl.id)
        await db.commit()
    except IntegrityError:
        # concurrent assign of the same pair; the link exists either way
        await db.rollback()
        await db.refresh(teacher)
        created = False
    if created:
        logger.info("Assigned teacher %s to class %s", teacher.id, cl.id)
    return await _to_response(db, teacher)


async def remove_teacher_from_class(db: AsyncSession, payload: TeacherClassPayload) -> TeacherResponse:
    teacher = await get_teacher_or_error(db, payload.teacher_id)
    cl = await class_service.get_class_or_error(db, payload.class_id)
    link = await _class_link(db, teacher.id, cl.id)
    if link:
        await db.delete(link)
    result = await db.execute(
        select(Subject).where(Subject.class_id == cl.id, Subject.teacher_id == teacher.id)
    )
    cleared = 0
    for s in result.scalars().all():
        s.teacher_id = None
        cleared += 1
    role = await db.execute(
        delete(ClassTeacherAssignment).where(
            ClassTeacherAssignment.class_id == cl.id,
            ClassTeacherAssignment.teacher_id == teacher.id,
        )
    )
    await db.commit()
    logger.info(
        "Removed teacher %s from class %s (%d subjects cleared, class teacher role removed: %s)",
        teacher.id, cl.id, cleared, bool(role.rowcount),
    )
    return await _to_response(db, teacher)


async def update_teach_subject(db: AsyncSession, payload: TeacherSubjectPayload) -> TeacherResponse:
    """Make the teacher the subject's teacher and link the subject's class, in one commit."""
    teacher = await get_teacher_or_error(db, payload.teacher_id)
    subject = await subject_service.get_subject_or_error(db, payload.subject_id)
    _check_same_school(teacher, subject.school_id)
    previous = subject.teacher_id
    subject.teacher_id = teacher.id
    await _ensure_class_link(db, teacher.id, subject.class_id)
    await db.commit()
    if previous is not None and previous != teacher.id:
        logger.info("Subject %s reassigned from teacher %s to %s", subject.id, previous, teacher.id)
    else:
        logger.info("Teacher %s teaches subject %s in class %s", teacher.id, subject.id, subject.class_id)
    return await _to_response(db, teacher)


async def remove_teacher_subjects(
    db: AsyncSession,
    payload: TeacherSubjectsRemovePayload,
) -> TeacherResponse:
    """Clear the teacher from the given subjects. Subjects taught by someone else are left alone;
    the teacher's class links are not touched."""
    teacher = await get_teacher_or_error(db, payload.teacher_id)
    result = await db.execute(
        select(Subject).where(
            Subject.id.in_(payload.subject_ids),
            Subject.teacher_id == teacher.id,
        )
    )
    cleared = 0
    for s in result.scalars().all():
        s.teacher_id = None
        cleared += 1
    await db.commit()
    logger.info("Removed %d subjects from teacher %s", cleared, teacher.id)
    return await _to_response(db, teacher)


async def assign_class_teacher(db: AsyncSession, payload: TeacherClassPayload) -> TeacherResponse:
    teacher = await get_teacher_or_error(db, payload.teacher_id)
    cl = await class_service.get_class_or_error(db, payload.class_id)
    _check_same_school(teacher, cl.school_id)
    if not await _class_link(db, teacher.id, cl.id):
        logger.warning("Refused class teacher role: teacher %s does not teach in class %s", teacher.id, cl.id)
        raise ServiceError("Teacher does not teach in this class", status.HTTP_400_BAD_REQUEST)
    result = await db.execute(
        select(ClassTeacherAssignment).where(ClassTeacherAssignment.class_id == cl.id)
    )
    existing = result.scalar_one_or_none()
    if existing:
        if existing.teacher_id == teacher.id:
            return await _to_response(db, teacher)
        raise ServiceError("Class teacher already assigned for this class", status.HTTP_409_CONFLICT)
    try:
        db.add(ClassTeacherAssignment(class_id=cl.id, teacher_id=teacher.id))
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Class teacher already assigned for this class", status.HTTP_409_CONFLICT)
    logger.info("Teacher %s is now class teacher of %s", teacher.id, cl.id)
    return await _to_response(db, teacher)


async def remove_class_teacher(db: AsyncSession, payload: TeacherClassPayload) -> TeacherResponse:
    teacher = await get_teacher_or_error(db, payload.teacher_id)
    cl = await class_service.get_class_or_error(db, payload.class_id)
    result = await db.execute(
        select(ClassTeacherAssignment).where(
            ClassTeacherAssignment.class_id == cl.id,
            ClassTeacherAssignment.teacher_id == teacher.id,
        )
    )
    role = result.scalar_one_or_none()
    if role:
        await db.delete(role)
        await db.commit()
        logger.info("Removed class teacher role of teacher %s for class %s", teacher.id, cl.id)
    return await _to_response(db, teacher)
