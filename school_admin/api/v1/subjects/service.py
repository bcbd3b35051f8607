import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.core.exceptions import ServiceError, not_found
from school_admin.core.models import (
    AttendanceRecord,
    MasterSubject,
    SchoolClass,
    Subject,
    Teacher,
    TimetableSlot,
)
from school_admin.core.schemas import ClassRef, TeacherRef

from school_admin.api.v1.classes import service as class_service
from school_admin.api.v1.schools import service as school_service

from .codes import generate_subject_code
from .schemas import (
    MasterSubjectCreate,
    MasterSubjectResponse,
    MasterSubjectUpdate,
    SubjectBulkCreate,
    SubjectResponse,
    SubjectsFromMasterCreate,
)

logger = logging.getLogger(__name__)


def _to_response(s: Subject, cl: SchoolClass, teacher: Optional[Teacher]) -> SubjectResponse:
    return SubjectResponse(
        id=s.id,
        school_id=s.school_id,
        sclass_name=ClassRef(id=cl.id, sclass_name=cl.name),
        sub_name=s.sub_name,
        sub_code=s.sub_code,
        sessions=s.sessions,
        teacher=TeacherRef(id=teacher.id, name=teacher.name) if teacher is not None else None,
        created_at=s.created_at,
    )


async def _to_responses(db: AsyncSession, subjects: List[Subject]) -> List[SubjectResponse]:
    class_ids = {s.class_id for s in subjects}
    teacher_ids = {s.teacher_id for s in subjects if s.teacher_id is not None}
    classes: Dict[UUID, SchoolClass] = {}
    teachers: Dict[UUID, Teacher] = {}
    if class_ids:
        result = await db.execute(select(SchoolClass).where(SchoolClass.id.in_(class_ids)))
        classes = {c.id: c for c in result.scalars().all()}
    if teacher_ids:
        result = await db.execute(select(Teacher).where(Teacher.id.in_(teacher_ids)))
        teachers = {t.id: t for t in result.scalars().all()}
    return [_to_response(s, classes[s.class_id], teachers.get(s.teacher_id)) for s in subjects]


async def get_subject_or_error(db: AsyncSession, subject_id: UUID) -> Subject:
    obj = await db.get(Subject, subject_id)
    if not obj:
        raise not_found("Subject")
    return obj


async def create_subjects(db: AsyncSession, payload: SubjectBulkCreate) -> List[SubjectResponse]:
    """All-or-nothing: a duplicate code (in the payload or the class) rejects the whole batch."""
    cl = await class_service.get_class_or_error(db, payload.class_id, status.HTTP_400_BAD_REQUEST)
    codes = [item.sub_code.strip() for item in payload.subjects]
    if len(set(codes)) != len(codes):
        raise ServiceError("Duplicate subject codes in request", status.HTTP_400_BAD_REQUEST)
    created = []
    try:
        for item, code in zip(payload.subjects, codes):
            obj = Subject(
                school_id=cl.school_id,
                class_id=cl.id,
                sub_name=item.sub_name.strip(),
                sub_code=code,
                sessions=item.sessions,
            )
            db.add(obj)
            await db.flush()
            created.append(obj)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Subject code already exists in this class", status.HTTP_409_CONFLICT)
    for obj in created:
        await db.refresh(obj)
    logger.info("Created %d subjects in class %s", len(created), cl.id)
    return [_to_response(s, cl, None) for s in created]


async def create_subjects_from_master(
    db: AsyncSession,
    payload: SubjectsFromMasterCreate,
) -> List[SubjectResponse]:
    cl = await class_service.get_class_or_error(db, payload.class_id, status.HTTP_400_BAD_REQUEST)
    wanted = list(dict.fromkeys(payload.master_subject_ids))
    result = await db.execute(
        select(MasterSubject).where(
            MasterSubject.id.in_(wanted),
            MasterSubject.school_id == cl.school_id,
        )
    )
    masters = {m.id: m for m in result.scalars().all()}
    missing = [str(m) for m in wanted if m not in masters]
    if missing:
        raise ServiceError(f"Invalid master subject: {', '.join(missing)}", status.HTTP_400_BAD_REQUEST)

    existing = await db.execute(select(Subject.sub_code).where(Subject.class_id == cl.id))
    taken = set(existing.scalars().all())
    sessions = payload.sessions or str(datetime.now().year)
    created = []
    for master_id in wanted:
        obj = Subject(
            school_id=cl.school_id,
            class_id=cl.id,
            sub_name=masters[master_id].sub_name,
            sub_code=generate_subject_code(taken),
            sessions=sessions,
        )
        db.add(obj)
        created.append(obj)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Subject code already exists in this class", status.HTTP_409_CONFLICT)
    for obj in created:
        await db.refresh(obj)
    logger.info("Created %d subjects in class %s from master list", len(created), cl.id)
    return [_to_response(s, cl, None) for s in created]


async def list_class_subjects(db: AsyncSession, class_id: UUID) -> List[SubjectResponse]:
    await class_service.get_class_or_error(db, class_id)
    result = await db.execute(
        select(Subject).where(Subject.class_id == class_id).order_by(Subject.sub_name)
    )
    return await _to_responses(db, list(result.scalars().all()))


async def list_free_subjects(db: AsyncSession, class_id: UUID) -> List[SubjectResponse]:
    """Subjects of the class that no teacher teaches yet."""
    await class_service.get_class_or_error(db, class_id)
    result = await db.execute(
        select(Subject)
        .where(Subject.class_id == class_id, Subject.teacher_id.is_(None))
        .order_by(Subject.sub_name)
    )
    return await _to_responses(db, list(result.scalars().all()))


async def list_school_subjects(db: AsyncSession, school_id: UUID) -> List[SubjectResponse]:
    result = await db.execute(
        select(Subject).where(Subject.school_id == school_id).order_by(Subject.sub_name)
    )
    return await _to_responses(db, list(result.scalars().all()))


async def get_subject(db: AsyncSession, subject_id: UUID) -> Optional[SubjectResponse]:
    obj = await db.get(Subject, subject_id)
    if not obj:
        return None
    return (await _to_responses(db, [obj]))[0]


async def _delete_subjects(db: AsyncSession, subject_ids: Iterable[UUID]) -> None:
    ids = list(subject_ids)
    if not ids:
        return
    await db.execute(delete(TimetableSlot).where(TimetableSlot.subject_id.in_(ids)))
    await db.execute(delete(AttendanceRecord).where(AttendanceRecord.subject_id.in_(ids)))
    await db.execute(delete(Subject).where(Subject.id.in_(ids)))


async def delete_subject(db: AsyncSession, subject_id: UUID) -> bool:
    """Delete a subject; its teacher assignment and timetable slots go with it."""
    obj = await db.get(Subject, subject_id)
    if not obj:
        return False
    await _delete_subjects(db, [obj.id])
    await db.commit()
    logger.info("Deleted subject %s of class %s", subject_id, obj.class_id)
    return True


async def delete_all_subjects(db: AsyncSession, class_id: UUID) -> int:
    await class_service.get_class_or_error(db, class_id)
    result = await db.execute(select(Subject.id).where(Subject.class_id == class_id))
    ids = list(result.scalars().all())
    await _delete_subjects(db, ids)
    await db.commit()
    logger.info("Deleted %d subjects of class %s", len(ids), class_id)
    return len(ids)


# ----- Master subject list -----


def _master_to_response(m: MasterSubject) -> MasterSubjectResponse:
    return MasterSubjectResponse(
        id=m.id,
        school_id=m.school_id,
        sub_name=m.sub_name,
        created_at=m.created_at,
    )


async def add_master_subject(db: AsyncSession, payload: MasterSubjectCreate) -> MasterSubjectResponse:
    await school_service.get_school_or_error(db, payload.school_id)
    try:
        obj = MasterSubject(school_id=payload.school_id, sub_name=payload.sub_name.strip())
        db.add(obj)
        await db.commit()
        await db.refresh(obj)
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Subject already exists in the master list", status.HTTP_409_CONFLICT)
    logger.info("Added master subject %s (%s) to school %s", obj.id, obj.sub_name, obj.school_id)
    return _master_to_response(obj)


async def list_master_subjects(db: AsyncSession, school_id: UUID) -> List[MasterSubjectResponse]:
    result = await db.execute(
        select(MasterSubject).where(MasterSubject.school_id == school_id).order_by(MasterSubject.sub_name)
    )
    return [_master_to_response(m) for m in result.scalars().all()]


async def update_master_subject(
    db: AsyncSession,
    master_subject_id: UUID,
    payload: MasterSubjectUpdate,
) -> Optional[MasterSubjectResponse]:
    obj = await db.get(MasterSubject, master_subject_id)
    if not obj:
        return None
    obj.sub_name = payload.sub_name.strip()
    try:
        await db.commit()
        await db.refresh(obj)
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Subject already exists in the master list", status.HTTP_409_CONFLICT)
    logger.info("Renamed master subject %s to %s", obj.id, obj.sub_name)
    return _master_to_response(obj)


async def delete_master_subject(db: AsyncSession, master_subject_id: UUID) -> bool:
    obj = await db.get(MasterSubject, master_subject_id)
    if not obj:
        return False
    await db.delete(obj)
    await db.commit()
    logger.info("Deleted master subject %s", master_subject_id)
    return True
