import logging
from typing import List, Optional, Tuple
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.core import attendance_calculator as calc
from school_admin.core.exceptions import ServiceError
from school_admin.core.models import AttendanceRecord, Subject

from school_admin.api.v1.students import service as student_service

from .schemas import (
    AttendanceCreate,
    AttendanceDay,
    AttendanceResponse,
    AttendanceSummary,
    SubjectAttendance,
)

logger = logging.getLogger(__name__)


def _to_response(record: AttendanceRecord, subject: Optional[Subject]) -> AttendanceResponse:
    return AttendanceResponse(
        id=record.id,
        student_id=record.student_id,
        subject_id=record.subject_id,
        subject_name=subject.sub_name if subject is not None else None,
        date=record.date,
        status=record.status,
        created_at=record.created_at,
    )


async def record_attendance(db: AsyncSession, payload: AttendanceCreate) -> AttendanceResponse:
    student = await student_service.get_student_or_error(db, payload.student_id)
    subject = None
    if payload.subject_id is not None:
        subject = await db.get(Subject, payload.subject_id)
        if not subject or subject.class_id != student.class_id:
            logger.warning(
                "Refused attendance: subject %s is not taught in the class of student %s",
                payload.subject_id, student.id,
            )
            raise ServiceError("Subject is not taught in the student's class", status.HTTP_400_BAD_REQUEST)

    stmt = select(AttendanceRecord).where(
        AttendanceRecord.student_id == student.id,
        AttendanceRecord.date == payload.date,
    )
    if payload.subject_id is None:
        stmt = stmt.where(AttendanceRecord.subject_id.is_(None))
    else:
        stmt = stmt.where(AttendanceRecord.subject_id == payload.subject_id)
    result = await db.execute(stmt)
    record = result.scalars().first()
    if record:
        record.status = payload.status.value
    else:
        record = AttendanceRecord(
            student_id=student.id,
            subject_id=payload.subject_id,
            date=payload.date,
            status=payload.status.value,
        )
        db.add(record)
    await db.commit()
    await db.refresh(record)
    logger.info(
        "Recorded %s for student %s on %s (subject %s)",
        record.status, student.id, record.date, record.subject_id,
    )
    return _to_response(record, subject)


async def _student_records(
    db: AsyncSession,
    student_id: UUID,
) -> List[Tuple[AttendanceRecord, Optional[Subject]]]:
    result = await db.execute(
        select(AttendanceRecord, Subject)
        .outerjoin(Subject, AttendanceRecord.subject_id == Subject.id)
        .where(AttendanceRecord.student_id == student_id)
        .order_by(AttendanceRecord.date, AttendanceRecord.created_at)
    )
    return [(record, subject) for record, subject in result.all()]


async def list_student_attendance(db: AsyncSession, student_id: UUID) -> List[AttendanceResponse]:
    await student_service.get_student_or_error(db, student_id)
    return [_to_response(r, s) for r, s in await _student_records(db, student_id)]


async def get_attendance_summary(db: AsyncSession, student_id: UUID) -> AttendanceSummary:
    await student_service.get_student_or_error(db, student_id)
    pairs = await _student_records(db, student_id)
    rows = [_to_response(r, s) for r, s in pairs]
    sessions = {s.id: s.sessions for _, s in pairs if s is not None}

    subjects = []
    grouped = calc.group_attendance_by_subject(
        {
            "subject_name": row.subject_name,
            "subject_id": row.subject_id,
            "sessions": sessions.get(row.subject_id),
            "status": row.status,
            "date": row.date,
        }
        for row in rows
    )
    for name, bucket in sorted(grouped.items()):
        counted = bucket["present"] + bucket["absent"]
        pct = calc.calculate_subject_attendance_percentage(bucket["present"], counted)
        subjects.append(
            SubjectAttendance(
                subject_id=bucket["sub_id"],
                subject_name=name,
                sessions=bucket["sessions"],
                present=bucket["present"],
                absent=bucket["absent"],
                percentage=pct,
                display=calc.format_pct(pct),
                records=[AttendanceDay(**day) for day in bucket["all_data"]],
            )
        )

    overall = calc.compute_overall_pct(rows)
    return AttendanceSummary(
        student_id=student_id,
        total=len(calc.valid_records(rows)),
        overall_percentage=overall,
        absent_percentage=calc.compute_absent_pct(rows),
        display=calc.format_pct(overall),
        subjects=subjects,
    )
