import logging
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.core import bell_schedule
from school_admin.core.exceptions import ServiceError
from school_admin.core.models import SchoolClass, Subject, Teacher, TimetableSlot
from school_admin.core.timetable_grid import (
    BREAK_MARKER,
    DAYS,
    TimetableGrid,
    build_grid,
    flatten_grid,
)

from school_admin.api.v1.classes import service as class_service
from school_admin.api.v1.students import service as student_service
from school_admin.api.v1.teachers import service as teacher_service

from .schemas import (
    GridCellResponse,
    GridDayResponse,
    TimetableGridResponse,
    TimetableSave,
    TimetableSlotResponse,
    TimetableSlotUpdate,
)

logger = logging.getLogger(__name__)


def _slot_query():
    return (
        select(TimetableSlot, Subject, SchoolClass, Teacher)
        .join(Subject, TimetableSlot.subject_id == Subject.id)
        .join(SchoolClass, TimetableSlot.class_id == SchoolClass.id)
        .outerjoin(Teacher, Subject.teacher_id == Teacher.id)
    )


def _to_response(
    slot: TimetableSlot,
    subject: Subject,
    cl: SchoolClass,
    teacher: Optional[Teacher],
) -> TimetableSlotResponse:
    return TimetableSlotResponse(
        id=slot.id,
        class_id=cl.id,
        class_name=cl.name,
        day=slot.day,
        period_number=slot.period_number,
        subject_id=subject.id,
        subject_name=subject.sub_name,
        teacher_id=teacher.id if teacher is not None else None,
        teacher_name=teacher.name if teacher is not None else None,
        break_after_period=cl.break_after_period,
    )


def _sort_key(row: TimetableSlotResponse):
    day_index = DAYS.index(row.day) if row.day in DAYS else len(DAYS)
    return day_index, row.period_number, row.class_name


async def _fetch(db: AsyncSession, stmt) -> List[TimetableSlotResponse]:
    result = await db.execute(stmt)
    rows = [_to_response(*row) for row in result.all()]
    return sorted(rows, key=_sort_key)


async def get_class_timetable(db: AsyncSession, class_id: UUID) -> List[TimetableSlotResponse]:
    await class_service.get_class_or_error(db, class_id)
    return await _fetch(db, _slot_query().where(TimetableSlot.class_id == class_id))


async def get_teacher_timetable(db: AsyncSession, teacher_id: UUID) -> List[TimetableSlotResponse]:
    """Slots of every subject the teacher teaches, across classes."""
    await teacher_service.get_teacher_or_error(db, teacher_id)
    return await _fetch(db, _slot_query().where(Subject.teacher_id == teacher_id))


async def get_student_timetable(db: AsyncSession, student_id: UUID) -> List[TimetableSlotResponse]:
    student = await student_service.get_student_or_error(db, student_id)
    if student.class_id is None:
        return []
    return await get_class_timetable(db, student.class_id)


def _target_class_id(payload: TimetableSave) -> UUID:
    class_ids = {e.class_id for e in payload.entries if e.class_id is not None}
    if payload.class_id is not None:
        class_ids.add(payload.class_id)
    if len(class_ids) > 1:
        raise ServiceError("All timetable entries must belong to the same class", status.HTTP_400_BAD_REQUEST)
    if not class_ids:
        raise ServiceError("classId is required", status.HTTP_400_BAD_REQUEST)
    return class_ids.pop()


async def save_timetable(db: AsyncSession, payload: TimetableSave) -> List[TimetableSlotResponse]:
    """Replace a class's whole timetable with the submitted entries.

    Entries go through the grid first, so two entries for the same day/period
    collapse to the last one.
    """
    class_id = _target_class_id(payload)
    cl = await class_service.get_class_or_error(db, class_id)

    result = await db.execute(select(Subject).where(Subject.class_id == cl.id))
    subjects: Dict[UUID, Subject] = {s.id: s for s in result.scalars().all()}
    unknown = sorted({str(e.subject) for e in payload.entries if e.subject not in subjects})
    if unknown:
        raise ServiceError(
            f"Subject does not belong to this class: {', '.join(unknown)}",
            status.HTTP_400_BAD_REQUEST,
        )

    break_after_period = payload.break_after_period
    if break_after_period is None:
        break_after_period = cl.break_after_period
    grid = TimetableGrid(break_after_period)
    for entry in payload.entries:
        grid.set_cell(entry.day.value, entry.period_number, entry.subject, subjects[entry.subject].sub_name)

    await db.execute(delete(TimetableSlot).where(TimetableSlot.class_id == cl.id))
    entries = flatten_grid(grid, cl.id, payload.admin_id)
    for entry in entries:
        db.add(
            TimetableSlot(
                class_id=cl.id,
                day=entry["day"],
                period_number=entry["periodNumber"],
                subject_id=UUID(entry["subject"]),
                admin_id=payload.admin_id,
            )
        )
    cl.break_after_period = break_after_period
    await db.commit()
    logger.info(
        "Saved timetable for class %s: %d slots, break after period %d",
        cl.id, len(entries), break_after_period,
    )
    return await get_class_timetable(db, cl.id)


async def _get_slot_row(db: AsyncSession, slot_id: UUID) -> Optional[TimetableSlotResponse]:
    rows = await _fetch(db, _slot_query().where(TimetableSlot.id == slot_id))
    return rows[0] if rows else None


async def update_timetable_slot(
    db: AsyncSession,
    slot_id: UUID,
    payload: TimetableSlotUpdate,
) -> Optional[TimetableSlotResponse]:
    slot = await db.get(TimetableSlot, slot_id)
    if not slot:
        return None
    subject = await db.get(Subject, payload.subject_id)
    if not subject or subject.class_id != slot.class_id:
        raise ServiceError("Subject does not belong to this class", status.HTTP_400_BAD_REQUEST)
    slot.subject_id = subject.id
    await db.commit()
    logger.info("Updated timetable slot %s to subject %s", slot_id, subject.id)
    return await _get_slot_row(db, slot_id)


async def delete_timetable_slot(db: AsyncSession, slot_id: UUID) -> bool:
    slot = await db.get(TimetableSlot, slot_id)
    if not slot:
        return False
    await db.delete(slot)
    await db.commit()
    logger.info("Deleted timetable slot %s", slot_id)
    return True


# ----- Rendered grids -----


def grid_to_response(
    owner_id: UUID,
    grid: TimetableGrid,
    now: Optional[datetime] = None,
) -> TimetableGridResponse:
    now = now or datetime.now()
    days = []
    for day, row in grid.rows():
        cells = []
        period = 0
        for item in row:
            if isinstance(item, str) and item == BREAK_MARKER:
                cells.append(GridCellResponse(kind="break"))
                continue
            period += 1
            cells.append(
                GridCellResponse(
                    kind="free" if item.free else "slot",
                    period_number=period,
                    subject_id=item.subject_id,
                    subject_name=item.subject,
                    class_name=item.class_name,
                    is_current=bell_schedule.is_current_cell(day, period, now),
                )
            )
        days.append(GridDayResponse(day=day, cells=cells))
    return TimetableGridResponse(
        owner_id=owner_id,
        break_after_period=grid.break_after_period,
        columns=grid.columns(),
        days=days,
        current_day=bell_schedule.current_day(now),
        current_period=bell_schedule.current_period(now),
    )


async def get_class_grid(
    db: AsyncSession,
    class_id: UUID,
    now: Optional[datetime] = None,
) -> TimetableGridResponse:
    cl = await class_service.get_class_or_error(db, class_id)
    rows = await get_class_timetable(db, class_id)
    return grid_to_response(cl.id, build_grid(rows, cl.break_after_period), now)


async def get_teacher_grid(
    db: AsyncSession,
    teacher_id: UUID,
    now: Optional[datetime] = None,
) -> TimetableGridResponse:
    rows = await get_teacher_timetable(db, teacher_id)
    return grid_to_response(teacher_id, build_grid(rows), now)
