from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.core.exceptions import ServiceError
from school_admin.db.session import get_db

from .schemas import (
    TimetableGridResponse,
    TimetableSave,
    TimetableSlotResponse,
    TimetableSlotUpdate,
)
from . import service

router = APIRouter(prefix="/api/v1/timetables", tags=["timetables"])


@router.post("", response_model=List[TimetableSlotResponse])
async def save_timetable(
    payload: TimetableSave,
    db: AsyncSession = Depends(get_db),
) -> List[TimetableSlotResponse]:
    """Replace a class's timetable: {"entries": [...], "adminID": ..., "breakAfterPeriod": 4}"""
    try:
        return await service.save_timetable(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/class/{class_id}", response_model=List[TimetableSlotResponse])
async def get_class_timetable(
    class_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> List[TimetableSlotResponse]:
    try:
        return await service.get_class_timetable(db, class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/class/{class_id}/grid", response_model=TimetableGridResponse)
async def get_class_grid(
    class_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> TimetableGridResponse:
    try:
        return await service.get_class_grid(db, class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/teacher/{teacher_id}", response_model=List[TimetableSlotResponse])
async def get_teacher_timetable(
    teacher_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> List[TimetableSlotResponse]:
    try:
        return await service.get_teacher_timetable(db, teacher_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/teacher/{teacher_id}/grid", response_model=TimetableGridResponse)
async def get_teacher_grid(
    teacher_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> TimetableGridResponse:
    try:
        return await service.get_teacher_grid(db, teacher_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/student/{student_id}", response_model=List[TimetableSlotResponse])
async def get_student_timetable(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> List[TimetableSlotResponse]:
    try:
        return await service.get_student_timetable(db, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/{slot_id}", response_model=TimetableSlotResponse)
async def update_timetable_slot(
    slot_id: UUID,
    payload: TimetableSlotUpdate,
    db: AsyncSession = Depends(get_db),
) -> TimetableSlotResponse:
    try:
        obj = await service.update_timetable_slot(db, slot_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Timetable slot not found")
    return obj


@router.delete("/{slot_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_timetable_slot(
    slot_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> None:
    deleted = await service.delete_timetable_slot(db, slot_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Timetable slot not found")
