from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.core.exceptions import ServiceError
from school_admin.db.session import get_db

from .schemas import AttendanceCreate, AttendanceResponse, AttendanceSummary
from . import service

router = APIRouter(prefix="/api/v1/attendance", tags=["attendance"])


@router.post("", response_model=AttendanceResponse, status_code=status.HTTP_201_CREATED)
async def record_attendance(
    payload: AttendanceCreate,
    db: AsyncSession = Depends(get_db),
) -> AttendanceResponse:
    try:
        return await service.record_attendance(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/student/{student_id}", response_model=List[AttendanceResponse])
async def list_student_attendance(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> List[AttendanceResponse]:
    try:
        return await service.list_student_attendance(db, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/student/{student_id}/summary", response_model=AttendanceSummary)
async def get_attendance_summary(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> AttendanceSummary:
    """Overall and per-subject percentages, e.g. {"overallPercentage": 66.67, "display": "66.67%"}"""
    try:
        return await service.get_attendance_summary(db, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
