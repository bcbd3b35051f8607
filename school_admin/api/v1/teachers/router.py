from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.core.exceptions import ServiceError
from school_admin.db.session import get_db

from .schemas import (
    TeacherClassPayload,
    TeacherCreate,
    TeacherResponse,
    TeacherSubjectPayload,
    TeacherSubjectsRemovePayload,
)
from . import service

router = APIRouter(prefix="/api/v1/teachers", tags=["teachers"])


@router.post("", response_model=TeacherResponse, status_code=status.HTTP_201_CREATED)
async def create_teacher(
    payload: TeacherCreate,
    db: AsyncSession = Depends(get_db),
) -> TeacherResponse:
    try:
        return await service.create_teacher(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/school/{school_id}", response_model=List[TeacherResponse])
async def list_teachers(
    school_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> List[TeacherResponse]:
    return await service.list_teachers(db, school_id)


@router.put("/assign-class", response_model=TeacherResponse)
async def assign_teacher_to_class(
    payload: TeacherClassPayload,
    db: AsyncSession = Depends(get_db),
) -> TeacherResponse:
    try:
        return await service.assign_teacher_to_class(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/remove-from-class", response_model=TeacherResponse)
async def remove_teacher_from_class(
    payload: TeacherClassPayload,
    db: AsyncSession = Depends(get_db),
) -> TeacherResponse:
    """Also clears the teacher's subjects and class-teacher role in that class."""
    try:
        return await service.remove_teacher_from_class(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/teach-subject", response_model=TeacherResponse)
async def update_teach_subject(
    payload: TeacherSubjectPayload,
    db: AsyncSession = Depends(get_db),
) -> TeacherResponse:
    try:
        return await service.update_teach_subject(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/remove-subjects", response_model=TeacherResponse)
async def remove_teacher_subjects(
    payload: TeacherSubjectsRemovePayload,
    db: AsyncSession = Depends(get_db),
) -> TeacherResponse:
    try:
        return await service.remove_teacher_subjects(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/assign-class-teacher", response_model=TeacherResponse)
async def assign_class_teacher(
    payload: TeacherClassPayload,
    db: AsyncSession = Depends(get_db),
) -> TeacherResponse:
    try:
        return await service.assign_class_teacher(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/remove-class-teacher", response_model=TeacherResponse)
async def remove_class_teacher(
    payload: TeacherClassPayload,
    db: AsyncSession = Depends(get_db),
) -> TeacherResponse:
    try:
        return await service.remove_class_teacher(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/{teacher_id}", response_model=TeacherResponse)
async def get_teacher(
    teacher_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> TeacherResponse:
    obj = await service.get_teacher(db, teacher_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Teacher not found")
    return obj


@router.delete("/{teacher_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_teacher(
    teacher_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> None:
    deleted = await service.delete_teacher(db, teacher_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Teacher not found")
