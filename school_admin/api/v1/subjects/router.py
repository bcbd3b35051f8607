from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.core.exceptions import ServiceError
from school_admin.db.session import get_db

from .schemas import SubjectBulkCreate, SubjectResponse, SubjectsFromMasterCreate
from . import service

router = APIRouter(prefix="/api/v1/subjects", tags=["subjects"])


@router.post("", response_model=List[SubjectResponse], status_code=status.HTTP_201_CREATED)
async def create_subjects(
    payload: SubjectBulkCreate,
    db: AsyncSession = Depends(get_db),
) -> List[SubjectResponse]:
    try:
        return await service.create_subjects(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/from-master", response_model=List[SubjectResponse], status_code=status.HTTP_201_CREATED)
async def create_subjects_from_master(
    payload: SubjectsFromMasterCreate,
    db: AsyncSession = Depends(get_db),
) -> List[SubjectResponse]:
    """Create class subjects from the school's master subject list, with generated codes."""
    try:
        return await service.create_subjects_from_master(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/class/{class_id}", response_model=List[SubjectResponse])
async def list_class_subjects(
    class_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> List[SubjectResponse]:
    try:
        return await service.list_class_subjects(db, class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/class/{class_id}/free", response_model=List[SubjectResponse])
async def list_free_subjects(
    class_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> List[SubjectResponse]:
    try:
        return await service.list_free_subjects(db, class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/school/{school_id}", response_model=List[SubjectResponse])
async def list_school_subjects(
    school_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> List[SubjectResponse]:
    return await service.list_school_subjects(db, school_id)


@router.get("/{subject_id}", response_model=SubjectResponse)
async def get_subject(
    subject_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> SubjectResponse:
    obj = await service.get_subject(db, subject_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subject not found")
    return obj


@router.delete("/{subject_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_subject(
    subject_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> None:
    deleted = await service.delete_subject(db, subject_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subject not found")
