from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.core.exceptions import ServiceError
from school_admin.db.session import get_db

from .schemas import MasterSubjectCreate, MasterSubjectResponse, MasterSubjectUpdate
from . import service

router = APIRouter(prefix="/api/v1/master-subjects", tags=["master-subjects"])


@router.post("", response_model=MasterSubjectResponse, status_code=status.HTTP_201_CREATED)
async def add_master_subject(
    payload: MasterSubjectCreate,
    db: AsyncSession = Depends(get_db),
) -> MasterSubjectResponse:
    try:
        return await service.add_master_subject(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/school/{school_id}", response_model=List[MasterSubjectResponse])
async def list_master_subjects(
    school_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> List[MasterSubjectResponse]:
    return await service.list_master_subjects(db, school_id)


@router.put("/{master_subject_id}", response_model=MasterSubjectResponse)
async def update_master_subject(
    master_subject_id: UUID,
    payload: MasterSubjectUpdate,
    db: AsyncSession = Depends(get_db),
) -> MasterSubjectResponse:
    try:
        obj = await service.update_master_subject(db, master_subject_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Master subject not found")
    return obj


@router.delete("/{master_subject_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_master_subject(
    master_subject_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> None:
    deleted = await service.delete_master_subject(db, master_subject_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Master subject not found")
