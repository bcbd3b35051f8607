from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.core.exceptions import ServiceError
from school_admin.core.schemas import MessageResponse
from school_admin.db.session import get_db

from school_admin.api.v1.students.schemas import StudentResponse
from school_admin.api.v1.subjects import service as subject_service

from .schemas import ClassCreate, ClassResponse, RemoveAllStudentsResponse
from . import service

router = APIRouter(prefix="/api/v1/classes", tags=["classes"])


@router.post("", response_model=ClassResponse, status_code=status.HTTP_201_CREATED)
async def create_class(
    payload: ClassCreate,
    db: AsyncSession = Depends(get_db),
) -> ClassResponse:
    try:
        return await service.create_class(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/school/{school_id}", response_model=List[ClassResponse])
async def list_classes(
    school_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> List[ClassResponse]:
    return await service.list_classes(db, school_id)


@router.get("/{class_id}", response_model=ClassResponse)
async def get_class(
    class_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> ClassResponse:
    obj = await service.get_class(db, class_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class not found")
    return obj


@router.delete("/{class_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_class(
    class_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> None:
    deleted = await service.delete_class(db, class_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class not found")


@router.get("/{class_id}/students", response_model=List[StudentResponse])
async def get_class_students(
    class_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> List[StudentResponse]:
    try:
        return await service.get_class_students(db, class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/{class_id}/assign-student/{student_id}", response_model=StudentResponse)
async def assign_student_to_class(
    class_id: UUID,
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> StudentResponse:
    try:
        return await service.assign_student_to_class(db, class_id, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/{class_id}/remove-student/{student_id}", response_model=StudentResponse)
async def remove_student_from_class(
    class_id: UUID,
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> StudentResponse:
    try:
        return await service.remove_student_from_class(db, class_id, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/{class_id}/remove-all-students", response_model=RemoveAllStudentsResponse)
async def remove_all_students_from_class(
    class_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> RemoveAllStudentsResponse:
    try:
        return await service.remove_all_students_from_class(db, class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/{class_id}/subjects", response_model=MessageResponse)
async def delete_all_subjects(
    class_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    try:
        count = await subject_service.delete_all_subjects(db, class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return MessageResponse(message=f"{count} subjects deleted", count=count)
