"""Students router: cascade removal, enrollments, confirmations, guardians."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tuition_ledger.core.exceptions import ServiceError
from tuition_ledger.db.session import get_db
from tuition_ledger.ledger import facade
from tuition_ledger.ledger.schemas import DeletionSummary

from .schemas import (
    ConfirmationCreate,
    ConfirmationResponse,
    EnrollmentCreate,
    EnrollmentDeletionResult,
    EnrollmentResponse,
    GuardianDeletionResult,
)
from . import service

router = APIRouter(prefix="/api/v1/students", tags=["students"])


@router.post(
    "/enrollments",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_enrollment(
    payload: EnrollmentCreate,
    db: AsyncSession = Depends(get_db),
) -> EnrollmentResponse:
    try:
        return await service.create_enrollment(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete(
    "/enrollments/{enrollment_id}",
    response_model=EnrollmentDeletionResult,
)
async def delete_enrollment(
    enrollment_id: int,
    db: AsyncSession = Depends(get_db),
) -> EnrollmentDeletionResult:
    try:
        return await service.delete_enrollment(db, enrollment_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/confirmations",
    response_model=ConfirmationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_confirmation(
    payload: ConfirmationCreate,
    db: AsyncSession = Depends(get_db),
) -> ConfirmationResponse:
    try:
        return await service.create_confirmation(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete(
    "/guardians/{guardian_id}",
    response_model=GuardianDeletionResult,
)
async def delete_guardian(
    guardian_id: int,
    hard: bool = Query(False, description="Refuse instead of deactivating when students remain"),
    db: AsyncSession = Depends(get_db),
) -> GuardianDeletionResult:
    try:
        return await service.delete_guardian(db, guardian_id, hard=hard)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete(
    "/{student_id}",
    response_model=DeletionSummary,
)
async def delete_student(
    student_id: int,
    db: AsyncSession = Depends(get_db),
) -> DeletionSummary:
    try:
        return await facade.delete_student_cascade(db, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
