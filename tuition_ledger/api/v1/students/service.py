"""Students service: enrollment lifecycle and guardian removal."""

import logging
from datetime import date

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tuition_ledger.core.config import settings
from tuition_ledger.core.enums import GuardianDeletionMode, RecordStatus
from tuition_ledger.core.exceptions import (
    AcademicYearNotFoundError,
    DuplicateConfirmationError,
    DuplicateEnrollmentError,
    EnrollmentNotFoundError,
    GuardianHasStudentsError,
    GuardianNotFoundError,
    NotFoundError,
    StudentNotFoundError,
    wrap_unexpected_errors,
)
from tuition_ledger.core.models import (
    AcademicYear,
    Confirmation,
    Course,
    Enrollment,
    Guardian,
    SchoolClass,
    Student,
)
from tuition_ledger.db.transaction import run_in_transaction

from .schemas import (
    ConfirmationCreate,
    ConfirmationResponse,
    EnrollmentCreate,
    EnrollmentDeletionResult,
    EnrollmentResponse,
    GuardianDeletionResult,
)

logger = logging.getLogger(__name__)


# --- Enrollment ---
@wrap_unexpected_errors("create enrollment")
async def create_enrollment(db: AsyncSession, payload: EnrollmentCreate) -> EnrollmentResponse:
    """One enrollment per student; a second one is a conflict."""
    if await db.get(Student, payload.student_id) is None:
        raise StudentNotFoundError(payload.student_id)
    if await db.get(Course, payload.course_id) is None:
        raise NotFoundError(f"Course {payload.course_id} not found")
    existing = (
        await db.execute(select(Enrollment.id).where(Enrollment.student_id == payload.student_id))
    ).scalar_one_or_none()
    if existing is not None:
        raise DuplicateEnrollmentError(payload.student_id)

    enrollment = Enrollment(
        student_id=payload.student_id,
        course_id=payload.course_id,
        enrolled_on=payload.enrolled_on or date.today(),
        status=RecordStatus.ACTIVE.value,
    )
    db.add(enrollment)
    try:
        await db.commit()
        await db.refresh(enrollment)
        return EnrollmentResponse.model_validate(enrollment)
    except IntegrityError:
        await db.rollback()
        raise DuplicateEnrollmentError(payload.student_id)


@wrap_unexpected_errors("delete enrollment")
async def delete_enrollment(db: AsyncSession, enrollment_id: int) -> EnrollmentDeletionResult:
    """Remove an enrollment together with its confirmations."""

    async def _delete(tx: AsyncSession) -> EnrollmentDeletionResult:
        if await tx.get(Enrollment, enrollment_id) is None:
            raise EnrollmentNotFoundError(enrollment_id)
        confirmations = await tx.execute(
            delete(Confirmation).where(Confirmation.enrollment_id == enrollment_id)
        )
        await tx.execute(delete(Enrollment).where(Enrollment.id == enrollment_id))
        return EnrollmentDeletionResult(enrollment_id=enrollment_id, confirmations=confirmations.rowcount or 0)

    result = await run_in_transaction(
        db,
        _delete,
        operation="Enrollment deletion",
        timeout_ms=settings.cascade_tx_timeout_ms,
        wait_ms=settings.cascade_tx_wait_ms,
    )
    logger.info("Deleted enrollment %s and %s confirmation(s)", enrollment_id, result.confirmations)
    return result


# --- Confirmation ---
@wrap_unexpected_errors("create confirmation")
async def create_confirmation(db: AsyncSession, payload: ConfirmationCreate) -> ConfirmationResponse:
    if await db.get(Enrollment, payload.enrollment_id) is None:
        raise EnrollmentNotFoundError(payload.enrollment_id)
    if await db.get(SchoolClass, payload.class_id) is None:
        raise NotFoundError(f"Class {payload.class_id} not found")
    if await db.get(AcademicYear, payload.academic_year_id) is None:
        raise AcademicYearNotFoundError(payload.academic_year_id)
    existing = (
        await db.execute(
            select(Confirmation.id).where(
                Confirmation.enrollment_id == payload.enrollment_id,
                Confirmation.academic_year_id == payload.academic_year_id,
            )
        )
    ).scalar_one_or_none()
    if existing is not None:
        raise DuplicateConfirmationError(payload.enrollment_id, payload.academic_year_id)

    confirmation = Confirmation(
        enrollment_id=payload.enrollment_id,
        class_id=payload.class_id,
        academic_year_id=payload.academic_year_id,
        confirmed_on=payload.confirmed_on or date.today(),
        start_month=payload.start_month,
        status=RecordStatus.ACTIVE.value,
    )
    db.add(confirmation)
    try:
        await db.commit()
        await db.refresh(confirmation)
        return ConfirmationResponse.model_validate(confirmation)
    except IntegrityError:
        await db.rollback()
        raise DuplicateConfirmationError(payload.enrollment_id, payload.academic_year_id)


# --- Guardian ---
@wrap_unexpected_errors("delete guardian")
async def delete_guardian(db: AsyncSession, guardian_id: int, hard: bool = False) -> GuardianDeletionResult:
    """
    Guardians without students are removed. Guardians that still have students are only
    deactivated (status=0); asking for a hard delete in that case is refused.
    """
    guardian = await db.get(Guardian, guardian_id)
    if guardian is None:
        raise GuardianNotFoundError(guardian_id)
    students = (
        await db.execute(select(func.count()).select_from(Student).where(Student.guardian_id == guardian_id))
    ).scalar_one()

    if students:
        if hard:
            raise GuardianHasStudentsError(guardian_id, students)
        await db.execute(
            update(Guardian).where(Guardian.id == guardian_id).values(status=RecordStatus.INACTIVE.value)
        )
        await db.commit()
        await db.refresh(guardian)
        logger.info("Guardian %s deactivated (%s student(s) attached)", guardian_id, students)
        return GuardianDeletionResult(
            guardian_id=guardian_id,
            mode=GuardianDeletionMode.SOFT_DELETE,
            remaining_students=students,
            message="Guardian deactivated: students are still attached",
        )

    await db.execute(delete(Guardian).where(Guardian.id == guardian_id))
    await db.commit()
    logger.info("Guardian %s deleted", guardian_id)
    return GuardianDeletionResult(
        guardian_id=guardian_id,
        mode=GuardianDeletionMode.HARD_DELETE,
        message="Guardian permanently deleted",
    )
