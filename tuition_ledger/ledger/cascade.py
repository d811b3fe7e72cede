"""
Student removal across its dependency graph.

The store does not enforce referential actions, so dependents are deleted explicitly,
children before parents, inside one bounded transaction:

    confirmations -> credit notes -> payment details -> invoices
    -> service assignments -> transfers -> enrollment -> student -> (guardian)

The guardian goes only when no other student still references it.
"""

import logging
from typing import List

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tuition_ledger.core.config import settings
from tuition_ledger.core.exceptions import StudentNotFoundError
from tuition_ledger.core.models import (
    Confirmation,
    CreditNote,
    Enrollment,
    Guardian,
    PaymentDetail,
    PrimaryPayment,
    ServiceAssignment,
    Student,
    Transfer,
)
from tuition_ledger.db.transaction import run_in_transaction

from .schemas import DeletionSummary

logger = logging.getLogger(__name__)


async def _delete(db: AsyncSession, stmt) -> int:
    result = await db.execute(stmt.execution_options(synchronize_session=False))
    return result.rowcount or 0


async def _remove_guardian_if_orphaned(db: AsyncSession, guardian_id: int) -> bool:
    remaining = (
        await db.execute(select(func.count()).select_from(Student).where(Student.guardian_id == guardian_id))
    ).scalar_one()
    if remaining:
        return False
    await _delete(db, delete(Guardian).where(Guardian.id == guardian_id))
    return True


async def delete_student_cascade(db: AsyncSession, student_id: int) -> DeletionSummary:
    async def _cascade(tx: AsyncSession) -> DeletionSummary:
        student = (
            await tx.execute(select(Student.id, Student.guardian_id).where(Student.id == student_id))
        ).one_or_none()
        if student is None:
            raise StudentNotFoundError(student_id)
        guardian_id = student.guardian_id
        enrollment_id = (
            await tx.execute(select(Enrollment.id).where(Enrollment.student_id == student_id))
        ).scalar_one_or_none()

        summary = DeletionSummary(student_id=student_id)

        if enrollment_id is not None:
            summary.confirmations = await _delete(
                tx, delete(Confirmation).where(Confirmation.enrollment_id == enrollment_id)
            )

        invoice_ids: List[int] = list(
            (await tx.execute(select(PrimaryPayment.id).where(PrimaryPayment.student_id == student_id)))
            .scalars()
            .all()
        )

        note_filter = CreditNote.student_id == student_id
        detail_filter = PaymentDetail.student_id == student_id
        if invoice_ids:
            note_filter = or_(note_filter, CreditNote.primary_payment_id.in_(invoice_ids))
            detail_filter = or_(detail_filter, PaymentDetail.primary_payment_id.in_(invoice_ids))
        summary.credit_notes = await _delete(tx, delete(CreditNote).where(note_filter))
        summary.payment_details = await _delete(tx, delete(PaymentDetail).where(detail_filter))

        if invoice_ids:
            summary.primary_payments = await _delete(
                tx, delete(PrimaryPayment).where(PrimaryPayment.id.in_(invoice_ids))
            )

        summary.service_assignments = await _delete(
            tx, delete(ServiceAssignment).where(ServiceAssignment.student_id == student_id)
        )
        summary.transfers = await _delete(tx, delete(Transfer).where(Transfer.student_id == student_id))

        if enrollment_id is not None:
            summary.enrollment = await _delete(tx, delete(Enrollment).where(Enrollment.id == enrollment_id))

        await _delete(tx, delete(Student).where(Student.id == student_id))

        if guardian_id is not None:
            summary.guardian_removed = await _remove_guardian_if_orphaned(tx, guardian_id)
        return summary

    summary = await run_in_transaction(
        db,
        _cascade,
        operation="Student cascade deletion",
        timeout_ms=settings.cascade_tx_timeout_ms,
        wait_ms=settings.cascade_tx_wait_ms,
    )
    # Bulk deletes bypass the identity map.
    db.expunge_all()
    logger.info("Deleted student %s with dependents: %s", student_id, summary.model_dump())
    return summary
