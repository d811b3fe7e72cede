"""Credit notes: issuing one reverses the linked payment in the same transaction."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tuition_ledger.core.config import settings
from tuition_ledger.core.exceptions import (
    DuplicateCreditNoteError,
    PaymentNotFoundError,
    PaymentOwnershipError,
    StudentNotFoundError,
)
from tuition_ledger.core.models import CreditNote, Student
from tuition_ledger.db.transaction import run_in_transaction

from .payments import LedgerPayment, find_payment
from .schemas import CreditNoteCreate, CreditNoteResponse

logger = logging.getLogger(__name__)


def _to_response(note: CreditNote, payment: Optional[LedgerPayment], reversed_amount: Decimal) -> CreditNoteResponse:
    return CreditNoteResponse(
        id=note.id,
        designation=note.designation,
        invoice_number=note.invoice_number,
        description=note.description,
        amount=note.amount,
        student_id=note.student_id,
        document=note.document,
        next_document=note.next_document,
        hash=note.hash,
        operation_date=note.operation_date,
        created_at=note.created_at,
        reversed_payment_id=payment.id if payment else None,
        reversed_payment_source=payment.source if payment else None,
        reversed_amount=reversed_amount,
    )


async def restore_balance(db: AsyncSession, student_id: int, amount: Decimal) -> None:
    """Credit the student's balance with an in-database increment."""
    await db.execute(
        update(Student).where(Student.id == student_id).values(balance=Student.balance + amount)
    )


async def _ensure_no_credit_note(db: AsyncSession, invoice_number: str, student_id: int) -> None:
    existing = (
        await db.execute(
            select(CreditNote.id).where(
                CreditNote.invoice_number == invoice_number,
                CreditNote.student_id == student_id,
            )
        )
    ).scalar_one_or_none()
    if existing is not None:
        raise DuplicateCreditNoteError(invoice_number, student_id)


async def reverse_via_credit_note(db: AsyncSession, payload: CreditNoteCreate) -> CreditNoteResponse:
    """
    Create a credit note and, when it targets a payment, undo that payment:
    restore the amount to the student's balance and delete the payment row so it
    drops out of listings and of the paid-months computation.

    Everything runs in one transaction. A credit note without ``payment_id`` is a
    manual note and only the note itself is written.
    """
    invoice_number = payload.invoice_number.strip()

    async def _reverse(tx: AsyncSession) -> CreditNoteResponse:
        student = await tx.get(Student, payload.student_id)
        if student is None:
            raise StudentNotFoundError(payload.student_id)

        payment: Optional[LedgerPayment] = None
        if payload.payment_id is not None:
            payment = await find_payment(tx, payload.payment_id, payload.payment_source)
            if payment is None:
                raise PaymentNotFoundError(payload.payment_id)
            if payment.student_id != payload.student_id:
                raise PaymentOwnershipError(payment.id, payload.student_id)
            await _ensure_no_credit_note(tx, invoice_number, payload.student_id)

        note = CreditNote(
            designation=payload.designation.strip(),
            invoice_number=invoice_number,
            description=(payload.description or "").strip() or None,
            amount=payload.amount,
            student_id=payload.student_id,
            document=payload.document,
            next_document=payload.next_document or "",
            hash=payload.hash,
            operation_date=payload.operation_date or date.today(),
        )
        tx.add(note)
        try:
            await tx.flush()
        except IntegrityError as exc:
            # Concurrent issuer won the (invoice, student) unique constraint.
            raise DuplicateCreditNoteError(invoice_number, payload.student_id) from exc

        reversed_amount = Decimal("0")
        if payment is not None:
            reversed_amount = payment.reversal_amount
            if reversed_amount > 0:
                await restore_balance(tx, payment.student_id, reversed_amount)
            await payment.delete(tx)
            logger.info(
                "Credit note %s reversed %s #%s for student %s (amount %s)",
                note.id,
                payment.source.value,
                payment.id,
                payload.student_id,
                reversed_amount,
            )
        return _to_response(note, payment, reversed_amount)

    return await run_in_transaction(
        db,
        _reverse,
        operation="Credit note reversal",
        timeout_ms=settings.payment_tx_timeout_ms,
        wait_ms=settings.payment_tx_wait_ms,
    )
