"""Payments service: recording a payment as one invoice plus its line item, atomically."""

import logging
import secrets
from decimal import Decimal
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tuition_ledger.core.config import settings
from tuition_ledger.core.enums import ServiceCategory
from tuition_ledger.core.exceptions import (
    MalformedMonthFieldError,
    NotFoundError,
    StudentNotFoundError,
    wrap_unexpected_errors,
)
from tuition_ledger.core.models import PaymentDetail, PrimaryPayment, ServiceType, Student
from tuition_ledger.db.transaction import run_in_transaction
from tuition_ledger.ledger.academic_calendar import ACADEMIC_MONTHS, month_index, month_label
from tuition_ledger.ledger.vouchers import validate_voucher

from .schemas import PaymentCreate, PaymentResponse

logger = logging.getLogger(__name__)

DEFAULT_ACCOUNT = "CAIXA"


def _to_decimal(val) -> Decimal:
    if val is None:
        return Decimal("0")
    return val if isinstance(val, Decimal) else Decimal(str(val))


def _generate_voucher() -> str:
    return f"BOR_{secrets.token_hex(6).upper()}"


def _generate_hash() -> str:
    return f"PAG_{secrets.token_hex(12)}"


async def _write_payment(tx: AsyncSession, payload: PaymentCreate, month: str, voucher: str) -> PaymentResponse:
    student = await tx.get(Student, payload.student_id)
    if student is None:
        raise StudentNotFoundError(payload.student_id)
    service_type = await tx.get(ServiceType, payload.service_type_id)
    if service_type is None:
        raise NotFoundError(f"Service type {payload.service_type_id} not found")
    is_tuition = service_type.category == ServiceCategory.TUITION.value
    if is_tuition and month not in ACADEMIC_MONTHS:
        raise MalformedMonthFieldError(payload.month, payload.year)

    account = (payload.account or "").strip() or DEFAULT_ACCOUNT
    notes = (payload.notes or "").strip() or None
    payment_hash = _generate_hash()

    invoice = PrimaryPayment(
        student_id=payload.student_id,
        total=payload.price,
        amount_tendered=payload.price,
        discount_total=Decimal("0"),
        voucher=voucher,
        hash=payment_hash,
        notes=notes,
        status=1,
    )
    tx.add(invoice)
    await tx.flush()

    detail = PaymentDetail(
        student_id=payload.student_id,
        service_type_id=payload.service_type_id,
        primary_payment_id=invoice.id,
        voucher=voucher,
        month=month_label(month, payload.year),
        year=payload.year,
        month_index=month_index(month),
        price=payload.price,
        grand_total=payload.price,
        quantity=1,
        invoice_number=f"FT {invoice.id}",
        account=account,
        hash=payment_hash,
        notes=notes,
        paid_at=invoice.paid_at,
    )
    tx.add(detail)
    await tx.flush()

    if is_tuition:
        await tx.execute(
            update(Student)
            .where(Student.id == payload.student_id)
            .values(balance=Student.balance - payload.price)
            .execution_options(synchronize_session=False)
        )
    balance = (await tx.execute(select(Student.balance).where(Student.id == payload.student_id))).scalar_one()

    return PaymentResponse(
        invoice_id=invoice.id,
        detail_id=detail.id,
        student_id=payload.student_id,
        service_type_id=payload.service_type_id,
        voucher=voucher,
        month=detail.month,
        year=payload.year,
        price=_to_decimal(payload.price),
        account=account,
        is_tuition=is_tuition,
        student_balance=_to_decimal(balance),
        paid_at=invoice.paid_at,
    )


@wrap_unexpected_errors("record payment")
async def record_payment(db: AsyncSession, payload: PaymentCreate) -> PaymentResponse:
    """
    Record a payment: invoice row, line item and (for tuition) the balance debit commit together.

    A supplied voucher is validated first; if a concurrent writer claims it before commit the
    unique index rejects the insert and the conflict is reported. A generated voucher that
    collides is regenerated, up to ``VOUCHER_RETRY_ATTEMPTS`` times.
    """
    month = payload.month.strip().upper()
    month_index(month)
    supplied: Optional[str] = None
    if payload.voucher and payload.voucher.strip():
        supplied = await validate_voucher(db, payload.voucher)

    attempts = 1 if supplied else max(1, settings.voucher_retry_attempts)
    for attempt in range(attempts):
        voucher = supplied or _generate_voucher()

        async def _write(tx: AsyncSession) -> PaymentResponse:
            return await _write_payment(tx, payload, month, voucher)

        try:
            result = await run_in_transaction(
                db,
                _write,
                operation="Payment recording",
                timeout_ms=settings.payment_tx_timeout_ms,
                wait_ms=settings.payment_tx_wait_ms,
            )
        except IntegrityError:
            if supplied:
                # Lost the race: report who holds the voucher now.
                await validate_voucher(db, supplied)
                raise
            if attempt == attempts - 1:
                raise
            logger.warning("Generated voucher %s collided, retrying (%s/%s)", voucher, attempt + 1, attempts)
            continue
        logger.info(
            "Recorded payment invoice=%s student=%s month=%s voucher=%s",
            result.invoice_id,
            result.student_id,
            result.month,
            result.voucher,
        )
        return result
