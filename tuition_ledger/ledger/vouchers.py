"""Voucher (bank deposit reference) uniqueness across invoices and line items."""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tuition_ledger.core.exceptions import DuplicateVoucherError, MissingVoucherError
from tuition_ledger.core.models import Student

from .payments import LedgerPayment, find_by_voucher

logger = logging.getLogger(__name__)


def normalize_voucher(voucher: Optional[str]) -> str:
    cleaned = (voucher or "").strip()
    if not cleaned:
        raise MissingVoucherError()
    return cleaned


async def _student_name(db: AsyncSession, student_id: Optional[int]) -> str:
    # Only feeds the error message: a failed lookup must not mask the conflict.
    if student_id is None:
        return "N/A"
    try:
        student = await db.get(Student, student_id)
    except Exception as exc:
        logger.warning("Could not load student %s for voucher conflict message: %s", student_id, exc)
        return "N/A"
    return student.name if student and student.name else "N/A"


async def validate_voucher(
    db: AsyncSession,
    voucher: Optional[str],
    exclude_invoice_id: Optional[int] = None,
) -> str:
    """
    Reject a voucher already present on any invoice or line item.

    Returns the normalised voucher. This is a check-then-act read; the unique index on
    ``primary_payments.voucher`` is what stops two concurrent writers.
    """
    cleaned = normalize_voucher(voucher)
    existing: Optional[LedgerPayment] = await find_by_voucher(db, cleaned, exclude_invoice_id)
    if existing is not None:
        name = await _student_name(db, existing.student_id)
        logger.info(
            "Voucher %s rejected: already on %s #%s", cleaned, existing.source.value, existing.id
        )
        raise DuplicateVoucherError(cleaned, existing.id, existing.source.value, name)
    return cleaned
