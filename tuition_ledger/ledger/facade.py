"""
Service façade called by the HTTP layer. It only sequences calls into the ledger modules.

Domain errors pass through unchanged; unexpected store failures surface as
``InternalServiceError`` with the original exception chained.
"""

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tuition_ledger.core.exceptions import wrap_unexpected_errors

from . import cascade, credit_notes, debt, reconciliation, vouchers
from .schemas import CreditNoteCreate, CreditNoteResponse, DebtRecord, DeletionSummary, TuitionLedgerResult


@wrap_unexpected_errors("reconcile tuition months")
async def reconcile_tuition(
    db: AsyncSession, student_id: int, academic_year_id: Optional[int] = None
) -> TuitionLedgerResult:
    return await reconciliation.reconcile_tuition(db, student_id, academic_year_id)


@wrap_unexpected_errors("aggregate historical debt")
async def aggregate_historical_debt(
    db: AsyncSession, student_id: int, current_academic_year_id: int
) -> List[DebtRecord]:
    return await debt.aggregate_historical_debt(db, student_id, current_academic_year_id)


@wrap_unexpected_errors("validate voucher number")
async def validate_voucher(db: AsyncSession, voucher: Optional[str], exclude_invoice_id: Optional[int] = None) -> str:
    return await vouchers.validate_voucher(db, voucher, exclude_invoice_id)


@wrap_unexpected_errors("issue credit note")
async def reverse_via_credit_note(db: AsyncSession, payload: CreditNoteCreate) -> CreditNoteResponse:
    return await credit_notes.reverse_via_credit_note(db, payload)


@wrap_unexpected_errors("delete student")
async def delete_student_cascade(db: AsyncSession, student_id: int) -> DeletionSummary:
    return await cascade.delete_student_cascade(db, student_id)
