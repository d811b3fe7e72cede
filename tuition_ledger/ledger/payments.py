"""
A single view over the two ledger tables.

Invoices (``primary_payments``) and line items (``payment_details``) each carry their own
voucher column and amount fields. ``LedgerPayment`` wraps either row so voucher checks,
reversals and deletions go through one code path.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from tuition_ledger.core.enums import PaymentSource
from tuition_ledger.core.models import PaymentDetail, PrimaryPayment

PaymentRow = Union[PrimaryPayment, PaymentDetail]

# Lookup order when the caller does not say which table an id belongs to.
RESOLUTION_ORDER = (PaymentSource.LINE_ITEM, PaymentSource.INVOICE)

MODEL_BY_SOURCE = {
    PaymentSource.INVOICE: PrimaryPayment,
    PaymentSource.LINE_ITEM: PaymentDetail,
}


def _to_decimal(val) -> Decimal:
    if val is None:
        return Decimal("0")
    return val if isinstance(val, Decimal) else Decimal(str(val))


@dataclass(frozen=True)
class LedgerPayment:
    source: PaymentSource
    row: PaymentRow

    @property
    def id(self) -> int:
        return self.row.id

    @property
    def student_id(self) -> int:
        return self.row.student_id

    @property
    def voucher(self) -> Optional[str]:
        return self.row.voucher

    @property
    def invoice_id(self) -> Optional[int]:
        """Id of the invoice this payment belongs to (itself for invoices)."""
        if self.source is PaymentSource.INVOICE:
            return self.row.id
        return self.row.primary_payment_id

    @property
    def reversal_amount(self) -> Decimal:
        """Amount a credit note gives back: price/grand total for lines, total/tendered for invoices."""
        if self.source is PaymentSource.LINE_ITEM:
            primary, fallback = self.row.price, self.row.grand_total
        else:
            primary, fallback = self.row.total, self.row.amount_tendered
        amount = _to_decimal(primary)
        if amount == 0:
            amount = _to_decimal(fallback)
        return amount

    async def delete(self, db: AsyncSession) -> None:
        model = MODEL_BY_SOURCE[self.source]
        await db.execute(delete(model).where(model.id == self.row.id))


async def find_payment(
    db: AsyncSession,
    payment_id: int,
    source: Optional[PaymentSource] = None,
) -> Optional[LedgerPayment]:
    """Resolve an id to a ledger payment, searching line items before invoices unless told."""
    sources = (source,) if source is not None else RESOLUTION_ORDER
    for src in sources:
        row = await db.get(MODEL_BY_SOURCE[src], payment_id)
        if row is not None:
            return LedgerPayment(src, row)
    return None


async def find_by_voucher(
    db: AsyncSession,
    voucher: str,
    exclude_invoice_id: Optional[int] = None,
) -> Optional[LedgerPayment]:
    """First payment in either table already carrying ``voucher``.

    Rows belonging to ``exclude_invoice_id`` (the invoice itself and its line items)
    are ignored so an invoice can be re-validated against its own voucher.
    """
    stmt = select(PrimaryPayment).where(PrimaryPayment.voucher == voucher)
    if exclude_invoice_id is not None:
        stmt = stmt.where(PrimaryPayment.id != exclude_invoice_id)
    row = (await db.execute(stmt.limit(1))).scalar_one_or_none()
    if row is not None:
        return LedgerPayment(PaymentSource.INVOICE, row)

    stmt = select(PaymentDetail).where(PaymentDetail.voucher == voucher)
    if exclude_invoice_id is not None:
        stmt = stmt.where(
            (PaymentDetail.primary_payment_id.is_(None))
            | (PaymentDetail.primary_payment_id != exclude_invoice_id)
        )
    row = (await db.execute(stmt.limit(1))).scalar_one_or_none()
    if row is not None:
        return LedgerPayment(PaymentSource.LINE_ITEM, row)
    return None
