"""Payments router: record payment, voucher validation, credit notes."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tuition_ledger.core.exceptions import ServiceError
from tuition_ledger.db.session import get_db
from tuition_ledger.ledger import facade
from tuition_ledger.ledger.schemas import CreditNoteCreate, CreditNoteResponse

from .schemas import PaymentCreate, PaymentResponse, VoucherValidationResponse
from . import service

router = APIRouter(prefix="/api/v1/payments", tags=["payments"])


@router.post(
    "",
    response_model=PaymentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_payment(
    payload: PaymentCreate,
    db: AsyncSession = Depends(get_db),
) -> PaymentResponse:
    try:
        return await service.record_payment(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/vouchers/validate",
    response_model=VoucherValidationResponse,
)
async def validate_voucher(
    voucher: str = Query(..., description="Voucher number to check"),
    exclude_invoice_id: Optional[int] = Query(None, description="Invoice being edited"),
    db: AsyncSession = Depends(get_db),
) -> VoucherValidationResponse:
    try:
        cleaned = await facade.validate_voucher(db, voucher, exclude_invoice_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return VoucherValidationResponse(voucher=cleaned)


@router.post(
    "/credit-notes",
    response_model=CreditNoteResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_credit_note(
    payload: CreditNoteCreate,
    db: AsyncSession = Depends(get_db),
) -> CreditNoteResponse:
    try:
        return await facade.reverse_via_credit_note(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
