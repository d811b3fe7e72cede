"""Payments schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class PaymentCreate(BaseModel):
    student_id: int
    service_type_id: int
    month: str = Field(..., min_length=1, max_length=30, description="Month name, e.g. SETEMBRO")
    year: int = Field(..., ge=1900, le=2999)
    price: Decimal = Field(..., ge=0)
    voucher: Optional[str] = Field(None, max_length=100, description="Bank deposit reference; generated when omitted")
    account: Optional[str] = Field(None, max_length=100, description="Account credited, defaults to CAIXA")
    notes: Optional[str] = Field(None, max_length=500)


class PaymentResponse(BaseModel):
    invoice_id: int
    detail_id: int
    student_id: int
    service_type_id: int
    voucher: str
    month: str
    year: int
    price: Decimal
    account: str
    is_tuition: bool
    student_balance: Decimal
    paid_at: datetime


class VoucherValidationResponse(BaseModel):
    voucher: str
    available: bool = True
