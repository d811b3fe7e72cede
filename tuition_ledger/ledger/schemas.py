"""Ledger engine schemas: inputs and results exchanged with the service façade."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from tuition_ledger.core.enums import PaymentSource


class AcademicYearSummary(BaseModel):
    id: int
    designation: str
    start_year: int
    end_year: int

    class Config:
        from_attributes = True


# --- Tuition reconciliation ---
class TuitionLedgerResult(BaseModel):
    """Paid/pending tuition months of one student in one academic year."""

    student_id: int
    academic_year: AcademicYearSummary
    enrolled: bool
    paid_months: List[str] = Field(default_factory=list)
    paid_month_details: List[str] = Field(default_factory=list, description='"MONTH-YEAR" labels')
    pending_months: List[str] = Field(default_factory=list)
    total_months: int = 0
    paid_count: int = 0
    pending_count: int = 0
    next_due_month: Optional[str] = None
    has_outstanding: bool = False
    study_start: Optional[date] = None
    message: Optional[str] = None


class DebtRecord(BaseModel):
    academic_year: AcademicYearSummary
    pending_months: List[str]
    paid_months: List[str]
    total_pending: int


# --- Credit notes ---
class CreditNoteCreate(BaseModel):
    designation: str = Field(..., min_length=1, max_length=255)
    invoice_number: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    amount: Decimal = Field(..., ge=0)
    student_id: int
    document: Optional[str] = Field(None, max_length=100)
    payment_id: Optional[int] = Field(None, description="Payment to reverse; omit for a manual credit note")
    payment_source: Optional[PaymentSource] = Field(
        None, description="Table the payment id belongs to; line items are searched first when omitted"
    )
    operation_date: Optional[date] = None
    hash: Optional[str] = Field(None, max_length=255)
    next_document: Optional[str] = Field(None, max_length=100)


class CreditNoteResponse(BaseModel):
    id: int
    designation: str
    invoice_number: str
    description: Optional[str] = None
    amount: Decimal
    student_id: int
    document: Optional[str] = None
    next_document: str
    hash: Optional[str] = None
    operation_date: date
    created_at: datetime
    reversed_payment_id: Optional[int] = None
    reversed_payment_source: Optional[PaymentSource] = None
    reversed_amount: Decimal = Decimal("0")


# --- Cascade deletion ---
class DeletionSummary(BaseModel):
    student_id: int
    confirmations: int = 0
    credit_notes: int = 0
    payment_details: int = 0
    primary_payments: int = 0
    service_assignments: int = 0
    transfers: int = 0
    enrollment: int = 0
    guardian_removed: bool = False
