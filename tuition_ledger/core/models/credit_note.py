from datetime import date, datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint

from tuition_ledger.db.session import Base


class CreditNote(Base):
    """Cancels one previously recorded payment. One per (invoice number, student)."""

    __tablename__ = "credit_notes"
    __table_args__ = (
        UniqueConstraint("invoice_number", "student_id", name="uq_credit_note_invoice_student"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    designation = Column(String(255), nullable=False)
    invoice_number = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    # Legacy link to an invoice; reversals leave it empty because the invoice is deleted.
    primary_payment_id = Column(Integer, ForeignKey("primary_payments.id"), nullable=True)
    document = Column(String(100), nullable=True)
    next_document = Column(String(100), nullable=False, default="")
    hash = Column(String(255), nullable=True)
    operation_date = Column(Date, nullable=False, default=date.today)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
