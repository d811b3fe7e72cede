"""Ledger tables: one invoice row per payment event plus its service line items."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, SmallInteger, String
from sqlalchemy.orm import relationship

from tuition_ledger.db.session import Base


class PrimaryPayment(Base):
    """Invoice-level payment record. The voucher is unique at the store level."""

    __tablename__ = "primary_payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    paid_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    total = Column(Numeric(12, 2), nullable=True)
    amount_tendered = Column(Numeric(12, 2), nullable=True)
    discount_total = Column(Numeric(12, 2), nullable=False, default=0)
    voucher = Column(String(100), nullable=True, unique=True)  # legacy "borderoux"
    hash = Column(String(255), nullable=True)
    notes = Column(String(500), nullable=True)
    status = Column(SmallInteger, nullable=False, default=1)

    student = relationship("Student")


class PaymentDetail(Base):
    """
    One line per service paid. ``month`` holds either a bare month name (with the year in
    ``year``) or a combined "MONTH-YEAR" label. ``primary_payment_id`` is a loose reference.
    """

    __tablename__ = "payment_details"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    service_type_id = Column(Integer, ForeignKey("service_types.id"), nullable=False)
    primary_payment_id = Column(Integer, nullable=True, index=True)
    voucher = Column(String(100), nullable=True, index=True)  # legacy "n_Bordoro"
    month = Column(String(30), nullable=True)
    year = Column(Integer, nullable=True)
    month_index = Column(Integer, nullable=True)
    price = Column(Numeric(12, 2), nullable=True)
    grand_total = Column(Numeric(12, 2), nullable=True)
    quantity = Column(Integer, nullable=False, default=1)
    invoice_number = Column(String(100), nullable=True)
    account = Column(String(100), nullable=True)
    hash = Column(String(255), nullable=True)
    notes = Column(String(500), nullable=True)
    paid_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    student = relationship("Student")
    service_type = relationship("ServiceType")
