from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from tuition_ledger.db.session import Base


class Student(Base):
    """Student with a signed running balance: tuition payments decrement it, reversals restore it."""

    __tablename__ = "students"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    document_number = Column(String(50), nullable=True)
    balance = Column(Numeric(12, 2), nullable=False, default=0)
    guardian_id = Column(Integer, ForeignKey("guardians.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    guardian = relationship("Guardian", back_populates="students")
    enrollment = relationship("Enrollment", back_populates="student", uselist=False)
