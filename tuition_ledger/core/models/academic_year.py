from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from tuition_ledger.db.session import Base


class AcademicYear(Base):
    """
    Eleven-month school cycle: September..December of start_year, January..July of end_year.
    Ids grow with creation, so "previous years" are the ones with a smaller id.
    """

    __tablename__ = "academic_years"

    id = Column(Integer, primary_key=True, autoincrement=True)
    designation = Column(String(20), nullable=False)  # e.g. "2024/2025"
    start_year = Column(Integer, nullable=False)
    end_year = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
