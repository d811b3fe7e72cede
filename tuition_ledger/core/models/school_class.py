from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from tuition_ledger.db.session import Base


class SchoolClass(Base):
    """Class/section a confirmed student attends in a given academic year."""

    __tablename__ = "school_classes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    academic_year_id = Column(Integer, ForeignKey("academic_years.id"), nullable=False)

    academic_year = relationship("AcademicYear")
