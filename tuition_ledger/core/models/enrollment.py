from datetime import date, datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, SmallInteger, UniqueConstraint
from sqlalchemy.orm import relationship

from tuition_ledger.db.session import Base


class Enrollment(Base):
    """A student's enrollment in a course. At most one per student."""

    __tablename__ = "enrollments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, unique=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False)
    enrolled_on = Column(Date, nullable=False, default=date.today)
    status = Column(SmallInteger, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    student = relationship("Student", back_populates="enrollment")
    course = relationship("Course")
    confirmations = relationship("Confirmation", back_populates="enrollment")


class Confirmation(Base):
    """Activates an enrollment for one class in one academic year."""

    __tablename__ = "confirmations"
    __table_args__ = (
        UniqueConstraint("enrollment_id", "academic_year_id", name="uq_confirmation_enrollment_year"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    enrollment_id = Column(Integer, ForeignKey("enrollments.id"), nullable=False, index=True)
    class_id = Column(Integer, ForeignKey("school_classes.id"), nullable=False)
    academic_year_id = Column(Integer, ForeignKey("academic_years.id"), nullable=False)
    confirmed_on = Column(Date, nullable=False, default=date.today)
    start_month = Column(Date, nullable=True)  # first day the student attended this year
    status = Column(SmallInteger, nullable=False, default=1)

    enrollment = relationship("Enrollment", back_populates="confirmations")
    school_class = relationship("SchoolClass")
    academic_year = relationship("AcademicYear")
