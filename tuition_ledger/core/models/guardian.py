from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, SmallInteger, String
from sqlalchemy.orm import relationship

from tuition_ledger.db.session import Base


class Guardian(Base):
    """
    Parent or guardian responsible for one or more students.
    Never hard-deleted while students still reference it; status=0 marks it inactive.
    """

    __tablename__ = "guardians"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(30), nullable=True)
    email = Column(String(255), nullable=True)
    status = Column(SmallInteger, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    students = relationship("Student", back_populates="guardian")
