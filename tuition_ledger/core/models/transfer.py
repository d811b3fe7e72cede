from datetime import date

from sqlalchemy import Column, Date, ForeignKey, Integer, String

from tuition_ledger.db.session import Base


class Transfer(Base):
    __tablename__ = "transfers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    destination_school = Column(String(255), nullable=True)
    reason = Column(String(500), nullable=True)
    transferred_on = Column(Date, nullable=False, default=date.today)
