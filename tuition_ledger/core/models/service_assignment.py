from sqlalchemy import Column, ForeignKey, Integer

from tuition_ledger.db.session import Base


class ServiceAssignment(Base):
    """Extra service (transport, canteen, ...) a student is subscribed to."""

    __tablename__ = "service_assignments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    service_type_id = Column(Integer, ForeignKey("service_types.id"), nullable=False)
