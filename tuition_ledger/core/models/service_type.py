from sqlalchemy import Column, Integer, Numeric, String

from tuition_ledger.core.enums import ServiceCategory
from tuition_ledger.db.session import Base


class ServiceType(Base):
    """Catalog of billable services. Monthly tuition is category TUITION."""

    __tablename__ = "service_types"

    id = Column(Integer, primary_key=True, autoincrement=True)
    designation = Column(String(255), nullable=False)
    price = Column(Numeric(12, 2), nullable=False, default=0)
    category = Column(String(20), nullable=False, default=ServiceCategory.OTHER.value)  # TUITION | OTHER
