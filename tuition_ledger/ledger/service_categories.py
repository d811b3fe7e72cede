"""Legacy tuition detection, kept only to populate ``ServiceType.category`` once."""

from typing import Optional

from tuition_ledger.core.enums import ServiceCategory

TUITION_KEYWORD = "propina"


def classify_service_type(designation: Optional[str]) -> ServiceCategory:
    """
    Case-insensitive substring match on the designation, as the old ledger did.
    It misfiles names such as "Propina de Material"; review the backfill output.
    """
    if designation and TUITION_KEYWORD in designation.lower():
        return ServiceCategory.TUITION
    return ServiceCategory.OTHER
