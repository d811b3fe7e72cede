from enum import Enum


class ServiceCategory(str, Enum):
    TUITION = "TUITION"
    OTHER = "OTHER"


class PaymentSource(str, Enum):
    """Which ledger table a payment row lives in."""

    INVOICE = "INVOICE"  # primary_payments
    LINE_ITEM = "LINE_ITEM"  # payment_details


class RecordStatus(int, Enum):
    INACTIVE = 0
    ACTIVE = 1


class GuardianDeletionMode(str, Enum):
    HARD_DELETE = "hard_delete"
    SOFT_DELETE = "soft_delete"
