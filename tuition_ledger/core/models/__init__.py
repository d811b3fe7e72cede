from tuition_ledger.core.models.academic_year import AcademicYear
from tuition_ledger.core.models.course import Course
from tuition_ledger.core.models.credit_note import CreditNote
from tuition_ledger.core.models.enrollment import Confirmation, Enrollment
from tuition_ledger.core.models.guardian import Guardian
from tuition_ledger.core.models.payment import PaymentDetail, PrimaryPayment
from tuition_ledger.core.models.school_class import SchoolClass
from tuition_ledger.core.models.service_assignment import ServiceAssignment
from tuition_ledger.core.models.service_type import ServiceType
from tuition_ledger.core.models.student import Student
from tuition_ledger.core.models.transfer import Transfer

__all__ = [
    "AcademicYear",
    "Confirmation",
    "Course",
    "CreditNote",
    "Enrollment",
    "Guardian",
    "PaymentDetail",
    "PrimaryPayment",
    "SchoolClass",
    "ServiceAssignment",
    "ServiceType",
    "Student",
    "Transfer",
]
