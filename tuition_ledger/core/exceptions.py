import functools
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from fastapi import status

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


# --- 404 ---
class NotFoundError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class StudentNotFoundError(NotFoundError):
    def __init__(self, student_id: int) -> None:
        super().__init__(f"Student {student_id} not found")
        self.student_id = student_id


class AcademicYearNotFoundError(NotFoundError):
    def __init__(self, academic_year_id: Optional[int] = None) -> None:
        if academic_year_id is None:
            super().__init__("No academic year is registered")
        else:
            super().__init__(f"Academic year {academic_year_id} not found")
        self.academic_year_id = academic_year_id


class PaymentNotFoundError(NotFoundError):
    def __init__(self, payment_id: int) -> None:
        super().__init__(f"Payment {payment_id} not found")
        self.payment_id = payment_id


class EnrollmentNotFoundError(NotFoundError):
    def __init__(self, enrollment_id: int) -> None:
        super().__init__(f"Enrollment {enrollment_id} not found")
        self.enrollment_id = enrollment_id


class GuardianNotFoundError(NotFoundError):
    def __init__(self, guardian_id: int) -> None:
        super().__init__(f"Guardian {guardian_id} not found")
        self.guardian_id = guardian_id


# --- 409 ---
class ConflictError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)


class DuplicateVoucherError(ConflictError):
    """Voucher already used by another payment; carries the conflicting row."""

    def __init__(self, voucher: str, payment_id: int, source: str, student_name: str = "N/A") -> None:
        kind = "invoice" if source == "INVOICE" else "payment"
        super().__init__(
            f"Voucher number {voucher} was already used on {kind} #{payment_id}. Student: {student_name}"
        )
        self.voucher = voucher
        self.payment_id = payment_id
        self.source = source
        self.student_name = student_name


class DuplicateCreditNoteError(ConflictError):
    def __init__(self, invoice_number: str, student_id: int) -> None:
        super().__init__(f"A credit note already exists for invoice {invoice_number} of student {student_id}")
        self.invoice_number = invoice_number
        self.student_id = student_id


class DuplicateEnrollmentError(ConflictError):
    def __init__(self, student_id: int) -> None:
        super().__init__(f"Student {student_id} already has an enrollment")
        self.student_id = student_id


class DuplicateConfirmationError(ConflictError):
    def __init__(self, enrollment_id: int, academic_year_id: int) -> None:
        super().__init__(
            f"Enrollment {enrollment_id} is already confirmed for academic year {academic_year_id}"
        )
        self.enrollment_id = enrollment_id
        self.academic_year_id = academic_year_id


# --- 400 ---
class InvalidInputError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class MalformedMonthFieldError(InvalidInputError):
    def __init__(self, raw_month: object, raw_year: object = None) -> None:
        super().__init__(f"Unrecognised month field {raw_month!r} (year {raw_year!r})")
        self.raw_month = raw_month
        self.raw_year = raw_year


class MissingVoucherError(InvalidInputError):
    def __init__(self) -> None:
        super().__init__("Voucher number is required")


class PaymentOwnershipError(InvalidInputError):
    def __init__(self, payment_id: int, student_id: int) -> None:
        super().__init__(f"Payment {payment_id} does not belong to student {student_id}")
        self.payment_id = payment_id
        self.student_id = student_id


class DependencyError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class GuardianHasStudentsError(DependencyError):
    def __init__(self, guardian_id: int, student_count: int) -> None:
        super().__init__(
            f"Guardian {guardian_id} still has {student_count} student(s) and can only be deactivated"
        )
        self.guardian_id = guardian_id
        self.student_count = student_count


# --- transaction / internal ---
class TransactionTimeoutError(ServiceError):
    def __init__(self, operation: str, limit_ms: int) -> None:
        super().__init__(
            f"{operation} exceeded its {limit_ms} ms transaction limit and was rolled back",
            status.HTTP_504_GATEWAY_TIMEOUT,
        )
        self.operation = operation
        self.limit_ms = limit_ms


class InternalServiceError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR)


def wrap_unexpected_errors(description: str) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Service boundary decorator: ``ServiceError`` passes through unchanged, any other
    exception is logged with its traceback and re-raised as ``InternalServiceError``
    chained to the original.
    """

    def decorator(fn: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(fn)
        async def wrapper(*args, **kwargs) -> T:
            try:
                return await fn(*args, **kwargs)
            except ServiceError:
                raise
            except Exception as exc:
                logger.exception("Unexpected failure while trying to %s", description)
                raise InternalServiceError(f"Failed to {description}") from exc

        return wrapper

    return decorator
