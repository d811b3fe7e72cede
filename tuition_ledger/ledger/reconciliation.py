"""Tuition reconciliation: which academic months a student has paid and which are pending."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tuition_ledger.core.enums import RecordStatus, ServiceCategory
from tuition_ledger.core.exceptions import (
    AcademicYearNotFoundError,
    MalformedMonthFieldError,
    StudentNotFoundError,
)
from tuition_ledger.core.models import (
    AcademicYear,
    Confirmation,
    Enrollment,
    PaymentDetail,
    ServiceType,
    Student,
)

from .academic_calendar import academic_months, is_in_academic_year, month_label, parse_payment_month
from .schemas import AcademicYearSummary, TuitionLedgerResult

logger = logging.getLogger(__name__)

TuitionMonth = Tuple[str, int]


@dataclass
class MonthPartition:
    paid_months: List[str] = field(default_factory=list)
    paid_month_details: List[str] = field(default_factory=list)
    pending_months: List[str] = field(default_factory=list)

    @property
    def next_due_month(self) -> Optional[str]:
        return self.pending_months[0] if self.pending_months else None


def _summary(ay: AcademicYear) -> AcademicYearSummary:
    return AcademicYearSummary.model_validate(ay)


async def get_student(db: AsyncSession, student_id: int) -> Student:
    student = await db.get(Student, student_id)
    if student is None:
        raise StudentNotFoundError(student_id)
    return student


async def resolve_academic_year(db: AsyncSession, academic_year_id: Optional[int] = None) -> AcademicYear:
    """Given year, or the most recently created one when no id is passed."""
    if academic_year_id is not None:
        ay = await db.get(AcademicYear, academic_year_id)
    else:
        ay = (
            await db.execute(select(AcademicYear).order_by(AcademicYear.id.desc()).limit(1))
        ).scalar_one_or_none()
    if ay is None:
        raise AcademicYearNotFoundError(academic_year_id)
    return ay


async def find_confirmation(db: AsyncSession, student_id: int, academic_year_id: int) -> Optional[Confirmation]:
    stmt = (
        select(Confirmation)
        .join(Enrollment, Confirmation.enrollment_id == Enrollment.id)
        .where(
            Enrollment.student_id == student_id,
            Confirmation.academic_year_id == academic_year_id,
            Confirmation.status == RecordStatus.ACTIVE.value,
        )
        .limit(1)
    )
    return (await db.execute(stmt)).scalar_one_or_none()


async def load_tuition_months(db: AsyncSession, student_id: int) -> List[TuitionMonth]:
    """All tuition (month, year) pairs on the student's ledger, oldest line first."""
    stmt = (
        select(PaymentDetail.id, PaymentDetail.month, PaymentDetail.year)
        .join(ServiceType, PaymentDetail.service_type_id == ServiceType.id)
        .where(
            PaymentDetail.student_id == student_id,
            ServiceType.category == ServiceCategory.TUITION.value,
        )
        .order_by(PaymentDetail.id)
    )
    months: List[TuitionMonth] = []
    for detail_id, raw_month, raw_year in (await db.execute(stmt)).all():
        if not raw_month:
            continue
        try:
            months.append(parse_payment_month(raw_month, raw_year))
        except MalformedMonthFieldError:
            logger.warning(
                "Skipping payment detail %s: unreadable month %r / year %r", detail_id, raw_month, raw_year
            )
    return months


def months_in_year(months: Sequence[TuitionMonth], academic_year: AcademicYear) -> List[TuitionMonth]:
    """Keep only pairs whose calendar year matches the academic year's half they fall in."""
    return [(m, y) for m, y in months if is_in_academic_year(m, y, academic_year)]


def partition_months(months: Sequence[TuitionMonth]) -> MonthPartition:
    paid_names = {m for m, _ in months}
    details: List[str] = []
    for m, y in months:
        label = month_label(m, y)
        if label not in details:
            details.append(label)
    canonical = academic_months()
    return MonthPartition(
        paid_months=[m for m in canonical if m in paid_names],
        paid_month_details=details,
        pending_months=[m for m in canonical if m not in paid_names],
    )


async def was_enrolled(
    db: AsyncSession,
    student_id: int,
    academic_year: AcademicYear,
    tuition_months: Sequence[TuitionMonth],
) -> Tuple[bool, Optional[Confirmation]]:
    """
    A student attended a year if an active confirmation exists for it, or, for older
    records that predate confirmations, if any tuition payment falls inside the year.
    """
    confirmation = await find_confirmation(db, student_id, academic_year.id)
    if confirmation is not None:
        return True, confirmation
    return bool(months_in_year(tuition_months, academic_year)), None


async def reconcile_tuition(
    db: AsyncSession,
    student_id: int,
    academic_year_id: Optional[int] = None,
) -> TuitionLedgerResult:
    await get_student(db, student_id)
    ay = await resolve_academic_year(db, academic_year_id)

    tuition_months = await load_tuition_months(db, student_id)
    enrolled, confirmation = await was_enrolled(db, student_id, ay, tuition_months)
    if not enrolled:
        logger.info("Student %s has no enrollment or tuition payment in %s", student_id, ay.designation)
        return TuitionLedgerResult(
            student_id=student_id,
            academic_year=_summary(ay),
            enrolled=False,
            message=f"No enrollment or confirmation found for the student in academic year {ay.designation}",
        )

    partition = partition_months(months_in_year(tuition_months, ay))
    study_start = None
    if confirmation is not None:
        study_start = confirmation.start_month or confirmation.confirmed_on

    return TuitionLedgerResult(
        student_id=student_id,
        academic_year=_summary(ay),
        enrolled=True,
        paid_months=partition.paid_months,
        paid_month_details=partition.paid_month_details,
        pending_months=partition.pending_months,
        total_months=len(academic_months()),
        paid_count=len(partition.paid_months),
        pending_count=len(partition.pending_months),
        next_due_month=partition.next_due_month,
        has_outstanding=bool(partition.pending_months),
        study_start=study_start,
    )
