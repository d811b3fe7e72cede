"""Outstanding tuition from academic years before the current one."""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tuition_ledger.core.models import AcademicYear

from .reconciliation import (
    get_student,
    load_tuition_months,
    months_in_year,
    partition_months,
    resolve_academic_year,
    was_enrolled,
)
from .schemas import AcademicYearSummary, DebtRecord

logger = logging.getLogger(__name__)


async def aggregate_historical_debt(
    db: AsyncSession,
    student_id: int,
    current_academic_year_id: int,
) -> List[DebtRecord]:
    """Pending months per earlier year the student actually attended, newest year first."""
    await get_student(db, student_id)
    current = await resolve_academic_year(db, current_academic_year_id)

    previous_years = (
        await db.execute(
            select(AcademicYear).where(AcademicYear.id < current.id).order_by(AcademicYear.id.desc())
        )
    ).scalars().all()

    tuition_months = await load_tuition_months(db, student_id)
    debts: List[DebtRecord] = []
    for ay in previous_years:
        enrolled, _ = await was_enrolled(db, student_id, ay, tuition_months)
        if not enrolled:
            logger.debug("Student %s did not attend %s, skipping", student_id, ay.designation)
            continue
        partition = partition_months(months_in_year(tuition_months, ay))
        if partition.pending_months:
            debts.append(
                DebtRecord(
                    academic_year=AcademicYearSummary.model_validate(ay),
                    pending_months=partition.pending_months,
                    paid_months=partition.paid_months,
                    total_pending=len(partition.pending_months),
                )
            )
    return debts
