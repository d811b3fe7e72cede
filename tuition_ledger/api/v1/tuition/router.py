"""Tuition router: paid/pending months and historical debt per student."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tuition_ledger.core.exceptions import ServiceError
from tuition_ledger.db.session import get_db
from tuition_ledger.ledger import facade
from tuition_ledger.ledger.schemas import DebtRecord, TuitionLedgerResult

router = APIRouter(prefix="/api/v1/tuition", tags=["tuition"])


@router.get(
    "/students/{student_id}/months",
    response_model=TuitionLedgerResult,
)
async def get_tuition_months(
    student_id: int,
    academic_year_id: Optional[int] = Query(None, description="Defaults to the most recent academic year"),
    db: AsyncSession = Depends(get_db),
) -> TuitionLedgerResult:
    try:
        return await facade.reconcile_tuition(db, student_id, academic_year_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/students/{student_id}/debts",
    response_model=List[DebtRecord],
)
async def get_historical_debts(
    student_id: int,
    current_academic_year_id: int = Query(...),
    db: AsyncSession = Depends(get_db),
) -> List[DebtRecord]:
    try:
        return await facade.aggregate_historical_debt(db, student_id, current_academic_year_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
