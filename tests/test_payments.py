from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tuition_ledger.api.v1.payments import service
from tuition_ledger.api.v1.payments.schemas import PaymentCreate
from tuition_ledger.core.enums import ServiceCategory
from tuition_ledger.core.exceptions import (
    DuplicateVoucherError,
    MalformedMonthFieldError,
    NotFoundError,
    StudentNotFoundError,
)
from tuition_ledger.core.models import PaymentDetail, PrimaryPayment, Student
from tuition_ledger.ledger import facade, vouchers


def _payment(student_id: int, service_type_id: int, **kwargs) -> PaymentCreate:
    data = {"month": "SETEMBRO", "year": 2024, "price": Decimal("15000")}
    data.update(kwargs)
    return PaymentCreate(student_id=student_id, service_type_id=service_type_id, **data)


async def _balance(db: AsyncSession, student_id: int) -> Decimal:
    return (await db.execute(select(Student.balance).where(Student.id == student_id))).scalar_one()


async def _count(db: AsyncSession, model) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


async def test_tuition_payment_writes_invoice_and_line(db_session: AsyncSession, ledger) -> None:
    student = await ledger.student(balance=Decimal("20000"))
    tuition = await ledger.service_type()

    result = await service.record_payment(db_session, _payment(student.id, tuition.id, voucher=" BOR-77 "))

    assert result.is_tuition is True
    assert result.voucher == "BOR-77"
    assert result.month == "SETEMBRO-2024"
    assert result.account == "CAIXA"
    assert result.student_balance == Decimal("5000")
    assert await _balance(db_session, student.id) == Decimal("5000")

    invoice = await db_session.get(PrimaryPayment, result.invoice_id)
    detail = await db_session.get(PaymentDetail, result.detail_id)
    assert invoice.voucher == detail.voucher == "BOR-77"
    assert detail.primary_payment_id == invoice.id
    assert detail.month_index == 9
    assert detail.invoice_number == f"FT {invoice.id}"
    assert detail.hash == invoice.hash


async def test_balance_may_go_negative(db_session: AsyncSession, ledger) -> None:
    student = await ledger.student()
    tuition = await ledger.service_type()

    result = await service.record_payment(db_session, _payment(student.id, tuition.id))

    assert result.student_balance == Decimal("-15000")


async def test_other_services_leave_balance(db_session: AsyncSession, ledger) -> None:
    student = await ledger.student(balance=Decimal("1000"))
    uniform = await ledger.service_type("Uniforme", ServiceCategory.OTHER, Decimal("5000"))

    result = await service.record_payment(
        db_session, _payment(student.id, uniform.id, month="AGOSTO", price=Decimal("5000"), account="BAI")
    )

    assert result.is_tuition is False
    assert result.account == "BAI"
    assert result.student_balance == Decimal("1000")


async def test_generated_voucher(db_session: AsyncSession, ledger) -> None:
    student = await ledger.student()
    tuition = await ledger.service_type()

    result = await service.record_payment(db_session, _payment(student.id, tuition.id))

    assert result.voucher.startswith("BOR_")
    assert len(result.voucher) == len("BOR_") + 12


async def test_recorded_month_counts_as_paid(db_session: AsyncSession, ledger) -> None:
    ay = await ledger.academic_year(2024)
    student = await ledger.enrolled_student(ay)
    tuition = await ledger.service_type()

    await service.record_payment(db_session, _payment(student.id, tuition.id, month="janeiro", year=2025))
    result = await facade.reconcile_tuition(db_session, student.id, ay.id)

    assert result.paid_months == ["JANEIRO"]
    assert result.paid_month_details == ["JANEIRO-2025"]


async def test_duplicate_voucher_is_rejected(db_session: AsyncSession, ledger) -> None:
    student = await ledger.student()
    tuition = await ledger.service_type()
    await ledger.invoice(student, voucher="BOR-1")

    with pytest.raises(DuplicateVoucherError):
        await service.record_payment(db_session, _payment(student.id, tuition.id, voucher="BOR-1"))
    assert await _count(db_session, PaymentDetail) == 0
    assert await _balance(db_session, student.id) == Decimal("0")


async def test_voucher_claimed_after_check_is_reported(db_session: AsyncSession, ledger, monkeypatch) -> None:
    student = await ledger.student()
    tuition = await ledger.service_type()
    await ledger.invoice(student, voucher="BOR-RACE")
    calls = []

    async def stale_check(db, voucher, exclude_invoice_id=None):
        calls.append(voucher)
        if len(calls) == 1:
            # first look happens before the competing writer commits
            return voucher.strip()
        return await vouchers.validate_voucher(db, voucher, exclude_invoice_id)

    monkeypatch.setattr(service, "validate_voucher", stale_check)

    with pytest.raises(DuplicateVoucherError):
        await service.record_payment(db_session, _payment(student.id, tuition.id, voucher="BOR-RACE"))

    assert len(calls) == 2
    assert await _count(db_session, PrimaryPayment) == 1
    assert await _count(db_session, PaymentDetail) == 0
    assert await _balance(db_session, student.id) == Decimal("0")


async def test_colliding_generated_voucher_is_regenerated(db_session: AsyncSession, ledger, monkeypatch) -> None:
    student = await ledger.student()
    tuition = await ledger.service_type()
    await ledger.invoice(student, voucher="BOR_TAKEN")
    generated = iter(["BOR_TAKEN", "BOR_FRESH"])
    monkeypatch.setattr(service, "_generate_voucher", lambda: next(generated))

    result = await service.record_payment(db_session, _payment(student.id, tuition.id))

    assert result.voucher == "BOR_FRESH"
    assert await _count(db_session, PrimaryPayment) == 2
    assert await _balance(db_session, student.id) == Decimal("-15000")


async def test_august_tuition_is_rejected(db_session: AsyncSession, ledger) -> None:
    student = await ledger.student()
    tuition = await ledger.service_type()

    with pytest.raises(MalformedMonthFieldError):
        await service.record_payment(db_session, _payment(student.id, tuition.id, month="AGOSTO"))
    with pytest.raises(MalformedMonthFieldError):
        await service.record_payment(db_session, _payment(student.id, tuition.id, month="SEPTEMBER"))
    assert await _count(db_session, PrimaryPayment) == 0


async def test_unknown_student_or_service(db_session: AsyncSession, ledger) -> None:
    student = await ledger.student()
    tuition = await ledger.service_type()

    with pytest.raises(StudentNotFoundError):
        await service.record_payment(db_session, _payment(999, tuition.id))
    with pytest.raises(NotFoundError):
        await service.record_payment(db_session, _payment(student.id, 999))


async def test_payment_endpoint(client: AsyncClient, ledger) -> None:
    student = await ledger.student()
    tuition = await ledger.service_type()
    body = {
        "student_id": student.id,
        "service_type_id": tuition.id,
        "month": "OUTUBRO",
        "year": 2024,
        "price": "15000",
        "voucher": "BOR-API",
    }

    created = await client.post("/api/v1/payments", json=body)
    assert created.status_code == 201
    assert created.json()["month"] == "OUTUBRO-2024"

    duplicate = await client.post("/api/v1/payments", json=body)
    assert duplicate.status_code == 409

    body.update(voucher="BOR-API-2", month="AGOSTO")
    assert (await client.post("/api/v1/payments", json=body)).status_code == 400
