from datetime import date
from decimal import Decimal
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from tuition_ledger.core.enums import ServiceCategory
from tuition_ledger.core.models import (
    AcademicYear,
    Confirmation,
    Course,
    CreditNote,
    Enrollment,
    Guardian,
    PaymentDetail,
    PrimaryPayment,
    SchoolClass,
    ServiceAssignment,
    ServiceType,
    Student,
    Transfer,
)
from tuition_ledger.db.session import Base, get_db
from tuition_ledger.main import app

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture()
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Private in-memory SQLite database per test, with foreign keys enforced."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for a test and override FastAPI dependency."""
    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.pop(get_db, None)


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


class LedgerBuilder:
    """
    Seeds ledger rows and commits after each one so services start from an idle session.

    Seeded rows are returned detached: a rollback inside the code under test expires
    everything still in the session, and reloading an expired attribute outside the
    async driver raises ``MissingGreenlet``.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self._course: Optional[Course] = None

    async def _save(self, obj):
        self.db.add(obj)
        await self.db.commit()
        await self.db.refresh(obj)
        self.db.expunge(obj)
        return obj

    async def academic_year(self, start_year: int) -> AcademicYear:
        return await self._save(
            AcademicYear(designation=f"{start_year}/{start_year + 1}", start_year=start_year, end_year=start_year + 1)
        )

    async def guardian(self, name: str = "Maria Guardiã") -> Guardian:
        return await self._save(Guardian(name=name, phone="923000000"))

    async def student(
        self,
        name: str = "João Manuel",
        guardian: Optional[Guardian] = None,
        balance: Decimal = Decimal("0"),
    ) -> Student:
        return await self._save(
            Student(name=name, balance=balance, guardian_id=guardian.id if guardian else None)
        )

    async def course(self) -> Course:
        if self._course is None:
            self._course = await self._save(Course(name="Ensino Geral"))
        return self._course

    async def enrollment(self, student: Student) -> Enrollment:
        course = await self.course()
        return await self._save(Enrollment(student_id=student.id, course_id=course.id, enrolled_on=date(2020, 9, 1)))

    async def school_class(self, academic_year: AcademicYear, name: str = "10ª A") -> SchoolClass:
        return await self._save(SchoolClass(name=name, academic_year_id=academic_year.id))

    async def confirm(
        self,
        enrollment: Enrollment,
        academic_year: AcademicYear,
        start_month: Optional[date] = None,
    ) -> Confirmation:
        school_class = await self.school_class(academic_year)
        return await self._save(
            Confirmation(
                enrollment_id=enrollment.id,
                class_id=school_class.id,
                academic_year_id=academic_year.id,
                confirmed_on=date(academic_year.start_year, 9, 1),
                start_month=start_month,
            )
        )

    async def enrolled_student(self, academic_year: AcademicYear, **kwargs) -> Student:
        student = await self.student(**kwargs)
        enrollment = await self.enrollment(student)
        await self.confirm(enrollment, academic_year)
        return student

    async def service_type(
        self,
        designation: str = "Propina 10ª Classe",
        category: ServiceCategory = ServiceCategory.TUITION,
        price: Decimal = Decimal("15000"),
    ) -> ServiceType:
        return await self._save(ServiceType(designation=designation, category=category.value, price=price))

    async def invoice(
        self,
        student: Student,
        voucher: Optional[str] = None,
        total: Optional[Decimal] = Decimal("15000"),
        amount_tendered: Optional[Decimal] = None,
    ) -> PrimaryPayment:
        return await self._save(
            PrimaryPayment(student_id=student.id, voucher=voucher, total=total, amount_tendered=amount_tendered)
        )

    async def line_item(
        self,
        student: Student,
        service_type: ServiceType,
        month: str,
        year: Optional[int] = None,
        price: Optional[Decimal] = Decimal("15000"),
        grand_total: Optional[Decimal] = None,
        voucher: Optional[str] = None,
        invoice: Optional[PrimaryPayment] = None,
    ) -> PaymentDetail:
        return await self._save(
            PaymentDetail(
                student_id=student.id,
                service_type_id=service_type.id,
                primary_payment_id=invoice.id if invoice else None,
                voucher=voucher,
                month=month,
                year=year,
                price=price,
                grand_total=grand_total,
            )
        )

    async def credit_note(
        self,
        student: Student,
        invoice_number: str,
        invoice: Optional[PrimaryPayment] = None,
    ) -> CreditNote:
        return await self._save(
            CreditNote(
                designation="Anulação",
                invoice_number=invoice_number,
                amount=Decimal("15000"),
                student_id=student.id,
                primary_payment_id=invoice.id if invoice else None,
            )
        )

    async def service_assignment(self, student: Student, service_type: ServiceType) -> ServiceAssignment:
        return await self._save(ServiceAssignment(student_id=student.id, service_type_id=service_type.id))

    async def transfer(self, student: Student) -> Transfer:
        return await self._save(Transfer(student_id=student.id, destination_school="Colégio Central"))


@pytest.fixture()
def ledger(db_session: AsyncSession) -> LedgerBuilder:
    return LedgerBuilder(db_session)
