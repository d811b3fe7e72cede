"""Students schemas: enrollments, confirmations, guardian removal."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from tuition_ledger.core.enums import GuardianDeletionMode


class EnrollmentCreate(BaseModel):
    student_id: int
    course_id: int
    enrolled_on: Optional[date] = None


class EnrollmentResponse(BaseModel):
    id: int
    student_id: int
    course_id: int
    enrolled_on: date
    status: int

    class Config:
        from_attributes = True


class EnrollmentDeletionResult(BaseModel):
    enrollment_id: int
    confirmations: int


class ConfirmationCreate(BaseModel):
    enrollment_id: int
    class_id: int
    academic_year_id: int
    confirmed_on: Optional[date] = None
    start_month: Optional[date] = Field(None, description="Date the student started attending this year")


class ConfirmationResponse(BaseModel):
    id: int
    enrollment_id: int
    class_id: int
    academic_year_id: int
    confirmed_on: date
    start_month: Optional[date] = None
    status: int

    class Config:
        from_attributes = True


class GuardianDeletionResult(BaseModel):
    guardian_id: int
    mode: GuardianDeletionMode
    remaining_students: int = 0
    message: str
