"""
Admissions Schemas

Request/response models for the admission endpoints. JSON keys are camelCase.
"""

from datetime import date, datetime
from uuid import UUID

from pydantic import Field

from app.modules.admissions.models import AdmissionStatus, Gender
from app.modules.shared.schemas import CamelModel


class AdmissionCreate(CamelModel):
    """Admission application form. Every field except marital status is required."""

    course_id: UUID
    session: str = Field(..., min_length=1, max_length=50)
    father_name: str = Field(..., min_length=1, max_length=200)
    mother_name: str = Field(..., min_length=1, max_length=200)
    date_of_birth: date
    gender: Gender
    religion: str = Field(..., min_length=1, max_length=50)
    marital_status: str = Field(default="Single", max_length=20)
    nid_or_birth_cert: str = Field(..., min_length=1, max_length=50)
    present_address: str = Field(..., min_length=1)
    guardian_phone: str = Field(..., min_length=1, max_length=20)
    photo_url: str = Field(..., min_length=1, max_length=500)
    signature_url: str = Field(..., min_length=1, max_length=500)


class CourseSummary(CamelModel):
    id: UUID
    title: str
    fee: int
    duration: str | None = None


class StudentSummary(CamelModel):
    id: UUID
    name: str
    student_id: str | None = None
    email: str
    phone: str | None = None


class AdmissionResponse(CamelModel):
    """Admission record, optionally with course and student projections."""

    id: UUID
    user_id: UUID
    course_id: UUID
    session: str
    father_name: str
    mother_name: str
    date_of_birth: date
    gender: Gender
    religion: str
    marital_status: str
    nid_or_birth_cert: str
    present_address: str
    guardian_phone: str
    photo_url: str
    signature_url: str
    status: AdmissionStatus
    roll_no: str | None = None
    payment_id: UUID | None = None
    created_at: datetime
    updated_at: datetime

    course: CourseSummary | None = None
    user: StudentSummary | None = None
