"""
Admission Models

A student's application to a course. Approval is driven by payment
verification, which also issues the roll number.
"""

import enum
import uuid
from datetime import date

from sqlalchemy import Date, Enum, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.modules.shared import BaseModel


class Gender(str, enum.Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class AdmissionStatus(str, enum.Enum):
    """Status of an admission application."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Admission(BaseModel):
    """
    Admission application for one course.

    A user can apply to a course only once (``uq_admissions_user_course``).
    """

    __tablename__ = "admissions"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    course_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("courses.id", ondelete="RESTRICT"),
        nullable=False,
    )

    # Application form
    session: Mapped[str] = mapped_column(String(50), nullable=False)
    father_name: Mapped[str] = mapped_column(String(200), nullable=False)
    mother_name: Mapped[str] = mapped_column(String(200), nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    gender: Mapped[Gender] = mapped_column(Enum(Gender, name="gender"), nullable=False)
    religion: Mapped[str] = mapped_column(String(50), nullable=False)
    marital_status: Mapped[str] = mapped_column(String(20), nullable=False, default="Single")
    nid_or_birth_cert: Mapped[str] = mapped_column(String(50), nullable=False)
    present_address: Mapped[str] = mapped_column(Text, nullable=False)
    guardian_phone: Mapped[str] = mapped_column(String(20), nullable=False)

    # Uploaded images
    photo_url: Mapped[str] = mapped_column(String(500), nullable=False)
    signature_url: Mapped[str] = mapped_column(String(500), nullable=False)

    # Settlement
    status: Mapped[AdmissionStatus] = mapped_column(
        Enum(AdmissionStatus, name="admission_status"),
        nullable=False,
        default=AdmissionStatus.PENDING,
    )
    roll_no: Mapped[str | None] = mapped_column(String(20), nullable=True)
    payment_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("payments.id", ondelete="SET NULL"),
        nullable=True,
    )

    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_admissions_user_course"),
        Index("ix_admissions_status", "status"),
        Index("ix_admissions_course_id", "course_id"),
    )

    def __repr__(self) -> str:
        return f"<Admission(id={self.id}, user_id={self.user_id}, status={self.status.value})>"
