"""
Fixtures for admissions tests.
"""

from datetime import UTC, date, datetime
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from app.core.auth import ROLE_ADMIN, ROLE_STUDENT, CurrentUser
from app.modules.admissions.models import Admission, AdmissionStatus, Gender
from app.modules.admissions.schemas import AdmissionCreate
from app.modules.catalog.models import Course, CourseType
from app.modules.users.models import User, UserRole


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.get = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def student():
    return CurrentUser(id=uuid4(), email="nusrat@example.com", role=ROLE_STUDENT, name="Nusrat")


@pytest.fixture
def admin():
    return CurrentUser(id=uuid4(), email="admin@example.com", role=ROLE_ADMIN, name="Admin")


@pytest.fixture
def student_model(student):
    user = MagicMock(spec=User)
    user.id = student.id
    user.name = "Nusrat Jahan"
    user.student_id = "TCTC-0107"
    user.email = student.email
    user.phone = "01911111111"
    user.role = UserRole.STUDENT
    return user


@pytest.fixture
def admin_model(admin):
    user = MagicMock(spec=User)
    user.id = admin.id
    user.name = "Admin"
    user.email = admin.email
    user.role = UserRole.ADMIN
    return user


@pytest.fixture
def course():
    model = MagicMock(spec=Course)
    model.id = uuid4()
    model.title = "Graphics Design & Freelancing"
    model.type = CourseType.PRIVATE
    model.fee = 6000
    model.duration = "6 Months"
    model.is_active = True
    return model


@pytest.fixture
def admission_create(course):
    return AdmissionCreate(
        course_id=course.id,
        session="2026-27",
        father_name="Jamal Uddin",
        mother_name="Rokeya Begum",
        date_of_birth=date(2005, 3, 14),
        gender=Gender.FEMALE,
        religion="Islam",
        nid_or_birth_cert="20051234567890123",
        present_address="Uttara, Dhaka",
        guardian_phone="01822222222",
        photo_url="https://cdn.example.com/photo.jpg",
        signature_url="https://cdn.example.com/sign.jpg",
    )


@pytest.fixture
def admission(student, course):
    model = MagicMock(spec=Admission)
    model.id = uuid4()
    model.user_id = student.id
    model.course_id = course.id
    model.session = "2026-27"
    model.father_name = "Jamal Uddin"
    model.mother_name = "Rokeya Begum"
    model.date_of_birth = date(2005, 3, 14)
    model.gender = Gender.FEMALE
    model.religion = "Islam"
    model.marital_status = "Single"
    model.nid_or_birth_cert = "20051234567890123"
    model.present_address = "Uttara, Dhaka"
    model.guardian_phone = "01822222222"
    model.photo_url = "https://cdn.example.com/photo.jpg"
    model.signature_url = "https://cdn.example.com/sign.jpg"
    model.status = AdmissionStatus.PENDING
    model.roll_no = None
    model.payment_id = None
    model.created_at = datetime.now(UTC)
    model.updated_at = datetime.now(UTC)
    return model
