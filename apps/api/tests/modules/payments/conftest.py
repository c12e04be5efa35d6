"""
Fixtures for payments tests.
"""

from datetime import UTC, date, datetime
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from app.core.auth import ROLE_ADMIN, ROLE_STUDENT, CurrentUser
from app.modules.admissions.models import Admission, AdmissionStatus, Gender
from app.modules.catalog.models import Course, CourseType, Product, ProductType
from app.modules.payments.models import (
    Payment,
    PaymentChannel,
    PaymentSourceType,
    PaymentStatus,
)
from app.modules.payments.schemas import PaymentCreate
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
    return CurrentUser(id=uuid4(), email="rahim@example.com", role=ROLE_STUDENT, name="Rahim")


@pytest.fixture
def other_student():
    return CurrentUser(id=uuid4(), email="karim@example.com", role=ROLE_STUDENT, name="Karim")


@pytest.fixture
def admin():
    return CurrentUser(id=uuid4(), email="admin@example.com", role=ROLE_ADMIN, name="Admin")


@pytest.fixture
def student_model(student):
    user = MagicMock(spec=User)
    user.id = student.id
    user.name = "Rahim Uddin"
    user.student_id = "TCTC-0042"
    user.email = student.email
    user.phone = "01700000000"
    user.role = UserRole.STUDENT
    return user


@pytest.fixture
def admin_model(admin):
    user = MagicMock(spec=User)
    user.id = admin.id
    user.name = "Admin"
    user.student_id = None
    user.email = admin.email
    user.phone = None
    user.role = UserRole.ADMIN
    return user


@pytest.fixture
def course():
    model = MagicMock(spec=Course)
    model.id = uuid4()
    model.title = "Office Application (Private)"
    model.type = CourseType.PRIVATE
    model.fee = 3000
    model.duration = "3 Months"
    model.is_active = True
    return model


@pytest.fixture
def product():
    model = MagicMock(spec=Product)
    model.id = uuid4()
    model.title = "CV Template Pack"
    model.type = ProductType.TEMPLATE
    model.price = 200
    model.thumbnail_url = "https://cdn.example.com/cv.png"
    model.file_url = "https://cdn.example.com/cv.zip"
    model.is_active = True
    return model


@pytest.fixture
def admission(student, course):
    model = MagicMock(spec=Admission)
    model.id = uuid4()
    model.user_id = student.id
    model.course_id = course.id
    model.session = "2026-27"
    model.father_name = "Abdul"
    model.mother_name = "Amena"
    model.date_of_birth = date(2004, 5, 1)
    model.gender = Gender.MALE
    model.religion = "Islam"
    model.marital_status = "Single"
    model.nid_or_birth_cert = "19982691234567890"
    model.present_address = "Mirpur, Dhaka"
    model.guardian_phone = "01800000000"
    model.photo_url = "https://cdn.example.com/photo.jpg"
    model.signature_url = "https://cdn.example.com/sign.jpg"
    model.status = AdmissionStatus.PENDING
    model.roll_no = None
    model.payment_id = None
    model.created_at = datetime.now(UTC)
    model.updated_at = datetime.now(UTC)
    return model


def make_payment(
    user_id,
    source_type=PaymentSourceType.PRODUCT,
    source_id=None,
    amount=200,
    fee=30,
    method=PaymentChannel.BKASH,
    status=PaymentStatus.PENDING,
):
    """Build a payment model with real attribute values."""
    payment = MagicMock(spec=Payment)
    payment.id = uuid4()
    payment.user_id = user_id
    payment.source_type = source_type
    payment.source_id = source_id or uuid4()
    payment.amount = amount
    payment.transaction_fee = fee
    payment.total_amount = amount + fee
    payment.payment_method = method
    payment.sender_mobile = "01700000000"
    payment.transaction_id = "TRX123ABC"
    payment.status = status
    payment.receipt_no = None
    payment.verified_by = None
    payment.verified_at = None
    payment.created_at = datetime.now(UTC)
    payment.updated_at = datetime.now(UTC)
    return payment


@pytest.fixture
def product_payment(student, product):
    return make_payment(student.id, PaymentSourceType.PRODUCT, product.id, amount=200)


@pytest.fixture
def admission_payment(student, admission):
    return make_payment(student.id, PaymentSourceType.ADMISSION, admission.id, amount=3000)


@pytest.fixture
def product_submission(product):
    return PaymentCreate(
        source_type="product",
        source_id=str(product.id),
        payment_method="bkash",
        sender_mobile="01700000000",
        transaction_id="TRX123ABC",
    )


@pytest.fixture
def payment_factory():
    """Factory for payment models, for tests that need more than one."""
    return make_payment
