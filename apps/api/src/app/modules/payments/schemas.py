"""
Payments Schemas

Request/response models for the payment endpoints. JSON keys are camelCase;
snake_case input is accepted as well.
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from app.modules.payments.models import (
    PaymentChannel,
    PaymentMethodName,
    PaymentSourceType,
    PaymentStatus,
)
from app.modules.shared.schemas import CamelModel

# ============================================
# Submission
# ============================================


class PaymentCreate(CamelModel):
    """
    Payment submission.

    ``source_type``, ``source_id`` and ``payment_method`` are plain strings so
    unknown or malformed values are reported as 400 by the service rather than
    422 by validation.
    ``admission_id`` is the legacy name for ``source_id`` on admission payments.
    """

    source_type: str | None = None
    source_id: str | None = None
    admission_id: str | None = None
    payment_method: str | None = None
    sender_mobile: str | None = Field(default=None, max_length=20)
    transaction_id: str | None = Field(default=None, max_length=100)
    amount: int | None = Field(default=None, ge=0)


class PaymentResponse(CamelModel):
    id: UUID
    user_id: UUID
    source_type: PaymentSourceType
    source_id: UUID
    amount: int
    transaction_fee: int
    total_amount: int
    payment_method: PaymentChannel
    sender_mobile: str | None = None
    transaction_id: str | None = None
    status: PaymentStatus
    receipt_no: str | None = None
    verified_by: UUID | None = None
    verified_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


# ============================================
# Admin listing
# ============================================


class PaymentUserSummary(CamelModel):
    name: str
    student_id: str | None = None
    email: str


class SourceDetails(CamelModel):
    """
    Live description of a payment's source, read at request time.

    Courses and admissions fill ``fee``/``duration``; products fill
    ``price``/``type``.
    """

    title: str
    fee: int | None = None
    duration: str | None = None
    price: int | None = None
    type: str | None = None


class PaymentListItem(PaymentResponse):
    user: PaymentUserSummary | None = None
    source_details: SourceDetails | None = None


class VerifyPaymentResponse(CamelModel):
    message: str = "Verified"
    receipt_no: str


class MessageResponse(CamelModel):
    message: str


class PaymentStats(CamelModel):
    pending: int = 0
    verified: int = 0
    rejected: int = 0
    total_income: int = 0
    approved_admissions: int = 0


# ============================================
# Payment channel numbers
# ============================================


class PaymentMethodCreate(CamelModel):
    method_name: PaymentMethodName
    number: str = Field(..., min_length=1, max_length=30)
    account_type: str = Field(default="Personal", max_length=20)


class PaymentMethodResponse(CamelModel):
    id: UUID
    method_name: PaymentMethodName
    number: str
    account_type: str
    is_active: bool
    created_at: datetime


# ============================================
# Purchases & receipts
# ============================================


class DownloadItem(CamelModel):
    """A verified product purchase."""

    payment_id: UUID
    product_id: UUID
    title: str
    type: str
    thumbnail_url: str
    file_url: str
    receipt_no: str | None = None
    purchased_at: datetime | None = None


class ProductDownloadResponse(CamelModel):
    file_url: str


class ReceiptStudentDetails(CamelModel):
    name: str
    student_id: str | None = None
    email: str
    phone: str | None = None


class ReceiptPaymentDetails(CamelModel):
    method: PaymentChannel
    trx_id: str | None = None
    amount: int
    fee: int
    total: int


class ReceiptItemDetails(CamelModel):
    item_name: str
    type: str
    roll_no: str | None = None


class ReceiptResponse(CamelModel):
    receipt_no: str
    date: datetime | None = None
    student_details: ReceiptStudentDetails
    payment_details: ReceiptPaymentDetails
    item_details: ReceiptItemDetails
