"""
Payment Models

The payment ledger: one row per settlement attempt against a source
(an admission, a course or a product), plus the public list of channel
numbers students send money to.

Money fields are frozen at submission; later catalog price changes never
touch an existing payment.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, Integer, String, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.modules.shared import BaseModel


class PaymentSourceType(str, enum.Enum):
    """What a payment settles."""

    ADMISSION = "admission"
    COURSE = "course"
    PRODUCT = "product"


class PaymentChannel(str, enum.Enum):
    """How the student paid."""

    BKASH = "bkash"
    NAGAD = "nagad"
    ROCKET = "rocket"
    OFFLINE = "offline"


class PaymentStatus(str, enum.Enum):
    """Status of a payment. Verified and rejected are terminal."""

    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


# A payment in one of these blocks another submission for the same source
ACTIVE_STATUSES = (PaymentStatus.PENDING, PaymentStatus.VERIFIED)


class Payment(BaseModel):
    """
    A student's payment against one source.

    At most one active (pending or verified) payment may exist per
    (user, source_type, source_id); ``uq_payments_active_source`` enforces it.
    Enum columns store member names, hence the uppercase literals in the
    index predicate.
    """

    __tablename__ = "payments"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    source_type: Mapped[PaymentSourceType] = mapped_column(
        Enum(PaymentSourceType, name="payment_source_type"), nullable=False
    )
    source_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)

    # Frozen at submission
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    transaction_fee: Mapped[int] = mapped_column(Integer, nullable=False)
    total_amount: Mapped[int] = mapped_column(Integer, nullable=False)

    payment_method: Mapped[PaymentChannel] = mapped_column(
        Enum(PaymentChannel, name="payment_channel"), nullable=False
    )
    sender_mobile: Mapped[str | None] = mapped_column(String(20), nullable=True)
    transaction_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus, name="payment_status"),
        nullable=False,
        default=PaymentStatus.PENDING,
    )

    # Set on verification only
    receipt_no: Mapped[str | None] = mapped_column(String(30), unique=True, nullable=True)
    verified_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index(
            "uq_payments_active_source",
            "user_id",
            "source_type",
            "source_id",
            unique=True,
            postgresql_where=text("status IN ('PENDING', 'VERIFIED')"),
        ),
        Index("ix_payments_status", "status"),
        Index("ix_payments_user_id", "user_id"),
        Index("ix_payments_source", "source_type", "source_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Payment(id={self.id}, source={self.source_type.value}:{self.source_id}, "
            f"status={self.status.value})>"
        )


class PaymentMethodName(str, enum.Enum):
    BKASH = "bKash"
    NAGAD = "Nagad"
    ROCKET = "Rocket"
    BANK = "Bank"


class PaymentMethod(BaseModel):
    """A channel number published for students to send money to."""

    __tablename__ = "payment_methods"

    method_name: Mapped[PaymentMethodName] = mapped_column(
        Enum(PaymentMethodName, name="payment_method_name"), nullable=False
    )
    number: Mapped[str] = mapped_column(String(30), nullable=False)
    account_type: Mapped[str] = mapped_column(String(20), nullable=False, default="Personal")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
