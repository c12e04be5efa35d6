"""
Payments Repository

Database operations for the payment ledger and payment channel numbers.
Only data access lives here; validation and side effects are in the service.
"""

from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.admissions import repository as admissions_repository
from app.modules.admissions.models import Admission, AdmissionStatus
from app.modules.catalog.models import Product
from app.modules.shared.status import apply_transition

from .models import (
    ACTIVE_STATUSES,
    Payment,
    PaymentChannel,
    PaymentMethod,
    PaymentSourceType,
    PaymentStatus,
)
from .schemas import PaymentMethodCreate

# ============================================
# Payments
# ============================================


async def create(
    db: AsyncSession,
    *,
    user_id: UUID,
    source_type: PaymentSourceType,
    source_id: UUID,
    amount: int,
    transaction_fee: int,
    payment_method: PaymentChannel,
    sender_mobile: str | None,
    transaction_id: str | None,
) -> Payment:
    """
    Insert a pending payment.

    Raises:
        IntegrityError: If an active payment for the same source already exists
    """
    payment = Payment(
        user_id=user_id,
        source_type=source_type,
        source_id=source_id,
        amount=amount,
        transaction_fee=transaction_fee,
        total_amount=amount + transaction_fee,
        payment_method=payment_method,
        sender_mobile=sender_mobile,
        transaction_id=transaction_id,
        status=PaymentStatus.PENDING,
    )

    db.add(payment)
    await db.commit()
    await db.refresh(payment)

    return payment


async def get_by_id(db: AsyncSession, id: UUID) -> Payment | None:
    return await db.get(Payment, id)


async def get_by_id_for_update(db: AsyncSession, id: UUID) -> Payment | None:
    """Load a payment and lock its row until the transaction ends."""
    result = await db.execute(
        select(Payment)
        .where(Payment.id == id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def find_active(
    db: AsyncSession,
    user_id: UUID,
    source_type: PaymentSourceType,
    source_id: UUID,
) -> Payment | None:
    """The user's pending or verified payment for a source, if any."""
    result = await db.execute(
        select(Payment).where(
            Payment.user_id == user_id,
            Payment.source_type == source_type,
            Payment.source_id == source_id,
            Payment.status.in_(ACTIVE_STATUSES),
        )
    )
    return result.scalars().first()


async def list_all(db: AsyncSession) -> list[Payment]:
    result = await db.execute(select(Payment).order_by(Payment.created_at.desc()))
    return list(result.scalars().all())


async def list_verified_product_purchases(
    db: AsyncSession, user_id: UUID
) -> list[tuple[Payment, Product]]:
    """A user's verified product payments with the product, newest first."""
    result = await db.execute(
        select(Payment, Product)
        .join(Product, Payment.source_id == Product.id)
        .where(
            Payment.user_id == user_id,
            Payment.source_type == PaymentSourceType.PRODUCT,
            Payment.status == PaymentStatus.VERIFIED,
        )
        .order_by(Payment.verified_at.desc())
    )
    return list(result.tuples().all())


async def has_verified_purchase(db: AsyncSession, user_id: UUID, product_id: UUID) -> bool:
    result = await db.execute(
        select(Payment.id).where(
            Payment.user_id == user_id,
            Payment.source_type == PaymentSourceType.PRODUCT,
            Payment.source_id == product_id,
            Payment.status == PaymentStatus.VERIFIED,
        )
    )
    return result.first() is not None


async def list_unsettled_admission_payments(db: AsyncSession, limit: int = 100) -> list[Payment]:
    """
    Verified admission payments whose admission is still pending.

    These are payments whose post-commit approval step failed.
    """
    result = await db.execute(
        select(Payment)
        .join(Admission, Payment.source_id == Admission.id)
        .where(
            Payment.source_type == PaymentSourceType.ADMISSION,
            Payment.status == PaymentStatus.VERIFIED,
            Admission.status == AdmissionStatus.PENDING,
        )
        .order_by(Payment.verified_at)
        .limit(limit)
    )
    return list(result.scalars().all())


async def delete_payment(db: AsyncSession, payment: Payment) -> None:
    """Delete a payment and clear any admission pointing at it."""
    await admissions_repository.clear_payment_id(db, payment.id)
    await db.delete(payment)
    await db.commit()


async def count_by_status(db: AsyncSession) -> dict[PaymentStatus, int]:
    result = await db.execute(select(Payment.status, func.count()).group_by(Payment.status))
    return {status: count for status, count in result.tuples().all()}


async def sum_verified_income(db: AsyncSession) -> int:
    result = await db.execute(
        select(func.coalesce(func.sum(Payment.total_amount), 0)).where(
            Payment.status == PaymentStatus.VERIFIED
        )
    )
    return int(result.scalar_one())


async def count_approved_admissions(db: AsyncSession) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(Admission)
        .where(Admission.status == AdmissionStatus.APPROVED)
    )
    return result.scalar_one()


# Verified and rejected are terminal
VALID_STATUS_TRANSITIONS: dict[PaymentStatus, set[PaymentStatus]] = {
    PaymentStatus.PENDING: {
        PaymentStatus.VERIFIED,
        PaymentStatus.REJECTED,
    },
    PaymentStatus.VERIFIED: set(),
    PaymentStatus.REJECTED: set(),
}


def apply_status(payment: Payment, status: PaymentStatus, **kwargs) -> Payment:
    """
    Move a payment to ``status`` and set extra fields, without committing.

    Raises:
        InvalidStatusTransitionError: If the state machine forbids the move
    """
    return apply_transition(payment, status, VALID_STATUS_TRANSITIONS, **kwargs)


# ============================================
# Payment channel numbers
# ============================================


async def list_active_methods(db: AsyncSession) -> list[PaymentMethod]:
    result = await db.execute(
        select(PaymentMethod)
        .where(PaymentMethod.is_active == True)  # noqa: E712
        .order_by(PaymentMethod.created_at)
    )
    return list(result.scalars().all())


async def create_method(db: AsyncSession, data: PaymentMethodCreate) -> PaymentMethod:
    method = PaymentMethod(
        method_name=data.method_name,
        number=data.number,
        account_type=data.account_type,
    )
    db.add(method)
    await db.commit()
    await db.refresh(method)
    return method


async def delete_method(db: AsyncSession, id: UUID) -> bool:
    """Delete a payment method. Returns False if it did not exist."""
    result = await db.execute(delete(PaymentMethod).where(PaymentMethod.id == id))
    await db.commit()
    return result.rowcount > 0
