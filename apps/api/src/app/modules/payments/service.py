"""
Payments Service Layer

Business logic for the payment ledger.

This module implements:
1. Submission:
   - Validate method, source id and the offline rule, in that order
   - Resolve the source to a price (frozen on the payment)
   - Reject a second active payment for the same source (pre-check, then the
     partial unique index as the final word)
   - Link admission payments back onto the admission
   - Notify admins (best-effort)

2. Verification (admin):
   - Lock the payment row, move pending -> verified, draw a receipt number
     from the yearly counter, commit
   - Post-commit: approve the linked admission with a roll number, then
     email the receipt. Failures are logged; admission approval is retried
     by the reconciliation job.

3. Rejection (admin): pending -> rejected, nothing else.

4. Reads: enriched admin listing, stats, receipts, product downloads, and
   the public payment channel numbers.
"""

import asyncio
import logging
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUser
from app.core.email import send_payment_submitted, send_payment_verified
from app.modules.admissions import repository as admissions_repository
from app.modules.admissions import service as admissions_service
from app.modules.admissions.models import Admission
from app.modules.catalog import repository as catalog_repository
from app.modules.payments import repository
from app.modules.payments.errors import (
    DuplicatePaymentError,
    InvalidPaymentInputError,
    PaymentAccessDeniedError,
    PaymentAlreadyProcessedError,
    PaymentMethodNotFoundError,
    PaymentNotFoundError,
    ProductNotFoundError,
    PurchaseNotVerifiedError,
    ReceiptNotFoundError,
)
from app.modules.payments.models import (
    Payment,
    PaymentChannel,
    PaymentSourceType,
    PaymentStatus,
)
from app.modules.payments.schemas import (
    DownloadItem,
    MessageResponse,
    PaymentCreate,
    PaymentListItem,
    PaymentMethodCreate,
    PaymentMethodResponse,
    PaymentResponse,
    PaymentStats,
    PaymentUserSummary,
    ReceiptItemDetails,
    ReceiptPaymentDetails,
    ReceiptResponse,
    ReceiptStudentDetails,
    VerifyPaymentResponse,
)
from app.modules.payments.sources import describe_sources, parse_source_type, resolve_source
from app.modules.shared.sequences import next_receipt_no
from app.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

# Fees in BDT
TRANSACTION_FEE = 30
OFFLINE_ADMISSION_FEE = 20


def compute_transaction_fee(method: PaymentChannel, source_type: PaymentSourceType) -> int:
    """Offline admission fees are paid at the desk and carry a lower surcharge."""
    if method == PaymentChannel.OFFLINE and source_type == PaymentSourceType.ADMISSION:
        return OFFLINE_ADMISSION_FEE
    return TRANSACTION_FEE


def _parse_method(value: str | None) -> PaymentChannel:
    try:
        return PaymentChannel((value or "").strip().lower())
    except ValueError as e:
        raise InvalidPaymentInputError("Invalid payment method selection") from e


def _parse_source_id(value: str | None) -> UUID:
    if not value or not value.strip():
        raise InvalidPaymentInputError("sourceId is required")
    try:
        return UUID(value.strip())
    except ValueError as e:
        raise InvalidPaymentInputError("sourceId is not a valid id") from e


# ============================================
# Submission
# ============================================


async def submit_payment(
    db: AsyncSession,
    current_user: CurrentUser,
    data: PaymentCreate,
) -> PaymentResponse:
    """
    Record a pending payment against an admission, course or product.

    Raises:
        InvalidPaymentInputError: Bad method, missing or malformed source id, or
            offline for a non-admission
        UnsupportedSourceError: Unknown source type
        SourceNotFoundError: Source missing, inactive, or another user's admission
        AdmissionNotPayableError: Admission is no longer pending
        DuplicatePaymentError: An active payment for this source already exists
    """
    method = _parse_method(data.payment_method)

    source_id = _parse_source_id(data.source_id or data.admission_id)

    requested_type = (data.source_type or PaymentSourceType.ADMISSION.value).strip().lower()
    if method == PaymentChannel.OFFLINE and requested_type != PaymentSourceType.ADMISSION.value:
        raise InvalidPaymentInputError("Offline payment is only available for admission fees")

    source_type = parse_source_type(data.source_type)
    resolved = await resolve_source(db, source_type, source_id, current_user.id)

    existing = await repository.find_active(db, current_user.id, source_type, source_id)
    if existing:
        logger.info(
            f"Duplicate payment rejected: user={current_user.id}, "
            f"source={source_type.value}:{source_id}, existing={existing.id}"
        )
        raise DuplicatePaymentError()

    if source_type != PaymentSourceType.ADMISSION and data.amount is not None:
        amount = data.amount
    else:
        amount = resolved.amount

    try:
        payment = await repository.create(
            db,
            user_id=current_user.id,
            source_type=source_type,
            source_id=source_id,
            amount=amount,
            transaction_fee=compute_transaction_fee(method, source_type),
            payment_method=method,
            sender_mobile=data.sender_mobile,
            transaction_id=data.transaction_id,
        )
    except IntegrityError as e:
        # A concurrent submission won the partial unique index
        await db.rollback()
        raise DuplicatePaymentError() from e

    # Snapshot before best-effort steps; a rollback there expires loaded rows
    response = PaymentResponse.model_validate(payment)

    logger.info(
        f"Payment submitted: id={response.id}, user={current_user.id}, "
        f"source={source_type.value}:{source_id}, total={response.total_amount}"
    )

    if source_type == PaymentSourceType.ADMISSION:
        await _link_admission(db, source_id, response.id)

    await _notify_admins_of_payment(db, current_user, response, resolved.display_name)

    return response


async def _link_admission(db: AsyncSession, admission_id: UUID, payment_id: UUID) -> None:
    try:
        await admissions_repository.set_payment_id(db, admission_id, payment_id)
    except Exception as e:
        logger.error(f"Failed to link payment {payment_id} to admission {admission_id}: {e}")
        await db.rollback()


async def _notify_admins_of_payment(
    db: AsyncSession,
    current_user: CurrentUser,
    payment: PaymentResponse,
    item_name: str,
) -> None:
    try:
        admins = await UserRepository.list_admins(db)
        if not admins:
            return

        student_name = current_user.name or current_user.email
        await asyncio.gather(
            *(
                send_payment_submitted(
                    to_email=admin.email,
                    student_name=student_name,
                    item_name=item_name,
                    total_amount=payment.total_amount,
                    transaction_id=payment.transaction_id,
                    payment_method=payment.payment_method.value,
                )
                for admin in admins
            )
        )
    except Exception as e:
        logger.error(f"Failed to send admin payment notifications: {e}")


# ============================================
# Verification & rejection
# ============================================


async def verify_payment(
    db: AsyncSession,
    payment_id: UUID,
    admin: CurrentUser,
) -> VerifyPaymentResponse:
    """
    Verify a pending payment and issue its receipt number.

    The receipt number and the status change commit together. What follows
    (admission approval, receipt email) cannot undo the verification.

    Raises:
        PaymentNotFoundError: If the payment does not exist
        PaymentAlreadyProcessedError: If the payment is not pending
    """
    payment = await repository.get_by_id_for_update(db, payment_id)
    if not payment:
        await db.rollback()
        raise PaymentNotFoundError(payment_id)

    current_status = payment.status
    if current_status != PaymentStatus.PENDING:
        await db.rollback()
        if current_status == PaymentStatus.VERIFIED:
            raise PaymentAlreadyProcessedError("Already verified")
        raise PaymentAlreadyProcessedError("A rejected payment cannot be verified")

    receipt_no = await next_receipt_no(db)
    repository.apply_status(
        payment,
        PaymentStatus.VERIFIED,
        verified_by=admin.id,
        verified_at=datetime.now(UTC),
        receipt_no=receipt_no,
    )
    await db.commit()
    await db.refresh(payment)

    logger.info(f"Payment {payment.id} verified by admin {admin.id}, receipt {receipt_no}")

    # Snapshot before best-effort steps; a rollback there expires loaded rows
    verified = PaymentResponse.model_validate(payment)

    roll_no = None
    if verified.source_type == PaymentSourceType.ADMISSION:
        admission = await settle_admission(db, verified)
        roll_no = admission.roll_no if admission else None

    await _send_receipt_email(db, verified, roll_no)

    return VerifyPaymentResponse(message="Verified", receipt_no=receipt_no)


async def settle_admission(
    db: AsyncSession,
    payment: Payment | PaymentResponse,
) -> Admission | None:
    """
    Approve the admission behind a verified payment. Failures are logged.

    Returns:
        The approved admission, or None if approval did not happen
    """
    payment_id, admission_id = payment.id, payment.source_id
    try:
        return await admissions_service.approve_for_payment(db, admission_id)
    except Exception as e:
        logger.error(
            f"Admission approval failed for payment {payment_id} (admission {admission_id}): {e}"
        )
        await db.rollback()
        return None


async def _send_receipt_email(
    db: AsyncSession,
    payment: PaymentResponse,
    roll_no: str | None,
) -> None:
    try:
        user = await UserRepository.get_by_id(db, payment.user_id)
        if not user or not user.email:
            return

        item = await _describe_item(db, payment)
        await send_payment_verified(
            to_email=user.email,
            student_name=user.name,
            receipt_no=payment.receipt_no,
            item_name=item.item_name,
            total_amount=payment.total_amount,
            roll_no=roll_no,
        )
    except Exception as e:
        logger.error(f"Failed to send receipt email for payment {payment.id}: {e}")


async def reject_payment(
    db: AsyncSession,
    payment_id: UUID,
    admin: CurrentUser,
) -> MessageResponse:
    """
    Reject a pending payment. Rejecting a rejected payment changes nothing.

    The linked admission stays pending so the student can pay again.

    Raises:
        PaymentNotFoundError: If the payment does not exist
        PaymentAlreadyProcessedError: If the payment was already verified
    """
    payment = await repository.get_by_id_for_update(db, payment_id)
    if not payment:
        await db.rollback()
        raise PaymentNotFoundError(payment_id)

    if payment.status == PaymentStatus.REJECTED:
        await db.rollback()
        return MessageResponse(message="Payment rejected")

    if payment.status == PaymentStatus.VERIFIED:
        await db.rollback()
        raise PaymentAlreadyProcessedError("A verified payment cannot be rejected")

    repository.apply_status(payment, PaymentStatus.REJECTED)
    await db.commit()

    logger.info(f"Payment {payment_id} rejected by admin {admin.id}")
    return MessageResponse(message="Payment rejected")


# ============================================
# Admin reads & housekeeping
# ============================================


async def list_payments(db: AsyncSession) -> list[PaymentListItem]:
    """All payments, newest first, with the payer and a live source description."""
    payments = await repository.list_all(db)
    users = await UserRepository.get_by_ids(db, {p.user_id for p in payments})
    details = await describe_sources(db, payments)

    items = []
    for payment in payments:
        item = PaymentListItem.model_validate(payment)
        user = users.get(payment.user_id)
        if user:
            item.user = PaymentUserSummary.model_validate(user)
        item.source_details = details.get((payment.source_type, payment.source_id))
        items.append(item)
    return items


async def delete_payment(db: AsyncSession, payment_id: UUID, admin: CurrentUser) -> MessageResponse:
    payment = await repository.get_by_id(db, payment_id)
    if not payment:
        raise PaymentNotFoundError(payment_id)

    await repository.delete_payment(db, payment)
    logger.info(f"Payment {payment_id} deleted by admin {admin.id}")
    return MessageResponse(message="Payment record removed")


async def get_stats(db: AsyncSession) -> PaymentStats:
    counts = await repository.count_by_status(db)
    return PaymentStats(
        pending=counts.get(PaymentStatus.PENDING, 0),
        verified=counts.get(PaymentStatus.VERIFIED, 0),
        rejected=counts.get(PaymentStatus.REJECTED, 0),
        total_income=await repository.sum_verified_income(db),
        approved_admissions=await repository.count_approved_admissions(db),
    )


# ============================================
# Payment channel numbers
# ============================================


async def list_payment_methods(db: AsyncSession) -> list[PaymentMethodResponse]:
    methods = await repository.list_active_methods(db)
    return [PaymentMethodResponse.model_validate(method) for method in methods]


async def add_payment_method(db: AsyncSession, data: PaymentMethodCreate) -> PaymentMethodResponse:
    method = await repository.create_method(db, data)
    logger.info(f"Payment method added: {method.method_name.value} {method.number}")
    return PaymentMethodResponse.model_validate(method)


async def delete_payment_method(db: AsyncSession, method_id: UUID) -> MessageResponse:
    if not await repository.delete_method(db, method_id):
        raise PaymentMethodNotFoundError()
    return MessageResponse(message="Payment method removed")


# ============================================
# Purchases & receipts
# ============================================


async def list_my_downloads(db: AsyncSession, user_id: UUID) -> list[DownloadItem]:
    rows = await repository.list_verified_product_purchases(db, user_id)
    return [
        DownloadItem(
            payment_id=payment.id,
            product_id=product.id,
            title=product.title,
            type=product.type.value,
            thumbnail_url=product.thumbnail_url,
            file_url=product.file_url,
            receipt_no=payment.receipt_no,
            purchased_at=payment.verified_at,
        )
        for payment, product in rows
    ]


async def get_product_download(
    db: AsyncSession,
    product_id: UUID,
    current_user: CurrentUser,
) -> str:
    """
    Return the product file URL for admins and verified buyers.

    Raises:
        ProductNotFoundError: If the product does not exist
        PurchaseNotVerifiedError: If the caller has no verified purchase
    """
    product = await catalog_repository.get_product(db, product_id)
    if not product:
        raise ProductNotFoundError()

    if current_user.is_admin:
        return product.file_url

    if not await repository.has_verified_purchase(db, current_user.id, product_id):
        logger.warning(f"Download denied: user {current_user.id} has not bought {product_id}")
        raise PurchaseNotVerifiedError()

    return product.file_url


async def _describe_item(
    db: AsyncSession,
    payment: Payment | PaymentResponse,
) -> ReceiptItemDetails:
    if payment.source_type == PaymentSourceType.ADMISSION:
        row = await admissions_repository.get_with_course(db, payment.source_id)
        if row:
            admission, course = row
            return ReceiptItemDetails(
                item_name=course.title, type="Course Admission", roll_no=admission.roll_no
            )
        return ReceiptItemDetails(item_name="Course Admission", type="Course Admission")

    if payment.source_type == PaymentSourceType.COURSE:
        course = await catalog_repository.get_course(db, payment.source_id)
        return ReceiptItemDetails(item_name=course.title if course else "Course", type="Course")

    product = await catalog_repository.get_product(db, payment.source_id)
    return ReceiptItemDetails(
        item_name=product.title if product else "Digital Product", type="Product"
    )


async def get_receipt(
    db: AsyncSession,
    payment_id: UUID,
    current_user: CurrentUser,
) -> ReceiptResponse:
    """
    Receipt data for a verified payment, for its owner or an admin.

    Raises:
        ReceiptNotFoundError: If the payment is missing or not verified
        PaymentAccessDeniedError: If the caller is neither owner nor admin
    """
    payment = await repository.get_by_id(db, payment_id)
    if not payment:
        raise ReceiptNotFoundError()

    if payment.user_id != current_user.id and not current_user.is_admin:
        raise PaymentAccessDeniedError()

    if payment.status != PaymentStatus.VERIFIED or not payment.receipt_no:
        raise ReceiptNotFoundError()

    user = await UserRepository.get_by_id(db, payment.user_id)
    if user:
        student = ReceiptStudentDetails.model_validate(user)
    else:
        student = ReceiptStudentDetails(name="Unknown", email="")

    return ReceiptResponse(
        receipt_no=payment.receipt_no,
        date=payment.verified_at,
        student_details=student,
        payment_details=ReceiptPaymentDetails(
            method=payment.payment_method,
            trx_id=payment.transaction_id,
            amount=payment.amount,
            fee=payment.transaction_fee,
            total=payment.total_amount,
        ),
        item_details=await _describe_item(db, payment),
    )
