"""
Payments Admin Router

Endpoints for admins to review payments and manage payment numbers.
All endpoints require an admin token.

Endpoints:
- GET /payments - List payments with payer and source details
- GET /payments/stats - Ledger statistics
- PUT /payments/{id}/verify - Verify, issue receipt, approve admission
- PUT /payments/{id}/reject - Reject
- DELETE /payments/{id} - Remove a payment record
- POST /payments/methods - Add a payment number
- DELETE /payments/methods/{id} - Remove a payment number

Verify, reject and delete are rate limited per admin.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUser, get_current_admin_user
from app.core.database import get_db
from app.core.rate_limit import RateLimitExceeded, check_rate_limit
from app.modules.payments import service
from app.modules.payments.errors import (
    PaymentAlreadyProcessedError,
    PaymentNotFoundError,
    PaymentServiceError,
)
from app.modules.payments.schemas import (
    MessageResponse,
    PaymentListItem,
    PaymentMethodCreate,
    PaymentMethodResponse,
    PaymentStats,
    VerifyPaymentResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================
# Rate Limiting Configuration
# ============================================

RATE_LIMIT_VERIFY = (30, 60)  # 30 verifications per minute
RATE_LIMIT_REJECT = (30, 60)
RATE_LIMIT_DELETE = (10, 60)


async def _check_admin_rate_limit(
    admin: CurrentUser,
    action: str,
    limit: int,
    window_seconds: int,
) -> None:
    """
    Check rate limit for an admin action.

    Raises:
        RateLimitExceeded: If rate limit is exceeded
    """
    key = f"admin:{action}:{admin.id}"
    allowed = await check_rate_limit(key, limit, window_seconds)

    if not allowed:
        logger.warning(
            f"Rate limit exceeded for admin {admin.id} on action '{action}': "
            f"{limit}/{window_seconds}s"
        )
        raise RateLimitExceeded(limit, window_seconds)


def _handle_service_error(e: PaymentServiceError) -> None:
    """Convert service errors to HTTPExceptions."""
    raise HTTPException(
        status_code=e.status_code,
        detail={
            "error": e.error_code,
            "message": e.message,
        },
    ) from e


def _internal_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )


# ============================================
# Listing & stats
# ============================================


@router.get(
    "",
    response_model=list[PaymentListItem],
    summary="List Payments",
    description="""
All payments, newest first.

`amount`, `transactionFee` and `totalAmount` are the values frozen at
submission. `sourceDetails` is read from the catalog at request time and
reflects the current course or product.
""",
)
async def list_payments(
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> list[PaymentListItem]:
    try:
        payments = await service.list_payments(db)
        logger.info(f"Admin {admin.id} listed {len(payments)} payments")
        return payments
    except Exception as e:
        logger.exception(f"Error listing payments: {e}")
        raise _internal_error() from e


@router.get("/stats", response_model=PaymentStats, summary="Payment Statistics")
async def get_stats(
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> PaymentStats:
    return await service.get_stats(db)


# ============================================
# Decisions
# ============================================


@router.put(
    "/{payment_id}/verify",
    response_model=VerifyPaymentResponse,
    summary="Verify Payment",
    description="""
Verify a pending payment.

1. Issues the next receipt number for the year (`RCP-<year>-<1000+n>`)
2. For admission payments, approves the admission and issues its roll number
3. Emails the receipt to the student

Steps 2 and 3 run after the verification is committed. Their failures are
logged and do not fail the request; admission approval is retried by the
reconciliation job.
""",
    responses={
        404: {"description": "Payment not found"},
        409: {"description": "Payment already verified or rejected"},
        429: {"description": "Rate limit exceeded"},
    },
)
async def verify_payment(
    payment_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> VerifyPaymentResponse:
    await _check_admin_rate_limit(admin, "verify_payment", *RATE_LIMIT_VERIFY)

    try:
        return await service.verify_payment(db, payment_id, admin)
    except PaymentNotFoundError as e:
        logger.warning(f"Admin {admin.id} tried to verify missing payment {payment_id}")
        _handle_service_error(e)
    except PaymentAlreadyProcessedError as e:
        logger.info(f"Verify refused for payment {payment_id}: {e.message}")
        _handle_service_error(e)
    except PaymentServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Error verifying payment {payment_id}: {e}")
        raise _internal_error() from e


@router.put(
    "/{payment_id}/reject",
    response_model=MessageResponse,
    summary="Reject Payment",
    responses={
        404: {"description": "Payment not found"},
        409: {"description": "Payment already verified"},
        429: {"description": "Rate limit exceeded"},
    },
)
async def reject_payment(
    payment_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> MessageResponse:
    await _check_admin_rate_limit(admin, "reject_payment", *RATE_LIMIT_REJECT)

    try:
        return await service.reject_payment(db, payment_id, admin)
    except PaymentServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Error rejecting payment {payment_id}: {e}")
        raise _internal_error() from e


@router.delete(
    "/{payment_id}",
    response_model=MessageResponse,
    summary="Delete Payment",
    responses={404: {"description": "Payment not found"}},
)
async def delete_payment(
    payment_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> MessageResponse:
    await _check_admin_rate_limit(admin, "delete_payment", *RATE_LIMIT_DELETE)

    try:
        return await service.delete_payment(db, payment_id, admin)
    except PaymentServiceError as e:
        _handle_service_error(e)


# ============================================
# Payment numbers
# ============================================


@router.post(
    "/methods",
    response_model=PaymentMethodResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add Payment Number",
)
async def add_payment_method(
    data: PaymentMethodCreate,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> PaymentMethodResponse:
    method = await service.add_payment_method(db, data)
    logger.info(f"Admin {admin.id} added payment method {method.id}")
    return method


@router.delete(
    "/methods/{method_id}",
    response_model=MessageResponse,
    summary="Remove Payment Number",
    responses={404: {"description": "Method not found"}},
)
async def delete_payment_method(
    method_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> MessageResponse:
    try:
        return await service.delete_payment_method(db, method_id)
    except PaymentServiceError as e:
        _handle_service_error(e)
