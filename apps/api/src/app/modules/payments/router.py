"""
Payments Router

Student-facing and public payment endpoints.

Endpoints:
- POST /payments - Submit a payment for review (authenticated)
- GET /payments/methods - Active payment channel numbers (public)
- GET /payments/my/downloads - Verified product purchases (authenticated)
- GET /payments/{id}/receipt - Receipt data (owner or admin)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUser, get_current_user
from app.core.database import get_db
from app.modules.payments import service
from app.modules.payments.errors import DuplicatePaymentError, PaymentServiceError
from app.modules.payments.schemas import (
    DownloadItem,
    PaymentCreate,
    PaymentMethodResponse,
    PaymentResponse,
    ReceiptResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _handle_service_error(e: PaymentServiceError) -> None:
    """Convert service errors to HTTPExceptions."""
    raise HTTPException(
        status_code=e.status_code,
        detail={
            "error": e.error_code,
            "message": e.message,
        },
    ) from e


@router.post(
    "",
    response_model=PaymentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Payment",
    description="""
Submit a payment for admin verification.

The payment settles exactly one source: an admission (default), a course or a
product. `admissionId` is accepted in place of `sourceId` for admission fees.

**Fees:** 30 BDT, or 20 BDT for offline admission payments.

**Duplicate Prevention:** only one pending or verified payment per source per
student. Submit again after a rejection.
""",
    responses={
        400: {
            "description": "Invalid method, missing source, or unsupported source type",
            "content": {
                "application/json": {
                    "example": {
                        "detail": {
                            "error": "INVALID_INPUT",
                            "message": "Invalid payment method selection",
                        }
                    }
                }
            },
        },
        404: {"description": "Source not found"},
        409: {
            "description": "Active payment already exists",
            "content": {
                "application/json": {
                    "example": {
                        "detail": {
                            "error": "DUPLICATE_PAYMENT",
                            "message": "Payment already submitted or verified",
                        }
                    }
                }
            },
        },
    },
)
async def submit_payment(
    data: PaymentCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> PaymentResponse:
    try:
        return await service.submit_payment(db, user, data)
    except DuplicatePaymentError as e:
        logger.warning(f"Duplicate payment rejected for user {user.id}")
        _handle_service_error(e)
    except PaymentServiceError as e:
        logger.info(f"Payment submission rejected for user {user.id}: {e.message}")
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Unexpected error submitting payment: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "INTERNAL_ERROR",
                "message": "An unexpected error occurred. Please try again later.",
            },
        ) from e


@router.get(
    "/methods",
    response_model=list[PaymentMethodResponse],
    summary="List Payment Numbers",
)
async def list_payment_methods(
    db: AsyncSession = Depends(get_db),
) -> list[PaymentMethodResponse]:
    """Active bKash/Nagad/Rocket/Bank numbers students send money to."""
    return await service.list_payment_methods(db)


@router.get(
    "/my/downloads",
    response_model=list[DownloadItem],
    summary="My Downloads",
)
async def list_my_downloads(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> list[DownloadItem]:
    """Products the caller has paid for and an admin has verified."""
    return await service.list_my_downloads(db, user.id)


@router.get(
    "/{payment_id}/receipt",
    response_model=ReceiptResponse,
    summary="Get Receipt",
    responses={
        403: {"description": "Not the owner and not an admin"},
        404: {"description": "Payment missing or not yet verified"},
    },
)
async def get_receipt(
    payment_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> ReceiptResponse:
    try:
        return await service.get_receipt(db, payment_id, user)
    except PaymentServiceError as e:
        _handle_service_error(e)
