"""
Catalog Router

Endpoints:
- GET /products/{id}/download - File URL for admins and verified buyers
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUser, get_current_user
from app.core.database import get_db
from app.modules.payments import service as payments_service
from app.modules.payments.errors import PaymentServiceError
from app.modules.payments.schemas import ProductDownloadResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/{product_id}/download",
    response_model=ProductDownloadResponse,
    summary="Download Product",
    responses={
        403: {"description": "Purchase not verified or found"},
        404: {"description": "Product not found"},
    },
)
async def download_product(
    product_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> ProductDownloadResponse:
    try:
        file_url = await payments_service.get_product_download(db, product_id, user)
    except PaymentServiceError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail={"error": e.error_code, "message": e.message},
        ) from e

    return ProductDownloadResponse(file_url=file_url)
