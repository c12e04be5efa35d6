"""
Admissions Router

Endpoints:
- POST /admissions - Apply for a course (authenticated)
- GET /admissions/my - The caller's admissions (authenticated)
- GET /admissions - All admissions (admin)
- GET /admissions/{id} - One admission (owner or admin)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUser, get_current_admin_user, get_current_user
from app.core.database import get_db
from app.modules.admissions import service
from app.modules.admissions.schemas import AdmissionCreate, AdmissionResponse
from app.modules.admissions.service import AdmissionServiceError

logger = logging.getLogger(__name__)

router = APIRouter()


def _handle_service_error(e: AdmissionServiceError) -> None:
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


@router.post(
    "",
    response_model=AdmissionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Apply for Admission",
    responses={
        404: {"description": "Course not found"},
        409: {"description": "Already applied for this course"},
    },
)
async def apply_for_admission(
    data: AdmissionCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> AdmissionResponse:
    """
    Submit an admission application for a course.

    The admission stays pending until its payment is verified.
    """
    try:
        return await service.apply(db, user, data)
    except AdmissionServiceError as e:
        logger.warning(f"Admission rejected for user {user.id}: {e.message}")
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Unexpected error submitting admission: {e}")
        raise _internal_error() from e


@router.get("/my", response_model=list[AdmissionResponse], summary="My Admissions")
async def get_my_admissions(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> list[AdmissionResponse]:
    return await service.list_my_admissions(db, user.id)


@router.get("", response_model=list[AdmissionResponse], summary="List All Admissions")
async def list_admissions(
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> list[AdmissionResponse]:
    admissions = await service.list_all_admissions(db)
    logger.info(f"Admin {admin.id} listed {len(admissions)} admissions")
    return admissions


@router.get(
    "/{admission_id}",
    response_model=AdmissionResponse,
    summary="Get Admission",
    responses={
        403: {"description": "Not the owner and not an admin"},
        404: {"description": "Admission not found"},
    },
)
async def get_admission(
    admission_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> AdmissionResponse:
    try:
        return await service.get_admission(db, admission_id, user)
    except AdmissionServiceError as e:
        _handle_service_error(e)
