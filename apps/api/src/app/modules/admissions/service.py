"""
Admissions Service Layer

Business logic for admission applications:

1. Apply: validate the course, guard against a second application to the
   same course, create the pending admission, then (best-effort) sync the
   student's avatar and notify admins.
2. Read: the caller's own admissions, all admissions for admins, and a
   single admission for its owner or an admin.
3. Approve for payment: called once a payment for the admission is verified.
   Approves the admission and issues its roll number.
"""

import asyncio
import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUser
from app.core.email import send_admission_submitted
from app.modules.admissions import repository
from app.modules.admissions.models import Admission, AdmissionStatus
from app.modules.admissions.schemas import (
    AdmissionCreate,
    AdmissionResponse,
    CourseSummary,
    StudentSummary,
)
from app.modules.catalog import repository as catalog_repository
from app.modules.catalog.models import Course
from app.modules.shared.sequences import next_roll_no
from app.modules.shared.status import InvalidStatusTransitionError
from app.modules.users.models import User
from app.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)


class AdmissionServiceError(Exception):
    """Base exception for admission service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class AdmissionNotFoundError(AdmissionServiceError):
    def __init__(self, admission_id: UUID | None = None):
        message = (
            f"Admission {admission_id} not found" if admission_id else "Admission record not found"
        )
        super().__init__(message=message, error_code="ADMISSION_NOT_FOUND", status_code=404)


class CourseNotFoundError(AdmissionServiceError):
    def __init__(self):
        super().__init__(message="Course not found", error_code="COURSE_NOT_FOUND", status_code=404)


class DuplicateAdmissionError(AdmissionServiceError):
    def __init__(self):
        super().__init__(
            message="You have already applied for this course",
            error_code="DUPLICATE_ADMISSION",
            status_code=409,
        )


class AdmissionAccessDeniedError(AdmissionServiceError):
    def __init__(self):
        super().__init__(
            message="Not authorized to view this admission",
            error_code="ADMISSION_ACCESS_DENIED",
            status_code=403,
        )


class AdmissionStateError(AdmissionServiceError):
    """Raised when an admission cannot move to the requested status."""

    def __init__(self, message: str):
        super().__init__(message=message, error_code="INVALID_ADMISSION_STATE", status_code=409)


def to_response(
    admission: Admission,
    course: Course | None = None,
    user: User | None = None,
) -> AdmissionResponse:
    response = AdmissionResponse.model_validate(admission)
    if course is not None:
        response.course = CourseSummary.model_validate(course)
    if user is not None:
        response.user = StudentSummary.model_validate(user)
    return response


async def apply(
    db: AsyncSession,
    current_user: CurrentUser,
    data: AdmissionCreate,
) -> AdmissionResponse:
    """
    Submit an admission application.

    Raises:
        CourseNotFoundError: If the course does not exist
        DuplicateAdmissionError: If the user already applied to this course
    """
    course = await catalog_repository.get_course(db, data.course_id)
    if not course:
        raise CourseNotFoundError()

    existing = await repository.get_by_user_and_course(db, current_user.id, data.course_id)
    if existing:
        logger.info(
            f"Duplicate admission rejected: user={current_user.id}, course={data.course_id}"
        )
        raise DuplicateAdmissionError()

    try:
        admission = await repository.create(db, current_user.id, data)
    except IntegrityError as e:
        # Lost the race against a concurrent application
        await db.rollback()
        raise DuplicateAdmissionError() from e

    logger.info(
        f"Admission submitted: id={admission.id}, user={current_user.id}, course={course.id}"
    )

    # Snapshot before best-effort steps; a rollback there expires loaded rows
    response = to_response(admission, course=course)

    student = await UserRepository.get_by_id(db, current_user.id)
    if student:
        student_name, student_id = student.name, student.student_id
    else:
        student_name, student_id = current_user.name or current_user.email, None

    await _sync_avatar(db, current_user.id, data.photo_url)
    await _notify_admins(db, response, student_name, student_id)

    return response


async def _sync_avatar(db: AsyncSession, user_id: UUID, photo_url: str) -> None:
    """Show the admission photo as the profile avatar. Failures are logged."""
    try:
        await UserRepository.update_avatar(db, user_id, photo_url)
    except Exception as e:
        logger.error(f"Failed to sync avatar for user {user_id}: {e}")
        await db.rollback()


async def _notify_admins(
    db: AsyncSession,
    admission: AdmissionResponse,
    student_name: str,
    student_id: str | None,
) -> None:
    try:
        admins = await UserRepository.list_admins(db)
        if not admins:
            return

        await asyncio.gather(
            *(
                send_admission_submitted(
                    to_email=admin.email,
                    student_name=student_name,
                    student_id=student_id,
                    course_title=admission.course.title if admission.course else "",
                    session=admission.session,
                    guardian_phone=admission.guardian_phone,
                )
                for admin in admins
            )
        )
    except Exception as e:
        logger.error(f"Failed to send admin admission notifications: {e}")


async def list_my_admissions(db: AsyncSession, user_id: UUID) -> list[AdmissionResponse]:
    rows = await repository.list_by_user(db, user_id)
    return [to_response(admission, course=course) for admission, course in rows]


async def list_all_admissions(db: AsyncSession) -> list[AdmissionResponse]:
    rows = await repository.list_all(db)
    return [to_response(admission, course=course, user=user) for admission, course, user in rows]


async def get_admission(
    db: AsyncSession,
    admission_id: UUID,
    current_user: CurrentUser,
) -> AdmissionResponse:
    """
    Get one admission for its owner or an admin.

    Raises:
        AdmissionNotFoundError: If the admission does not exist
        AdmissionAccessDeniedError: If the caller is neither owner nor admin
    """
    row = await repository.get_with_course(db, admission_id)
    if not row:
        raise AdmissionNotFoundError()

    admission, course = row
    if admission.user_id != current_user.id and not current_user.is_admin:
        logger.warning(f"User {current_user.id} denied access to admission {admission_id}")
        raise AdmissionAccessDeniedError()

    return to_response(admission, course=course)


async def approve_for_payment(db: AsyncSession, admission_id: UUID) -> Admission | None:
    """
    Approve an admission whose payment was verified and issue its roll number.

    Locks the admission row for the duration of the transaction. Safe to call
    more than once: an admission that already holds a roll number is returned
    unchanged.

    Returns:
        The approved admission, or None if it no longer exists

    Raises:
        AdmissionStateError: If the admission was rejected
    """
    admission = await repository.get_by_id_for_update(db, admission_id)
    if admission is None:
        await db.commit()
        logger.warning(f"Admission {admission_id} not found for approval")
        return None

    if admission.status == AdmissionStatus.APPROVED and admission.roll_no:
        # Release the row lock; commit keeps loaded attributes
        await db.commit()
        return admission

    roll_no = admission.roll_no or await next_roll_no(db, admission.course_id)

    try:
        if admission.status == AdmissionStatus.APPROVED:
            admission.roll_no = roll_no
        else:
            repository.apply_status(admission, AdmissionStatus.APPROVED, roll_no=roll_no)
    except InvalidStatusTransitionError as e:
        await db.rollback()
        raise AdmissionStateError(str(e)) from e

    await db.commit()
    await db.refresh(admission)

    logger.info(f"Admission {admission.id} approved with roll number {roll_no}")
    return admission
