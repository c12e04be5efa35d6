"""
Admissions Repository

Database operations for admission applications.
"""

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.catalog.models import Course
from app.modules.shared.status import apply_transition
from app.modules.users.models import User

from .models import Admission, AdmissionStatus
from .schemas import AdmissionCreate


async def create(db: AsyncSession, user_id: UUID, data: AdmissionCreate) -> Admission:
    """
    Create a pending admission.

    Raises:
        IntegrityError: If the user already applied to this course
    """
    admission = Admission(
        user_id=user_id,
        course_id=data.course_id,
        session=data.session,
        father_name=data.father_name,
        mother_name=data.mother_name,
        date_of_birth=data.date_of_birth,
        gender=data.gender,
        religion=data.religion,
        marital_status=data.marital_status or "Single",
        nid_or_birth_cert=data.nid_or_birth_cert,
        present_address=data.present_address,
        guardian_phone=data.guardian_phone,
        photo_url=data.photo_url,
        signature_url=data.signature_url,
        status=AdmissionStatus.PENDING,
    )

    db.add(admission)
    await db.commit()
    await db.refresh(admission)

    return admission


async def get_by_id(db: AsyncSession, id: UUID) -> Admission | None:
    return await db.get(Admission, id)


async def get_by_ids(db: AsyncSession, ids: set[UUID]) -> dict[UUID, Admission]:
    if not ids:
        return {}
    result = await db.execute(select(Admission).where(Admission.id.in_(ids)))
    return {admission.id: admission for admission in result.scalars().all()}


async def get_by_id_for_update(db: AsyncSession, id: UUID) -> Admission | None:
    """Load an admission and lock its row until the transaction ends."""
    result = await db.execute(
        select(Admission)
        .where(Admission.id == id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_with_course(db: AsyncSession, id: UUID) -> tuple[Admission, Course] | None:
    result = await db.execute(
        select(Admission, Course).join(Course, Admission.course_id == Course.id).where(
            Admission.id == id
        )
    )
    return result.tuples().one_or_none()


async def get_by_user_and_course(
    db: AsyncSession, user_id: UUID, course_id: UUID
) -> Admission | None:
    result = await db.execute(
        select(Admission).where(
            Admission.user_id == user_id,
            Admission.course_id == course_id,
        )
    )
    return result.scalar_one_or_none()


async def list_by_user(db: AsyncSession, user_id: UUID) -> list[tuple[Admission, Course]]:
    """A user's admissions with their course, newest first."""
    result = await db.execute(
        select(Admission, Course)
        .join(Course, Admission.course_id == Course.id)
        .where(Admission.user_id == user_id)
        .order_by(Admission.created_at.desc())
    )
    return list(result.tuples().all())


async def list_all(db: AsyncSession) -> list[tuple[Admission, Course, User]]:
    """Every admission with its course and student, newest first."""
    result = await db.execute(
        select(Admission, Course, User)
        .join(Course, Admission.course_id == Course.id)
        .join(User, Admission.user_id == User.id)
        .order_by(Admission.created_at.desc())
    )
    return list(result.tuples().all())


async def set_payment_id(db: AsyncSession, id: UUID, payment_id: UUID) -> None:
    await db.execute(update(Admission).where(Admission.id == id).values(payment_id=payment_id))
    await db.commit()


async def clear_payment_id(db: AsyncSession, payment_id: UUID) -> None:
    """Drop back-references to a payment. Does not commit."""
    await db.execute(
        update(Admission).where(Admission.payment_id == payment_id).values(payment_id=None)
    )


# Approval and rejection are final
VALID_STATUS_TRANSITIONS: dict[AdmissionStatus, set[AdmissionStatus]] = {
    AdmissionStatus.PENDING: {
        AdmissionStatus.APPROVED,  # Payment verified
        AdmissionStatus.REJECTED,
    },
    AdmissionStatus.APPROVED: set(),
    AdmissionStatus.REJECTED: set(),
}


def apply_status(admission: Admission, status: AdmissionStatus, **kwargs) -> Admission:
    """
    Move an admission to ``status`` and set extra fields, without committing.

    Raises:
        InvalidStatusTransitionError: If the state machine forbids the move
    """
    return apply_transition(admission, status, VALID_STATUS_TRANSITIONS, **kwargs)
