"""
Payment Sources

Resolves what a payment is for. One resolver per source type, each returning
the price to charge and the name shown on receipts and emails:

- admission: price of the admission's course; only the applicant's own
  pending admission can be paid for
- course: course fee
- product: product price; inactive products cannot be bought

``describe_sources`` builds the live ``sourceDetails`` shown in the admin
listing. It reads current catalog data, unlike the frozen payment amounts.
"""

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.admissions import repository as admissions_repository
from app.modules.admissions.models import AdmissionStatus
from app.modules.catalog import repository as catalog_repository
from app.modules.payments.errors import (
    AdmissionNotPayableError,
    SourceNotFoundError,
    UnsupportedSourceError,
)
from app.modules.payments.models import Payment, PaymentSourceType
from app.modules.payments.schemas import SourceDetails


@dataclass(frozen=True)
class ResolvedSource:
    amount: int
    display_name: str


Resolver = Callable[[AsyncSession, UUID, UUID], Awaitable[ResolvedSource | None]]


async def _resolve_admission(
    db: AsyncSession, source_id: UUID, user_id: UUID
) -> ResolvedSource | None:
    row = await admissions_repository.get_with_course(db, source_id)
    if row is None:
        return None
    admission, course = row
    # Someone else's admission is reported as missing
    if admission.user_id != user_id:
        return None
    if admission.status != AdmissionStatus.PENDING:
        raise AdmissionNotPayableError(admission.status.value)
    return ResolvedSource(amount=course.fee, display_name=course.title)


async def _resolve_course(
    db: AsyncSession, source_id: UUID, _user_id: UUID
) -> ResolvedSource | None:
    course = await catalog_repository.get_course(db, source_id)
    if course is None:
        return None
    return ResolvedSource(amount=course.fee, display_name=course.title)


async def _resolve_product(
    db: AsyncSession, source_id: UUID, _user_id: UUID
) -> ResolvedSource | None:
    product = await catalog_repository.get_product(db, source_id)
    if product is None or not product.is_active:
        return None
    return ResolvedSource(amount=product.price, display_name=product.title)


RESOLVERS: dict[PaymentSourceType, Resolver] = {
    PaymentSourceType.ADMISSION: _resolve_admission,
    PaymentSourceType.COURSE: _resolve_course,
    PaymentSourceType.PRODUCT: _resolve_product,
}


def parse_source_type(value: str | None) -> PaymentSourceType:
    """
    Normalize a submitted source type. Missing means admission.

    Raises:
        UnsupportedSourceError: For any other value
    """
    if not value:
        return PaymentSourceType.ADMISSION
    try:
        return PaymentSourceType(value.strip().lower())
    except ValueError as e:
        raise UnsupportedSourceError(value) from e


async def resolve_source(
    db: AsyncSession,
    source_type: PaymentSourceType,
    source_id: UUID,
    user_id: UUID,
) -> ResolvedSource:
    """
    Look up the price and display name of a payment source for ``user_id``.

    Raises:
        UnsupportedSourceError: If no resolver handles ``source_type``
        SourceNotFoundError: If the entity is missing, an inactive product, or
            an admission belonging to another user
        AdmissionNotPayableError: If the admission is no longer pending
    """
    resolver = RESOLVERS.get(source_type)
    if resolver is None:
        raise UnsupportedSourceError(str(source_type))

    resolved = await resolver(db, source_id, user_id)
    if resolved is None:
        raise SourceNotFoundError(source_type.value)
    return resolved


async def describe_sources(
    db: AsyncSession,
    payments: Iterable[Payment],
) -> dict[tuple[PaymentSourceType, UUID], SourceDetails]:
    """
    Current descriptions of the sources behind ``payments``, keyed by
    ``(source_type, source_id)``. Sources that no longer exist are omitted.
    """
    ids: dict[PaymentSourceType, set[UUID]] = {source_type: set() for source_type in RESOLVERS}
    for payment in payments:
        ids[payment.source_type].add(payment.source_id)

    admissions = await admissions_repository.get_by_ids(db, ids[PaymentSourceType.ADMISSION])
    course_ids = ids[PaymentSourceType.COURSE] | {a.course_id for a in admissions.values()}
    courses = await catalog_repository.get_courses_by_ids(db, course_ids)
    products = await catalog_repository.get_products_by_ids(db, ids[PaymentSourceType.PRODUCT])

    details: dict[tuple[PaymentSourceType, UUID], SourceDetails] = {}

    for admission_id, admission in admissions.items():
        course = courses.get(admission.course_id)
        if course:
            details[(PaymentSourceType.ADMISSION, admission_id)] = SourceDetails(
                title=course.title, fee=course.fee, duration=course.duration
            )

    for course_id in ids[PaymentSourceType.COURSE]:
        course = courses.get(course_id)
        if course:
            details[(PaymentSourceType.COURSE, course_id)] = SourceDetails(
                title=course.title, fee=course.fee, duration=course.duration
            )

    for product_id, product in products.items():
        details[(PaymentSourceType.PRODUCT, product_id)] = SourceDetails(
            title=product.title, price=product.price, type=product.type.value
        )

    return details
