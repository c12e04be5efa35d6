"""
Catalog Repository

Read access to courses and products.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Course, Product


async def get_course(db: AsyncSession, id: UUID) -> Course | None:
    return await db.get(Course, id)


async def get_product(db: AsyncSession, id: UUID) -> Product | None:
    return await db.get(Product, id)


async def get_courses_by_ids(db: AsyncSession, ids: set[UUID]) -> dict[UUID, Course]:
    if not ids:
        return {}
    result = await db.execute(select(Course).where(Course.id.in_(ids)))
    return {course.id: course for course in result.scalars().all()}


async def get_products_by_ids(db: AsyncSession, ids: set[UUID]) -> dict[UUID, Product]:
    if not ids:
        return {}
    result = await db.execute(select(Product).where(Product.id.in_(ids)))
    return {product.id: product for product in result.scalars().all()}
