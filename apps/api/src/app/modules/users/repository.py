"""
User Repository

Database operations for user accounts.
"""

import logging
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.users.models import User, UserRole

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for user database operations."""

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: UserRole = UserRole.STUDENT,
        phone: str | None = None,
        student_id: str | None = None,
        is_active: bool = True,
        is_verified: bool = False,
    ) -> User:
        """
        Create a new user record.

        The caller owns the transaction; this only flushes so the generated
        id is available.
        """
        user = User(
            name=name,
            email=email,
            password_hash=password_hash,
            role=role,
            phone=phone,
            student_id=student_id,
            is_active=is_active,
            is_verified=is_verified,
        )

        db.add(user)
        await db.flush()
        await db.refresh(user)

        logger.info(f"Created user: {user.id} - {user.email} ({user.role.value})")
        return user

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: UUID) -> User | None:
        return await db.get(User, user_id)

    @staticmethod
    async def get_by_ids(db: AsyncSession, user_ids: set[UUID]) -> dict[UUID, User]:
        """Load several users at once, keyed by id."""
        if not user_ids:
            return {}
        result = await db.execute(select(User).where(User.id.in_(user_ids)))
        return {user.id: user for user in result.scalars().all()}

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> User | None:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    @staticmethod
    async def email_exists(db: AsyncSession, email: str) -> bool:
        user = await UserRepository.get_by_email(db, email)
        return user is not None

    @staticmethod
    async def list_admins(db: AsyncSession) -> list[User]:
        """Active admin accounts, the recipients of staff notifications."""
        result = await db.execute(
            select(User).where(User.role == UserRole.ADMIN, User.is_active == True)  # noqa: E712
        )
        return list(result.scalars().all())

    @staticmethod
    async def update_avatar(db: AsyncSession, user_id: UUID, avatar: str) -> None:
        await db.execute(update(User).where(User.id == user_id).values(avatar=avatar))
        await db.commit()
