"""
Sequence Counters

Collision-free human-facing numbers (receipt numbers, roll numbers).

Each scope is one row in ``sequence_counters``. ``next_value`` bumps it with a
single ``INSERT ... ON CONFLICT DO UPDATE ... RETURNING`` so two transactions
can never read the same value, and the row lock is held until the caller
commits.

Scopes:
- ``receipt:<year>``: one receipt series per calendar year
- ``roll:<course_id>:<year>``: one roll series per course per year
"""

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import Integer, String
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base

RECEIPT_PREFIX = "RCP"
RECEIPT_BASE = 1000


class SequenceCounter(Base):
    """Last value issued for a scope."""

    __tablename__ = "sequence_counters"

    scope: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


def receipt_scope(year: int) -> str:
    return f"receipt:{year}"


def roll_scope(course_id: UUID, year: int) -> str:
    return f"roll:{course_id}:{year}"


def current_year() -> int:
    return datetime.now(UTC).year


async def next_value(db: AsyncSession, scope: str) -> int:
    """
    Atomically increment the counter for ``scope`` and return the new value.

    The first call for a scope returns 1. Runs inside the caller's transaction;
    nothing is committed here.
    """
    stmt = (
        pg_insert(SequenceCounter)
        .values(scope=scope, value=1)
        .on_conflict_do_update(
            index_elements=[SequenceCounter.scope],
            set_={"value": SequenceCounter.value + 1},
        )
        .returning(SequenceCounter.value)
    )
    result = await db.execute(stmt)
    return result.scalar_one()


def format_receipt_no(year: int, n: int) -> str:
    """``RCP-2025-1001`` for the first receipt of 2025."""
    return f"{RECEIPT_PREFIX}-{year}-{RECEIPT_BASE + n}"


def format_roll_no(year: int, serial: int) -> str:
    """``251001`` for the first roll of 2025: two-digit year, a literal 1, three-digit serial."""
    return f"{year % 100:02d}1{serial:03d}"


async def next_receipt_no(db: AsyncSession, year: int | None = None) -> str:
    year = year or current_year()
    return format_receipt_no(year, await next_value(db, receipt_scope(year)))


async def next_roll_no(db: AsyncSession, course_id: UUID, year: int | None = None) -> str:
    year = year or current_year()
    return format_roll_no(year, await next_value(db, roll_scope(course_id, year)))
