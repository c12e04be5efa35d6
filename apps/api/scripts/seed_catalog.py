"""
Seed Catalog

Adds the center's default courses (skipping titles that already exist) and
replaces the published payment numbers. The number can be overridden with
PAYMENT_NUMBER.

Usage:
    cd apps/api
    python scripts/seed_catalog.py
"""

import asyncio
import os
import sys
from pathlib import Path

# Add the src directory to the path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sqlalchemy import delete, select

from app.core.database import async_session_maker, close_db
from app.modules.catalog.models import Course, CourseType
from app.modules.payments.models import PaymentMethod, PaymentMethodName

COURSES = [
    {
        "title": "Office Application (Govt)",
        "title_bn": "অফিস অ্যাপ্লিকেশন (সরকারি)",
        "description": (
            "BTEB Certified Government Course. "
            "Includes MS Word, Excel, PowerPoint, Access & Internet."
        ),
        "description_bn": "কারিগরি শিক্ষা বোর্ড অনুমোদিত ৬ মাস মেয়াদী সরকারি কোর্স।",
        "type": CourseType.GOVT,
        "fee": 4500,
        "duration": "6 Months",
    },
    {
        "title": "Office Application (Private)",
        "title_bn": "অফিস অ্যাপ্লিকেশন (প্রাইভেট)",
        "description": (
            "Short course for quick learning. Includes basic office tools for job preparation."
        ),
        "description_bn": "চাকরির প্রস্তুতির জন্য ৩ মাস মেয়াদী প্রাইভেট শর্ট কোর্স।",
        "type": CourseType.PRIVATE,
        "fee": 3000,
        "duration": "3 Months",
    },
    {
        "title": "AutoCAD 2D & 3D (Govt)",
        "title_bn": "অটোক্যাড 2D ও 3D (সরকারি)",
        "description": (
            "BTEB Certified Government Course for Civil/Architecture/Mechanical designs."
        ),
        "description_bn": "কারিগরি শিক্ষা বোর্ড অনুমোদিত ৬ মাস মেয়াদী প্রফেশনাল অটোক্যাড কোর্স।",
        "type": CourseType.GOVT,
        "fee": 5000,
        "duration": "6 Months",
    },
    {
        "title": "AutoCAD 2D & 3D (Private)",
        "title_bn": "অটোক্যাড 2D ও 3D (প্রাইভেট)",
        "description": "Intensive private course for learning architectural drafting quickly.",
        "description_bn": "৩ মাস মেয়াদী প্রাইভেট অটোক্যাড কোর্স।",
        "type": CourseType.PRIVATE,
        "fee": 3500,
        "duration": "3 Months",
    },
    {
        "title": "Graphics Design & Freelancing",
        "title_bn": "গ্রাফিক্স ডিজাইন ও ফ্রিল্যান্সিং",
        "description": (
            "Professional Graphics Design course with Freelancing guidelines. "
            "Coaching Center Certified."
        ),
        "description_bn": "কোচিং সেন্টার প্রদত্ত সার্টিফিকেট সহ ৬ মাস মেয়াদী কোর্স।",
        "type": CourseType.PRIVATE,
        "fee": 6000,
        "duration": "6 Months",
    },
]

PAYMENT_NUMBER = os.environ.get("PAYMENT_NUMBER", "01956181848")

PAYMENT_METHODS = [
    PaymentMethodName.BKASH,
    PaymentMethodName.NAGAD,
    PaymentMethodName.ROCKET,
]


async def seed_catalog() -> None:
    """Replace payment numbers and add missing courses by title."""
    async with async_session_maker() as db:
        await db.execute(delete(PaymentMethod))
        db.add_all(
            PaymentMethod(method_name=name, number=PAYMENT_NUMBER, account_type="Personal")
            for name in PAYMENT_METHODS
        )

        existing = set((await db.execute(select(Course.title))).scalars().all())
        new_courses = [Course(**data) for data in COURSES if data["title"] not in existing]
        db.add_all(new_courses)

        await db.commit()

    print(f"Added {len(new_courses)} courses")
    print(f"Published {len(PAYMENT_METHODS)} payment numbers")

    await close_db()


if __name__ == "__main__":
    asyncio.run(seed_catalog())
