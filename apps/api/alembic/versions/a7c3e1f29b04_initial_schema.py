"""initial schema

Revision ID: a7c3e1f29b04
Revises:
Create Date: 2026-10-19 09:00:00.000000

This migration creates:
1. users, courses and products
2. payments, with the partial unique index that allows one active
   (pending or verified) payment per user and source
3. admissions, pointing back at the payment that settles them
4. payment_methods and sequence_counters

Enum columns store member names, so enum types hold uppercase labels.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "a7c3e1f29b04"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


ENUMS = {
    "user_role": ("STUDENT", "ADMIN"),
    "course_type": ("GOVT", "PRIVATE"),
    "product_type": ("PDF", "DOC", "SOFTWARE", "AI", "PSD", "TEMPLATE", "OTHER"),
    "product_logo": (
        "PHOTOSHOP",
        "ILLUSTRATOR",
        "MSWORD",
        "EXCEL",
        "POWERPOINT",
        "AUTOCAD",
        "OFFICE",
        "GRAPHICS",
        "CV",
        "TEMPLATE",
        "SOFTWARE",
        "GENERIC",
    ),
    "payment_source_type": ("ADMISSION", "COURSE", "PRODUCT"),
    "payment_channel": ("BKASH", "NAGAD", "ROCKET", "OFFLINE"),
    "payment_status": ("PENDING", "VERIFIED", "REJECTED"),
    "gender": ("MALE", "FEMALE", "OTHER"),
    "admission_status": ("PENDING", "APPROVED", "REJECTED"),
    "payment_method_name": ("BKASH", "NAGAD", "ROCKET", "BANK"),
}


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _base_columns() -> list[sa.Column]:
    """Primary key and timestamps (from BaseModel)."""
    return [
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    for name, labels in ENUMS.items():
        postgresql.ENUM(*labels, name=name).create(bind, checkfirst=True)

    op.create_table(
        "users",
        *_base_columns(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("student_id", sa.String(length=50), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("role", _enum("user_role"), nullable=False),
        sa.Column("avatar", sa.String(length=500), nullable=False, server_default=""),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_student_id", "users", ["student_id"], unique=True)
    op.create_index("ix_users_phone", "users", ["phone"], unique=True)

    op.create_table(
        "courses",
        *_base_columns(),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("title_bn", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("description_bn", sa.Text(), nullable=False, server_default=""),
        sa.Column("type", _enum("course_type"), nullable=False),
        sa.Column("fee", sa.Integer(), nullable=False),
        sa.Column("duration", sa.String(length=100), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "products",
        *_base_columns(),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("title_bn", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("type", _enum("product_type"), nullable=False),
        sa.Column("logo_key", _enum("product_logo"), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("thumbnail_url", sa.String(length=500), nullable=False),
        sa.Column("file_url", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "payments",
        *_base_columns(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("source_type", _enum("payment_source_type"), nullable=False),
        sa.Column("source_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("transaction_fee", sa.Integer(), nullable=False),
        sa.Column("total_amount", sa.Integer(), nullable=False),
        sa.Column("payment_method", _enum("payment_channel"), nullable=False),
        sa.Column("sender_mobile", sa.String(length=20), nullable=True),
        sa.Column("transaction_id", sa.String(length=100), nullable=True),
        sa.Column("status", _enum("payment_status"), nullable=False),
        sa.Column("receipt_no", sa.String(length=30), nullable=True),
        sa.Column("verified_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["verified_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("receipt_no"),
    )
    op.create_index(
        "uq_payments_active_source",
        "payments",
        ["user_id", "source_type", "source_id"],
        unique=True,
        postgresql_where=sa.text("status IN ('PENDING', 'VERIFIED')"),
    )
    op.create_index("ix_payments_status", "payments", ["status"])
    op.create_index("ix_payments_user_id", "payments", ["user_id"])
    op.create_index("ix_payments_source", "payments", ["source_type", "source_id"])

    op.create_table(
        "admissions",
        *_base_columns(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("course_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("session", sa.String(length=50), nullable=False),
        sa.Column("father_name", sa.String(length=200), nullable=False),
        sa.Column("mother_name", sa.String(length=200), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("gender", _enum("gender"), nullable=False),
        sa.Column("religion", sa.String(length=50), nullable=False),
        sa.Column("marital_status", sa.String(length=20), nullable=False),
        sa.Column("nid_or_birth_cert", sa.String(length=50), nullable=False),
        sa.Column("present_address", sa.Text(), nullable=False),
        sa.Column("guardian_phone", sa.String(length=20), nullable=False),
        sa.Column("photo_url", sa.String(length=500), nullable=False),
        sa.Column("signature_url", sa.String(length=500), nullable=False),
        sa.Column("status", _enum("admission_status"), nullable=False),
        sa.Column("roll_no", sa.String(length=20), nullable=True),
        sa.Column("payment_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["payment_id"], ["payments.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "course_id", name="uq_admissions_user_course"),
    )
    op.create_index("ix_admissions_status", "admissions", ["status"])
    op.create_index("ix_admissions_course_id", "admissions", ["course_id"])

    op.create_table(
        "payment_methods",
        *_base_columns(),
        sa.Column("method_name", _enum("payment_method_name"), nullable=False),
        sa.Column("number", sa.String(length=30), nullable=False),
        sa.Column("account_type", sa.String(length=20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "sequence_counters",
        sa.Column("scope", sa.String(length=100), nullable=False),
        sa.Column("value", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("scope"),
    )


def downgrade() -> None:
    op.drop_table("sequence_counters")
    op.drop_table("payment_methods")

    op.drop_index("ix_admissions_course_id", table_name="admissions")
    op.drop_index("ix_admissions_status", table_name="admissions")
    op.drop_table("admissions")

    op.drop_index("ix_payments_source", table_name="payments")
    op.drop_index("ix_payments_user_id", table_name="payments")
    op.drop_index("ix_payments_status", table_name="payments")
    op.drop_index("uq_payments_active_source", table_name="payments")
    op.drop_table("payments")

    op.drop_table("products")
    op.drop_table("courses")

    op.drop_index("ix_users_phone", table_name="users")
    op.drop_index("ix_users_student_id", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

    bind = op.get_bind()
    for name in reversed(list(ENUMS)):
        postgresql.ENUM(name=name).drop(bind, checkfirst=True)
