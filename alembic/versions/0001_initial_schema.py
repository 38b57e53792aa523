"""initial schema: schools, users, enrollments, transactions, notifications

Revision ID: 0001a1b2c3d4
Revises:
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "0001a1b2c3d4"
down_revision = None
branch_labels = None
depends_on = None

ENUMS = {
    "user_role": ("guardian", "platform_owner", "school_administrator", "student"),
    "fee_type": ("Term", "FullPeriod"),
    "plan_frequency": ("Weekly", "Monthly"),
    "enrollment_status": ("Pending", "Active", "Completed", "Defaulted", "Failed"),
    "transaction_status": ("Pending", "Successful", "Failed"),
    "transaction_kind": ("activation", "installment"),
    "notification_category": ("payment", "alert", "announcement"),
    "notification_severity": ("success", "warning", "error", "info"),
}


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _base_columns():
    return [
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    for name, values in ENUMS.items():
        postgresql.ENUM(*values, name=name).create(op.get_bind(), checkfirst=True)

    op.create_table(
        "schools",
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("contact_email", sa.String(255), nullable=True),
        sa.Column("contact_phone", sa.String(32), nullable=True),
        sa.Column("fee_schedule", postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        *_base_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index(op.f("ix_schools_id"), "schools", ["id"], unique=False)

    op.create_table(
        "users",
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("session_version", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("phone_number", sa.String(32), nullable=True),
        sa.Column("role", _enum("user_role"), nullable=False),
        sa.Column("school_id", sa.UUID(), nullable=True),
        sa.Column("bank_name", sa.String(255), nullable=True),
        sa.Column("account_name", sa.String(255), nullable=True),
        sa.Column("account_number", sa.String(32), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_base_columns(),
        sa.ForeignKeyConstraint(["school_id"], ["schools.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_role"), "users", ["role"], unique=False)
    op.create_index(op.f("ix_users_school_id"), "users", ["school_id"], unique=False)
    op.create_index(op.f("ix_users_is_active"), "users", ["is_active"], unique=False)

    op.create_table(
        "enrollments",
        sa.Column("owner_id", sa.UUID(), nullable=False),
        sa.Column("school_id", sa.UUID(), nullable=False),
        sa.Column("student_name", sa.String(255), nullable=False),
        sa.Column("grade", sa.String(100), nullable=False),
        sa.Column("fee_type", _enum("fee_type"), nullable=False),
        sa.Column("installment_frequency", _enum("plan_frequency"), nullable=False),
        sa.Column("total_fee", sa.Numeric(12, 2), nullable=False),
        sa.Column("paid_amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("next_installment_amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("next_due_date", sa.Date(), nullable=True),
        sa.Column("term_start_date", sa.Date(), nullable=True),
        sa.Column("term_end_date", sa.Date(), nullable=True),
        sa.Column("raw_status", sa.String(64), nullable=True),
        sa.Column("status", _enum("enrollment_status"), nullable=False),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        *_base_columns(),
        sa.CheckConstraint("paid_amount >= 0 AND paid_amount <= total_fee", name="ck_enrollments_paid_within_fee"),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["school_id"], ["schools.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_enrollments_id"), "enrollments", ["id"], unique=False)
    op.create_index(op.f("ix_enrollments_owner_id"), "enrollments", ["owner_id"], unique=False)
    op.create_index(op.f("ix_enrollments_school_id"), "enrollments", ["school_id"], unique=False)
    op.create_index(op.f("ix_enrollments_status"), "enrollments", ["status"], unique=False)

    op.create_table(
        "transactions",
        sa.Column("payer_id", sa.UUID(), nullable=False),
        sa.Column("enrollment_id", sa.UUID(), nullable=True),
        sa.Column("school_id", sa.UUID(), nullable=True),
        sa.Column("kind", _enum("transaction_kind"), nullable=False),
        sa.Column("student_name", sa.String(255), nullable=False),
        sa.Column("school_name", sa.String(255), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("platform_fee", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("status", _enum("transaction_status"), nullable=False),
        sa.Column("receipt_url", sa.Text(), nullable=True),
        *_base_columns(),
        sa.ForeignKeyConstraint(["payer_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["enrollment_id"], ["enrollments.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["school_id"], ["schools.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_transactions_id"), "transactions", ["id"], unique=False)
    op.create_index(op.f("ix_transactions_payer_id"), "transactions", ["payer_id"], unique=False)
    op.create_index(op.f("ix_transactions_enrollment_id"), "transactions", ["enrollment_id"], unique=False)
    op.create_index(op.f("ix_transactions_school_id"), "transactions", ["school_id"], unique=False)
    op.create_index(op.f("ix_transactions_status"), "transactions", ["status"], unique=False)

    op.create_table(
        "notifications",
        sa.Column("user_id", sa.UUID(), nullable=True),
        sa.Column("enrollment_id", sa.UUID(), nullable=True),
        sa.Column("category", _enum("notification_category"), nullable=False),
        sa.Column("severity", _enum("notification_severity"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_base_columns(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["enrollment_id"], ["enrollments.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_notifications_id"), "notifications", ["id"], unique=False)
    op.create_index(op.f("ix_notifications_user_id"), "notifications", ["user_id"], unique=False)
    op.create_index(op.f("ix_notifications_enrollment_id"), "notifications", ["enrollment_id"], unique=False)


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("transactions")
    op.drop_table("enrollments")
    op.drop_table("users")
    op.drop_table("schools")
    for name in reversed(list(ENUMS)):
        postgresql.ENUM(name=name).drop(op.get_bind(), checkfirst=True)
