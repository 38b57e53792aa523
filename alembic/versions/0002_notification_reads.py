"""per-account read state for broadcast notifications

Revision ID: 0002e5f6a7b8
Revises: 0001a1b2c3d4
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa


revision = "0002e5f6a7b8"
down_revision = "0001a1b2c3d4"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "notification_reads",
        sa.Column("notification_id", sa.UUID(), nullable=False),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("read_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["notification_id"], ["notifications.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("notification_id", "user_id"),
    )
    # Broadcasts no longer use the shared flag
    op.execute("UPDATE notifications SET read = false WHERE user_id IS NULL")


def downgrade() -> None:
    op.drop_table("notification_reads")
