"""Notification Model"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Table, Text
from sqlalchemy.dialects.postgresql import UUID, ENUM

from schoolpay.models.base import BaseModel
from schoolpay.models.enums import NotificationCategory, NotificationSeverity, enum_values


class Notification(BaseModel):
    """
    In-app notification. A NULL user_id is a broadcast visible to everyone.
    Ledger notifications also reference their enrollment so cascades can find them.

    The read flag belongs to the recipient. Broadcasts are read per account,
    recorded in notification_reads.
    """
    __tablename__ = "notifications"

    user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    enrollment_id = Column(
        UUID(as_uuid=True),
        ForeignKey("enrollments.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    category = Column(ENUM(NotificationCategory, name="notification_category", values_callable=enum_values), nullable=False)
    severity = Column(
        ENUM(NotificationSeverity, name="notification_severity", values_callable=enum_values),
        nullable=False,
        default=NotificationSeverity.INFO,
    )
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    read = Column(Boolean, default=False, nullable=False)

    @property
    def is_broadcast(self) -> bool:
        return self.user_id is None

    def __repr__(self) -> str:
        return f"<Notification {self.title} -> {self.user_id or 'all'}>"


# Accounts that have read a broadcast (Pivot Table)
notification_reads = Table(
    "notification_reads",
    BaseModel.metadata,
    Column("notification_id", UUID(as_uuid=True), ForeignKey("notifications.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("read_at", DateTime, nullable=False),
)
