from typing import List
from uuid import UUID
from sqlalchemy import and_, exists, or_, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.core.exceptions import PermissionDeniedError
from schoolpay.core.logging import get_logger
from schoolpay.domain.session import Session
from schoolpay.models.enums import CollectionKind, NotificationCategory, NotificationSeverity
from schoolpay.models.notification import Notification, notification_reads
from schoolpay.schemas.notification import NotificationResponse
from schoolpay.services.scope_service import ScopeService
from schoolpay.utils.time import get_utc_now

logger = get_logger(__name__)


def _read_by(viewer_id: UUID):
    return exists().where(
        notification_reads.c.notification_id == Notification.id,
        notification_reads.c.user_id == viewer_id,
    )


def _for_viewer(notification: Notification, read_ids: set) -> NotificationResponse:
    response = NotificationResponse.model_validate(notification)
    if notification.is_broadcast:
        response = response.model_copy(update={"read": notification.id in read_ids})
    return response


class NotificationService:

    @staticmethod
    async def _broadcasts_read(db: AsyncSession, viewer_id: UUID, notification_ids: List[UUID]) -> set:
        if not notification_ids:
            return set()
        result = await db.execute(
            select(notification_reads.c.notification_id).where(
                and_(
                    notification_reads.c.user_id == viewer_id,
                    notification_reads.c.notification_id.in_(notification_ids),
                )
            )
        )
        return set(result.scalars().all())

    @staticmethod
    async def list_notifications(
        db: AsyncSession, session: Session, unread_only: bool = False, skip: int = 0, limit: int = 50
    ) -> List[NotificationResponse]:
        """
        The viewer's own notifications plus every broadcast, newest first.
        Broadcasts report whether the viewing account has read them.
        """
        viewer_id = session.effective_account_id
        criteria = []
        if unread_only:
            criteria.append(or_(
                and_(Notification.user_id.is_not(None), Notification.read.is_(False)),
                and_(Notification.user_id.is_(None), ~_read_by(viewer_id)),
            ))
        notifications = await ScopeService.list(
            db, CollectionKind.NOTIFICATIONS, session, *criteria, skip=skip, limit=limit
        )
        read_ids = await NotificationService._broadcasts_read(
            db, viewer_id, [n.id for n in notifications if n.is_broadcast]
        )
        return [_for_viewer(n, read_ids) for n in notifications]

    @staticmethod
    async def mark_read(db: AsyncSession, notification_id: UUID, session: Session) -> NotificationResponse:
        """Mark one notification read for the viewing account only."""
        notification = await ScopeService.get(db, CollectionKind.NOTIFICATIONS, notification_id, session)
        viewer_id = session.effective_account_id

        if notification.is_broadcast:
            await db.execute(
                insert(notification_reads)
                .values(notification_id=notification.id, user_id=viewer_id, read_at=get_utc_now())
                .on_conflict_do_nothing()
            )
            await db.commit()
            return _for_viewer(notification, {notification.id})

        notification.read = True
        await db.commit()
        await db.refresh(notification)
        return _for_viewer(notification, set())

    @staticmethod
    async def broadcast(db: AsyncSession, title: str, message: str, session: Session) -> Notification:
        """Announcement to every account, stored once without a recipient."""
        if not session.is_platform_owner:
            raise PermissionDeniedError("Only the platform owner can broadcast")

        notification = Notification(
            user_id=None,
            category=NotificationCategory.ANNOUNCEMENT,
            severity=NotificationSeverity.INFO,
            title=title,
            message=message,
            read=False,
        )
        db.add(notification)
        await db.commit()
        await db.refresh(notification)
        logger.info("Broadcast sent", extra={"actor_id": session.account_id, "notification_id": notification.id})
        return notification
