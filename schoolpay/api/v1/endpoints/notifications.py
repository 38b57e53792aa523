from typing import Any, List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from schoolpay.api import deps
from schoolpay.domain.session import Session
from schoolpay.schemas.notification import BroadcastCreate, NotificationResponse
from schoolpay.schemas.responses import SuccessResponse
from schoolpay.services.notification_service import NotificationService

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[NotificationResponse]])
async def list_notifications(
    unread_only: bool = False,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    session: Session = Depends(deps.get_session),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    notifications = await NotificationService.list_notifications(
        db, session, unread_only=unread_only, skip=skip, limit=limit
    )
    return SuccessResponse(data=notifications)


@router.patch("/{notification_id}/read", response_model=SuccessResponse[NotificationResponse])
async def mark_read(
    notification_id: UUID,
    session: Session = Depends(deps.get_session),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    notification = await NotificationService.mark_read(db, notification_id, session)
    return SuccessResponse(data=notification)


@router.post("/broadcast", response_model=SuccessResponse[NotificationResponse])
async def broadcast(
    broadcast_in: BroadcastCreate,
    session: Session = Depends(deps.require_platform_owner),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Announcement visible to every account. Platform owner only.
    """
    notification = await NotificationService.broadcast(db, broadcast_in.title, broadcast_in.message, session)
    return SuccessResponse(data=notification, message="Broadcast sent")
