from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field

from schoolpay.models.enums import NotificationCategory, NotificationSeverity


class BroadcastCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)


class NotificationResponse(BaseModel):
    id: UUID
    user_id: Optional[UUID] = None
    enrollment_id: Optional[UUID] = None
    category: NotificationCategory
    severity: NotificationSeverity
    title: str
    message: str
    read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
