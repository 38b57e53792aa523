from typing import Optional
from pydantic import BaseModel, EmailStr, Field, ConfigDict
from datetime import datetime
from uuid import UUID

from schoolpay.models.enums import UserRole


class UserResponse(BaseModel):
    id: UUID
    name: str
    email: EmailStr
    phone_number: Optional[str] = None
    role: UserRole
    school_id: Optional[UUID] = None
    bank_name: Optional[str] = None
    account_name: Optional[str] = None
    account_number: Optional[str] = None
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserUpdate(BaseModel):
    """Profile fields an account may change about itself"""
    name: Optional[str] = Field(None, min_length=1)
    phone_number: Optional[str] = None
    password: Optional[str] = Field(None, min_length=4)
    bank_name: Optional[str] = None
    account_name: Optional[str] = None
    account_number: Optional[str] = Field(None, max_length=32)
