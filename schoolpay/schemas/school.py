from typing import Dict, Optional
from decimal import Decimal
from pydantic import BaseModel, EmailStr, Field, ConfigDict
from datetime import datetime
from uuid import UUID

from schoolpay.schemas.auth import BankDetails


class SchoolBase(BaseModel):
    name: str = Field(..., min_length=1, description="School name cannot be empty")
    address: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None


class SchoolOnboard(SchoolBase):
    """Platform owner onboarding: the school plus its administrator account."""
    admin_name: str = Field(..., min_length=1)
    admin_email: EmailStr
    admin_password: str = Field(..., min_length=4)
    bank_details: Optional[BankDetails] = None
    fee_schedule: Dict[str, Decimal] = Field(default_factory=dict)


class SchoolResponse(SchoolBase):
    id: UUID
    fee_schedule: Dict[str, Decimal] = Field(default_factory=dict)
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FeeUpdate(BaseModel):
    grade: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)


class FeeScheduleResponse(BaseModel):
    school_id: UUID
    fees: Dict[str, Decimal]
