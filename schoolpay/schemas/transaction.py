from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict

from schoolpay.models.enums import TransactionKind, TransactionStatus


class PaymentCreate(BaseModel):
    """Installment payment awaiting manual verification"""
    enrollment_id: UUID
    amount: Decimal
    receipt_url: Optional[str] = None


class DirectPaymentCreate(BaseModel):
    """Payment already confirmed by a synchronous rail"""
    enrollment_id: UUID
    amount: Decimal
    receipt_url: Optional[str] = None


class TransactionResponse(BaseModel):
    id: UUID
    payer_id: UUID
    enrollment_id: Optional[UUID] = None
    school_id: Optional[UUID] = None
    kind: TransactionKind
    student_name: str
    school_name: str
    amount: Decimal
    platform_fee: Decimal
    status: TransactionStatus
    receipt_url: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
