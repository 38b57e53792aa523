from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, computed_field

from schoolpay.models.enums import EnrollmentStatus, FeeType, PlanFrequency


class EnrollmentCreate(BaseModel):
    """
    Enroll a student. The fee is taken from the school's published schedule;
    the activation payment (deposit + platform fee) is submitted for approval.
    """
    student_name: str = Field(..., min_length=1)
    school_id: UUID
    grade: str = Field(..., min_length=1)
    fee_type: FeeType = FeeType.TERM
    installment_frequency: PlanFrequency = PlanFrequency.MONTHLY
    receipt_url: Optional[str] = None
    start_date: Optional[date] = None
    avatar_url: Optional[str] = None


class EnrollmentStatusUpdate(BaseModel):
    """Upstream status string, e.g. 'Overdue' or 'Due Soon'."""
    raw_status: Optional[str] = Field(None, max_length=64)


class EnrollmentResponse(BaseModel):
    id: UUID
    owner_id: UUID
    school_id: UUID
    student_name: str
    grade: str
    fee_type: FeeType
    installment_frequency: PlanFrequency
    total_fee: Decimal
    paid_amount: Decimal
    next_installment_amount: Decimal
    next_due_date: Optional[date] = None
    term_start_date: Optional[date] = None
    term_end_date: Optional[date] = None
    raw_status: Optional[str] = None
    status: EnrollmentStatus
    avatar_url: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def remaining_balance(self) -> Decimal:
        return self.total_fee - self.paid_amount
