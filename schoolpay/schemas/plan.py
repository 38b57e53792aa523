from decimal import Decimal
from pydantic import BaseModel, Field

from schoolpay.models.enums import FeeType


class PlanQuoteRequest(BaseModel):
    """Quote request. Non-positive fees are rejected by the calculator with ERR_INVALID_INPUT."""
    total_fee: Decimal = Field(..., description="Total fee for the period")
    fee_type: FeeType = FeeType.TERM
