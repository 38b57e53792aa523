from typing import Any
from fastapi import APIRouter

from schoolpay.domain.plan_calculator import PlanQuote, quote_plan
from schoolpay.schemas.plan import PlanQuoteRequest
from schoolpay.schemas.responses import SuccessResponse

router = APIRouter()


@router.post("/quote", response_model=SuccessResponse[PlanQuote])
async def quote(quote_in: PlanQuoteRequest) -> Any:
    """
    Price the activation payment and installment options for a fee.
    Stateless; no authentication required.
    """
    return SuccessResponse(data=quote_plan(quote_in.total_fee, quote_in.fee_type))
