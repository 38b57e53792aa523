"""
Installment plan pricing.

Turns a total fee into the activation payment (deposit + platform fee) and
the priced installment options for the remaining balance. Everything here is
pure: quoting a plan never touches the database, so clients may call it on
every keystroke of a fee input.
"""

from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict

from schoolpay.config import settings
from schoolpay.core.exceptions import FeeNotPublishedError, InvalidInputError
from schoolpay.models.enums import FeeType, PlanFrequency
from schoolpay.utils.time import add_months

# Installment periods (months) per fee type: three per academic term,
# seven across a full session
PERIODS_BY_FEE_TYPE = {
    FeeType.TERM: 3,
    FeeType.FULL_PERIOD: 7,
}

WEEKS_PER_PERIOD = 4

FREQUENCY_LABELS = {
    PlanFrequency.WEEKLY: "/ week",
    PlanFrequency.MONTHLY: "/ month",
}


class PlanOption(BaseModel):
    """One way of paying the remaining balance"""
    model_config = ConfigDict(frozen=True)

    type: PlanFrequency
    amount: Decimal
    frequency_label: str
    number_of_payments: int

    @property
    def total(self) -> Decimal:
        return self.amount * self.number_of_payments


class PlanQuote(BaseModel):
    """Priced activation payment plus the installment options"""
    model_config = ConfigDict(frozen=True)

    total_fee: Decimal
    fee_type: FeeType
    deposit_fraction: Decimal
    platform_fee_fraction: Decimal
    deposit_amount: Decimal
    platform_fee_amount: Decimal
    total_initial_payment: Decimal
    remaining_balance: Decimal
    periods: int
    options: List[PlanOption]

    def option(self, frequency: PlanFrequency) -> PlanOption:
        for option in self.options:
            if option.type == frequency:
                return option
        raise InvalidInputError(f"Unsupported installment frequency: {frequency}")


def to_amount(value: Any, field: str = "amount") -> Decimal:
    """Coerce a user-supplied number to Decimal, rejecting NaN, infinities and junk."""
    if isinstance(value, bool):
        raise InvalidInputError(f"{field} must be a number", details={field: value})
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidInputError(f"{field} must be a number", details={field: str(value)})
    if not amount.is_finite():
        raise InvalidInputError(f"{field} must be finite", details={field: str(value)})
    return amount


def _fraction(value: Any, field: str) -> Decimal:
    fraction = to_amount(value, field)
    if fraction < 0 or fraction >= 1:
        raise InvalidInputError(f"{field} must be in [0, 1)", details={field: str(fraction)})
    return fraction


def quote_plan(
    total_fee: Any,
    fee_type: Any,
    deposit_fraction: Optional[Any] = None,
    platform_fee_fraction: Optional[Any] = None,
) -> PlanQuote:
    """
    Price an installment plan.

    Args:
        total_fee: Positive fee for the whole period
        fee_type: FeeType (or its string value)
        deposit_fraction: Share paid upfront; defaults to settings.DEPOSIT_FRACTION
        platform_fee_fraction: Platform fee share; defaults to settings.PLATFORM_FEE_FRACTION

    Returns:
        PlanQuote with options ordered Weekly, Monthly

    Raises:
        InvalidInputError: non-positive fee, bad fraction or unknown fee type
    """
    fee = to_amount(total_fee, "total_fee")
    if fee <= 0:
        raise InvalidInputError("total_fee must be greater than zero", details={"total_fee": str(fee)})

    try:
        fee_type = FeeType(fee_type)
    except ValueError:
        raise InvalidInputError(f"Unknown fee type: {fee_type}", details={"fee_type": str(fee_type)})

    deposit_share = _fraction(
        settings.DEPOSIT_FRACTION if deposit_fraction is None else deposit_fraction,
        "deposit_fraction",
    )
    fee_share = _fraction(
        settings.PLATFORM_FEE_FRACTION if platform_fee_fraction is None else platform_fee_fraction,
        "platform_fee_fraction",
    )

    deposit_amount = fee * deposit_share
    platform_fee_amount = fee * fee_share
    remaining_balance = fee * (1 - deposit_share)
    periods = PERIODS_BY_FEE_TYPE[fee_type]

    options = []
    for frequency, count in (
        (PlanFrequency.WEEKLY, periods * WEEKS_PER_PERIOD),
        (PlanFrequency.MONTHLY, periods),
    ):
        options.append(PlanOption(
            type=frequency,
            amount=remaining_balance / count,
            frequency_label=FREQUENCY_LABELS[frequency],
            number_of_payments=count,
        ))

    return PlanQuote(
        total_fee=fee,
        fee_type=fee_type,
        deposit_fraction=deposit_share,
        platform_fee_fraction=fee_share,
        deposit_amount=deposit_amount,
        platform_fee_amount=platform_fee_amount,
        total_initial_payment=deposit_amount + platform_fee_amount,
        remaining_balance=remaining_balance,
        periods=periods,
        options=options,
    )


def fee_for_grade(fee_schedule: Optional[Mapping[str, Any]], grade: str, school_id: Any = None) -> Decimal:
    """
    Look up the published fee for a grade.

    Raises:
        FeeNotPublishedError: no schedule, no entry, or a non-positive entry
    """
    if not fee_schedule or grade not in fee_schedule:
        raise FeeNotPublishedError(school_id, grade)
    try:
        fee = to_amount(fee_schedule[grade], "fee")
    except InvalidInputError:
        raise FeeNotPublishedError(school_id, grade)
    if fee <= 0:
        raise FeeNotPublishedError(school_id, grade)
    return fee


def installment_due_dates(start: date, option: PlanOption) -> List[date]:
    """Due dates of the future installments: weekly steps, or calendar months."""
    if option.type == PlanFrequency.WEEKLY:
        return [start + timedelta(weeks=i) for i in range(1, option.number_of_payments + 1)]
    return [add_months(start, i) for i in range(1, option.number_of_payments + 1)]


def term_end_date(start: date, option: PlanOption) -> date:
    return installment_due_dates(start, option)[-1]
