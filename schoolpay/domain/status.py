"""
Canonical enrollment status.

Upstream systems (bank callbacks, school spreadsheets, older clients) report
enrollment state in their own words. normalize_status maps any of them, plus
the ledger's numeric facts, onto exactly one EnrollmentStatus.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, FrozenSet, Optional

from pydantic import BaseModel, ConfigDict

from schoolpay.models.enums import EnrollmentStatus


class StatusVocabulary(BaseModel):
    """
    Closed set of upstream tokens per canonical meaning.

    Bump ``version`` whenever a token set changes so stored statuses can be
    traced to the vocabulary that produced them.
    """
    model_config = ConfigDict(frozen=True)

    version: int
    failure: FrozenSet[str]
    default: FrozenSet[str]
    completion: FrozenSet[str]
    active: FrozenSet[str]


DEFAULT_VOCABULARY = StatusVocabulary(
    version=1,
    failure=frozenset({
        "failed", "failure", "rejected", "declined", "cancelled", "canceled",
        "not active", "inactive", "reversed",
    }),
    default=frozenset({
        "overdue", "defaulted", "default", "late", "past due", "in arrears", "arrears",
    }),
    completion=frozenset({
        "completed", "complete", "paid", "fully paid", "settled", "cleared",
    }),
    active=frozenset({
        "active", "on track", "partial", "partially paid", "part paid",
        "due soon", "in progress", "ongoing", "processing",
    }),
)


def normalize_token(raw_status: Any) -> str:
    """Lowercase, trim and fold separators: 'Due_Soon' and ' due-soon ' both become 'due soon'."""
    if raw_status is None:
        return ""
    if isinstance(raw_status, EnrollmentStatus):
        raw_status = raw_status.value
    token = str(raw_status).strip().lower().replace("_", " ").replace("-", " ")
    return " ".join(token.split())


def _number(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return None
    return number if number.is_finite() else None


def normalize_status(
    raw_status: Any,
    remaining_balance: Any,
    paid_amount: Any,
    vocabulary: StatusVocabulary = DEFAULT_VOCABULARY,
) -> EnrollmentStatus:
    """
    Map an upstream status plus ledger facts to a canonical status.

    First match wins:
        1. failure token                          -> Failed
        2. overdue/default token                  -> Defaulted
        3. completion token, or remaining <= 0    -> Completed
        4. active token, or paid > 0              -> Active
        5. anything else                          -> Pending

    Never raises; numbers that cannot be read are treated as unknown.
    """
    token = normalize_token(raw_status)
    remaining = _number(remaining_balance)
    paid = _number(paid_amount)

    if token in vocabulary.failure:
        return EnrollmentStatus.FAILED
    if token in vocabulary.default:
        return EnrollmentStatus.DEFAULTED
    if token in vocabulary.completion or (remaining is not None and remaining <= 0):
        return EnrollmentStatus.COMPLETED
    if token in vocabulary.active or (paid is not None and paid > 0):
        return EnrollmentStatus.ACTIVE
    return EnrollmentStatus.PENDING
