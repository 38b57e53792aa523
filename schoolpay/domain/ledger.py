"""
Ledger engine.

Pure transition functions for payment events. Each takes immutable snapshots
of the rows involved and returns a LedgerTransition describing the proposed
post-transition state; nothing is written here. LedgerService commits a
transition as one unit, so a Successful transaction and its enrollment credit
are stored together or not at all.

Balance invariant after every transition: 0 <= paid_amount <= total_fee.
Overpayment is clamped; the excess is not carried anywhere.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from schoolpay.config import settings
from schoolpay.core.exceptions import (
    IllegalTransitionError,
    InvalidInputError,
    NotFoundError,
    PermissionDeniedError,
)
from schoolpay.domain.plan_calculator import to_amount
from schoolpay.domain.session import Session
from schoolpay.domain.status import normalize_status
from schoolpay.models.enums import (
    EnrollmentStatus,
    NotificationCategory,
    NotificationSeverity,
    TransactionKind,
    TransactionStatus,
)

ZERO = Decimal("0")
CENT = Decimal("0.01")
# Largest value a Numeric(12, 2) column holds
MAX_AMOUNT = Decimal("9999999999.99")


class EnrollmentState(BaseModel):
    """Ledger-relevant view of an enrollment row"""
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: UUID
    owner_id: UUID
    school_id: UUID
    student_name: str = ""
    total_fee: Decimal
    paid_amount: Decimal = ZERO
    next_installment_amount: Decimal = ZERO
    raw_status: Optional[str] = None
    status: EnrollmentStatus = EnrollmentStatus.PENDING

    @property
    def remaining_balance(self) -> Decimal:
        return self.total_fee - self.paid_amount


class TransactionState(BaseModel):
    """Ledger-relevant view of a transaction row. ``id`` is None until stored."""
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: Optional[UUID] = None
    payer_id: UUID
    enrollment_id: Optional[UUID] = None
    school_id: Optional[UUID] = None
    kind: TransactionKind = TransactionKind.INSTALLMENT
    student_name: str = ""
    school_name: str = ""
    amount: Decimal
    platform_fee: Decimal = ZERO
    status: TransactionStatus = TransactionStatus.PENDING
    receipt_url: Optional[str] = None


class NotificationDraft(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: Optional[UUID]
    enrollment_id: Optional[UUID] = None
    category: NotificationCategory = NotificationCategory.PAYMENT
    severity: NotificationSeverity
    title: str
    message: str


class LedgerTransition(BaseModel):
    """Proposed result of one ledger event"""
    model_config = ConfigDict(frozen=True)

    action: str
    transaction: TransactionState
    enrollment: Optional[EnrollmentState] = None
    notification: NotificationDraft


class CollectionSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    collected: Decimal
    outstanding: Decimal
    next_due: Decimal
    pending_transactions: int
    enrollments: int
    defaulters: int


def format_money(amount: Decimal) -> str:
    return f"{settings.CURRENCY_SYMBOL}{amount:,.2f}"


def _positive_amount(amount) -> Decimal:
    value = to_amount(amount)
    if abs(value) <= MAX_AMOUNT:
        value = value.quantize(CENT, rounding=ROUND_HALF_UP)
    if value <= 0:
        raise InvalidInputError("amount must be at least 0.01", details={"amount": str(amount)})
    if value > MAX_AMOUNT:
        raise InvalidInputError(
            f"amount cannot exceed {MAX_AMOUNT}", details={"amount": str(amount)}
        )
    return value


def credit(enrollment: EnrollmentState, amount: Decimal) -> EnrollmentState:
    """
    Apply confirmed funds to an enrollment.

    paid is clamped to total_fee. Once nothing remains, the upstream status
    flag is cleared (full payment resolves an overdue flag) and no further
    installment is due.
    """
    paid = min(enrollment.paid_amount + amount, enrollment.total_fee)
    paid = max(paid, ZERO)
    remaining = enrollment.total_fee - paid
    raw_status = None if remaining <= 0 else enrollment.raw_status
    status = normalize_status(raw_status, remaining, paid)
    return enrollment.model_copy(update={
        "paid_amount": paid,
        "raw_status": raw_status,
        "status": status,
        "next_installment_amount": ZERO if status == EnrollmentStatus.COMPLETED else enrollment.next_installment_amount,
    })


def _require_approver(approver: Session, transaction: TransactionState) -> None:
    if not approver.can_approve_for(transaction.school_id):
        raise PermissionDeniedError(
            "Only the school's administrator or the platform owner can resolve payments",
            details={"role": approver.own_role.value if approver.own_role else None},
        )


def _require_pending(transaction: TransactionState, action: str) -> None:
    if transaction.status.is_terminal:
        raise IllegalTransitionError(
            f"Cannot {action} transaction: already {transaction.status.value}",
            current_state=transaction.status,
            details={"transaction_id": str(transaction.id) if transaction.id else None},
        )


def _matching_enrollment(
    transaction: TransactionState, enrollment: Optional[EnrollmentState]
) -> Optional[EnrollmentState]:
    if transaction.enrollment_id is None:
        return None
    if enrollment is None or enrollment.id != transaction.enrollment_id:
        raise NotFoundError("Enrollment", transaction.enrollment_id)
    return enrollment


def submit(
    enrollment: EnrollmentState,
    amount,
    receipt_url: Optional[str] = None,
    kind: TransactionKind = TransactionKind.INSTALLMENT,
    platform_fee=ZERO,
    school_name: str = "",
) -> LedgerTransition:
    """
    Record an unconfirmed payment. The enrollment balance is untouched
    until an approver confirms the funds.
    """
    value = _positive_amount(amount)
    fee = to_amount(platform_fee, "platform_fee")
    if fee < 0:
        raise InvalidInputError("platform_fee cannot be negative", details={"platform_fee": str(fee)})

    transaction = TransactionState(
        payer_id=enrollment.owner_id,
        enrollment_id=enrollment.id,
        school_id=enrollment.school_id,
        kind=kind,
        student_name=enrollment.student_name,
        school_name=school_name,
        amount=value,
        platform_fee=fee,
        status=TransactionStatus.PENDING,
        receipt_url=receipt_url,
    )
    return LedgerTransition(
        action="submit",
        transaction=transaction,
        enrollment=None,
        notification=NotificationDraft(
            user_id=enrollment.owner_id,
            enrollment_id=enrollment.id,
            severity=NotificationSeverity.INFO,
            title="Payment Submitted",
            message=f"{format_money(value + fee)} for {enrollment.student_name} is awaiting confirmation.",
        ),
    )


def approve(
    transaction: TransactionState,
    enrollment: Optional[EnrollmentState],
    approver: Session,
) -> LedgerTransition:
    """
    Confirm a pending payment and credit its enrollment.

    Raises:
        PermissionDeniedError: approver is not the school's administrator or the owner
        IllegalTransitionError: transaction already resolved (never double-credits)
        NotFoundError: the referenced enrollment is missing
    """
    _require_approver(approver, transaction)
    _require_pending(transaction, "approve")
    target = _matching_enrollment(transaction, enrollment)

    return LedgerTransition(
        action="approve",
        transaction=transaction.model_copy(update={"status": TransactionStatus.SUCCESSFUL}),
        enrollment=credit(target, transaction.amount) if target else None,
        notification=NotificationDraft(
            user_id=transaction.payer_id,
            enrollment_id=transaction.enrollment_id,
            severity=NotificationSeverity.SUCCESS,
            title="Payment Approved",
            message=f"{format_money(transaction.amount)} has been confirmed for {transaction.student_name}.",
        ),
    )


def decline(transaction: TransactionState, approver: Session) -> LedgerTransition:
    """Reject a pending payment. Funds were never applied, so no balance changes."""
    _require_approver(approver, transaction)
    _require_pending(transaction, "decline")

    return LedgerTransition(
        action="decline",
        transaction=transaction.model_copy(update={"status": TransactionStatus.FAILED}),
        enrollment=None,
        notification=NotificationDraft(
            user_id=transaction.payer_id,
            enrollment_id=transaction.enrollment_id,
            severity=NotificationSeverity.ERROR,
            title="Payment Declined",
            message=f"{format_money(transaction.amount)} for {transaction.student_name} could not be verified.",
        ),
    )


def direct_pay(
    enrollment: EnrollmentState,
    amount,
    actor: Session,
    school_name: str = "",
    receipt_url: Optional[str] = None,
) -> LedgerTransition:
    """
    Submit and approve in one step, for payment rails that confirm synchronously.
    Ends in the same balance state as submit followed by approve.

    The enrollment's owner may pay directly, as may anyone allowed to approve
    payments for its school.
    """
    value = _positive_amount(amount)
    transaction = TransactionState(
        payer_id=enrollment.owner_id,
        enrollment_id=enrollment.id,
        school_id=enrollment.school_id,
        kind=TransactionKind.INSTALLMENT,
        student_name=enrollment.student_name,
        school_name=school_name,
        amount=value,
        status=TransactionStatus.SUCCESSFUL,
        receipt_url=receipt_url,
    )
    if actor.effective_account_id != enrollment.owner_id:
        _require_approver(actor, transaction)

    return LedgerTransition(
        action="direct_pay",
        transaction=transaction,
        enrollment=credit(enrollment, value),
        notification=NotificationDraft(
            user_id=enrollment.owner_id,
            enrollment_id=enrollment.id,
            severity=NotificationSeverity.SUCCESS,
            title="Payment Successful",
            message=f"{format_money(value)} has been recorded for {enrollment.student_name}.",
        ),
    )


def summarize(enrollments: Iterable, transactions: Iterable) -> CollectionSummary:
    """Collection totals over already-scoped enrollments and transactions."""
    enrollments = list(enrollments)
    transactions = list(transactions)
    return CollectionSummary(
        collected=sum(
            (t.amount for t in transactions if t.status == TransactionStatus.SUCCESSFUL), ZERO
        ),
        outstanding=sum((e.total_fee - e.paid_amount for e in enrollments), ZERO),
        next_due=sum(
            (e.next_installment_amount for e in enrollments if e.status != EnrollmentStatus.COMPLETED), ZERO
        ),
        pending_transactions=sum(1 for t in transactions if t.status == TransactionStatus.PENDING),
        enrollments=len(enrollments),
        defaulters=sum(1 for e in enrollments if e.status == EnrollmentStatus.DEFAULTED),
    )
