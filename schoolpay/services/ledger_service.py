"""
Ledger Service

Commits ledger transitions. Each command loads the rows involved (scoped to
the caller), hands immutable snapshots to the pure engine in
schoolpay.domain.ledger, writes the proposal onto the ORM rows and commits
once. A failed commit is rolled back and re-raised: the caller sees no
transition at all, never a half-applied one. Rows being resolved or credited
are loaded FOR UPDATE, so concurrent approvals of one payment serialize and
the second sees it already resolved.
"""

from decimal import Decimal
from typing import List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.core.logging import get_logger
from schoolpay.domain import ledger
from schoolpay.domain.ledger import EnrollmentState, LedgerTransition, TransactionState
from schoolpay.domain.session import Session
from schoolpay.models.enrollment import Enrollment
from schoolpay.models.enums import CollectionKind, TransactionStatus
from schoolpay.models.notification import Notification
from schoolpay.models.school import School
from schoolpay.models.transaction import Transaction
from schoolpay.services.scope_service import ScopeService

logger = get_logger(__name__)


class LedgerService:
    """Service layer for payment transactions"""

    @staticmethod
    def stage(
        db: AsyncSession,
        transition: LedgerTransition,
        transaction_row: Optional[Transaction] = None,
        enrollment_row: Optional[Enrollment] = None,
    ) -> Transaction:
        """
        Write a proposed transition onto ORM rows. Nothing is flushed;
        the caller commits.
        """
        proposed = transition.transaction
        if transaction_row is None:
            transaction_row = Transaction(**proposed.model_dump(exclude={"id"}))
            db.add(transaction_row)
        else:
            transaction_row.status = proposed.status

        if transition.enrollment is not None and enrollment_row is not None:
            credited = transition.enrollment
            enrollment_row.paid_amount = credited.paid_amount
            enrollment_row.raw_status = credited.raw_status
            enrollment_row.status = credited.status
            enrollment_row.next_installment_amount = credited.next_installment_amount

        db.add(Notification(**transition.notification.model_dump()))
        return transaction_row

    @staticmethod
    async def commit(
        db: AsyncSession,
        transition: LedgerTransition,
        session: Session,
        transaction_row: Transaction,
    ) -> Transaction:
        """Commit a staged transition as one unit, rolling back on failure."""
        log_context = {
            "actor_id": session.account_id,
            "acting_as": session.effective_role.value if session.effective_role else None,
            "enrollment_id": transition.transaction.enrollment_id,
            "school_id": transition.transaction.school_id,
        }
        try:
            await db.commit()
        except Exception:
            await db.rollback()
            logger.error(
                f"Ledger {transition.action} failed, rolled back",
                extra=log_context,
                exc_info=True,
            )
            raise

        await db.refresh(transaction_row)
        logger.info(
            f"Ledger {transition.action}",
            extra={
                **log_context,
                "transaction_id": transaction_row.id,
                "transaction_status": transition.transaction.status.value,
                "amount": str(transition.transaction.amount),
            },
        )
        return transaction_row

    @staticmethod
    async def _school_name(db: AsyncSession, school_id: Optional[UUID]) -> str:
        if school_id is None:
            return ""
        school = await db.get(School, school_id)
        return school.name if school else ""

    @staticmethod
    async def submit_payment(
        db: AsyncSession,
        enrollment_id: UUID,
        amount: Decimal,
        session: Session,
        receipt_url: Optional[str] = None,
    ) -> Transaction:
        """
        Record an installment awaiting verification.

        Raises:
            NotFoundError: enrollment unknown or outside the caller's scope
            InvalidInputError: amount is not positive
        """
        enrollment = await ScopeService.get(db, CollectionKind.ENROLLMENTS, enrollment_id, session)
        transition = ledger.submit(
            EnrollmentState.model_validate(enrollment),
            amount,
            receipt_url=receipt_url,
            school_name=await LedgerService._school_name(db, enrollment.school_id),
        )
        row = LedgerService.stage(db, transition)
        return await LedgerService.commit(db, transition, session, row)

    @staticmethod
    async def approve_payment(db: AsyncSession, transaction_id: UUID, session: Session) -> Transaction:
        """
        Confirm a pending payment and credit its enrollment.

        Raises:
            NotFoundError: transaction (or its enrollment) unknown or out of scope
            PermissionDeniedError: caller may not approve for this school
            IllegalTransitionError: transaction already resolved
        """
        transaction = await ScopeService.get(
            db, CollectionKind.TRANSACTIONS, transaction_id, session, for_update=True
        )
        enrollment = None
        if transaction.enrollment_id is not None:
            enrollment = await db.get(
                Enrollment, transaction.enrollment_id, with_for_update=True, populate_existing=True
            )

        transition = ledger.approve(
            TransactionState.model_validate(transaction),
            EnrollmentState.model_validate(enrollment) if enrollment is not None else None,
            session,
        )
        LedgerService.stage(db, transition, transaction_row=transaction, enrollment_row=enrollment)
        return await LedgerService.commit(db, transition, session, transaction)

    @staticmethod
    async def decline_payment(db: AsyncSession, transaction_id: UUID, session: Session) -> Transaction:
        """Reject a pending payment. The enrollment balance never moves."""
        transaction = await ScopeService.get(
            db, CollectionKind.TRANSACTIONS, transaction_id, session, for_update=True
        )
        transition = ledger.decline(TransactionState.model_validate(transaction), session)
        LedgerService.stage(db, transition, transaction_row=transaction)
        return await LedgerService.commit(db, transition, session, transaction)

    @staticmethod
    async def direct_payment(
        db: AsyncSession,
        enrollment_id: UUID,
        amount: Decimal,
        session: Session,
        receipt_url: Optional[str] = None,
    ) -> Transaction:
        """Record a payment confirmed synchronously: created Successful and credited in one commit."""
        enrollment = await ScopeService.get(
            db, CollectionKind.ENROLLMENTS, enrollment_id, session, for_update=True
        )
        transition = ledger.direct_pay(
            EnrollmentState.model_validate(enrollment),
            amount,
            session,
            school_name=await LedgerService._school_name(db, enrollment.school_id),
            receipt_url=receipt_url,
        )
        row = LedgerService.stage(db, transition, enrollment_row=enrollment)
        return await LedgerService.commit(db, transition, session, row)

    @staticmethod
    async def list_payments(
        db: AsyncSession,
        session: Session,
        status: Optional[TransactionStatus] = None,
        enrollment_id: Optional[UUID] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Transaction]:
        criteria = []
        if status is not None:
            criteria.append(Transaction.status == status)
        if enrollment_id is not None:
            criteria.append(Transaction.enrollment_id == enrollment_id)
        return await ScopeService.list(
            db, CollectionKind.TRANSACTIONS, session, *criteria, skip=skip, limit=limit
        )
