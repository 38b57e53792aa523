"""Enrollment Service - Business Logic Layer"""

import uuid
from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.core.exceptions import PermissionDeniedError
from schoolpay.core.logging import get_logger
from schoolpay.domain import ledger
from schoolpay.domain.ledger import CollectionSummary, EnrollmentState
from schoolpay.domain.plan_calculator import fee_for_grade, installment_due_dates, quote_plan
from schoolpay.domain.session import Session
from schoolpay.domain.status import normalize_status
from schoolpay.models.enrollment import Enrollment
from schoolpay.models.enums import (
    CollectionKind,
    EnrollmentStatus,
    NotificationCategory,
    NotificationSeverity,
    TransactionKind,
)
from schoolpay.models.notification import Notification
from schoolpay.models.transaction import Transaction
from schoolpay.schemas.enrollment import EnrollmentCreate
from schoolpay.services.ledger_service import LedgerService
from schoolpay.services.school_service import SchoolService
from schoolpay.services.scope_service import ScopeService
from schoolpay.services.cascade_service import CascadeService
from schoolpay.utils.time import get_utc_today

logger = get_logger(__name__)

CENT = Decimal("0.01")


class EnrollmentService:
    """Service layer for enrollments and their activation"""

    @staticmethod
    async def enroll(
        db: AsyncSession, data: EnrollmentCreate, session: Session
    ) -> Tuple[Enrollment, Transaction]:
        """
        Enroll a student and submit the activation payment in one commit.

        The fee is locked from the school's published schedule at this point.
        The enrollment stays Pending until the activation payment is approved;
        the deposit is credited on approval, the platform fee never is.

        Raises:
            NotFoundError: unknown school
            FeeNotPublishedError: the school publishes no fee for the grade
        """
        school = await SchoolService.get_school_or_404(db, data.school_id)
        total_fee = fee_for_grade(school.fee_schedule, data.grade, school.id)
        quote = quote_plan(total_fee, data.fee_type)
        option = quote.option(data.installment_frequency)

        start = data.start_date or get_utc_today()
        due_dates = installment_due_dates(start, option)

        enrollment = Enrollment(
            id=uuid.uuid4(),
            owner_id=session.effective_account_id,
            school_id=school.id,
            student_name=data.student_name,
            grade=data.grade,
            fee_type=quote.fee_type,
            installment_frequency=option.type,
            total_fee=quote.total_fee,
            paid_amount=Decimal("0"),
            next_installment_amount=option.amount.quantize(CENT),
            next_due_date=due_dates[0],
            term_start_date=start,
            term_end_date=due_dates[-1],
            raw_status=None,
            status=EnrollmentStatus.PENDING,
            avatar_url=data.avatar_url,
        )
        db.add(enrollment)
        await db.flush()

        transition = ledger.submit(
            EnrollmentState.model_validate(enrollment),
            quote.deposit_amount.quantize(CENT),
            receipt_url=data.receipt_url,
            kind=TransactionKind.ACTIVATION,
            platform_fee=quote.platform_fee_amount.quantize(CENT),
            school_name=school.name,
        )
        row = LedgerService.stage(db, transition)
        row = await LedgerService.commit(db, transition, session, row)
        logger.info(
            "Enrollment created",
            extra={"enrollment_id": enrollment.id, "school_id": school.id, "actor_id": session.account_id},
        )
        return enrollment, row

    @staticmethod
    async def list_enrollments(
        db: AsyncSession,
        session: Session,
        status: Optional[EnrollmentStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Enrollment]:
        criteria = [Enrollment.status == status] if status is not None else []
        return await ScopeService.list(
            db, CollectionKind.ENROLLMENTS, session, *criteria, skip=skip, limit=limit
        )

    @staticmethod
    async def list_defaulters(db: AsyncSession, session: Session) -> List[Enrollment]:
        return await EnrollmentService.list_enrollments(db, session, status=EnrollmentStatus.DEFAULTED)

    @staticmethod
    async def get_enrollment(db: AsyncSession, enrollment_id: UUID, session: Session) -> Enrollment:
        return await ScopeService.get(db, CollectionKind.ENROLLMENTS, enrollment_id, session)

    @staticmethod
    async def update_status(
        db: AsyncSession, enrollment_id: UUID, raw_status: Optional[str], session: Session
    ) -> Enrollment:
        """
        Record an upstream status string and recompute the canonical status.
        A transition into Defaulted alerts the enrollment owner.
        """
        enrollment = await EnrollmentService.get_enrollment(db, enrollment_id, session)
        if not session.can_approve_for(enrollment.school_id):
            raise PermissionDeniedError("Only the school's administrator or the platform owner can update status")

        previous = enrollment.status
        enrollment.raw_status = raw_status
        enrollment.status = normalize_status(raw_status, enrollment.remaining_balance, enrollment.paid_amount)
        if enrollment.status == EnrollmentStatus.DEFAULTED and previous != EnrollmentStatus.DEFAULTED:
            db.add(Notification(
                user_id=enrollment.owner_id,
                enrollment_id=enrollment.id,
                category=NotificationCategory.ALERT,
                severity=NotificationSeverity.WARNING,
                title="Payment Overdue",
                message=f"Payments for {enrollment.student_name} are overdue. "
                        f"Outstanding balance: {ledger.format_money(enrollment.remaining_balance)}.",
            ))

        await db.commit()
        await db.refresh(enrollment)
        logger.info(
            "Enrollment status updated",
            extra={"enrollment_id": enrollment.id, "status": enrollment.status.value, "actor_id": session.account_id},
        )
        return enrollment

    @staticmethod
    async def delete_enrollment(db: AsyncSession, enrollment_id: UUID, session: Session) -> dict:
        """Only the enrollment's owner or the platform owner may delete it."""
        enrollment = await EnrollmentService.get_enrollment(db, enrollment_id, session)
        if not (session.is_platform_owner or enrollment.owner_id == session.account_id):
            raise PermissionDeniedError("Only the enrollment owner can delete it")
        return await CascadeService.delete_enrollment(db, enrollment.id)

    @staticmethod
    async def collection_summary(db: AsyncSession, session: Session) -> CollectionSummary:
        enrollments = await ScopeService.list(db, CollectionKind.ENROLLMENTS, session)
        transactions = await ScopeService.list(db, CollectionKind.TRANSACTIONS, session)
        return ledger.summarize(enrollments, transactions)

