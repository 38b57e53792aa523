from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.core.exceptions import InvalidInputError, NotFoundError, PermissionDeniedError
from schoolpay.core.logging import get_logger
from schoolpay.domain.plan_calculator import to_amount
from schoolpay.domain.session import Session
from schoolpay.models.enums import UserRole
from schoolpay.models.school import School
from schoolpay.schemas.school import SchoolOnboard
from schoolpay.services.cascade_service import CascadeService
from schoolpay.services.user_service import UserService

logger = get_logger(__name__)


def _schedule_to_storage(fees: Dict[str, Decimal]) -> Dict[str, str]:
    stored = {}
    for grade, amount in fees.items():
        value = to_amount(amount, "fee")
        if value <= 0:
            raise InvalidInputError("Fees must be greater than zero", details={"grade": grade})
        stored[grade] = str(value)
    return stored


class SchoolService:
    """Service layer for School operations"""

    @staticmethod
    async def get_school_by_id(db: AsyncSession, school_id: UUID) -> Optional[School]:
        result = await db.execute(select(School).where(School.id == school_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_school_or_404(db: AsyncSession, school_id: UUID) -> School:
        school = await SchoolService.get_school_by_id(db, school_id)
        if school is None:
            raise NotFoundError("School", school_id)
        return school

    @staticmethod
    async def list_schools(db: AsyncSession) -> List[School]:
        result = await db.execute(select(School).order_by(School.created_at))
        return list(result.scalars().all())

    @staticmethod
    async def list_school_ids(db: AsyncSession) -> List[UUID]:
        """School ids in onboarding order; the first is the default impersonation scope."""
        result = await db.execute(select(School.id).order_by(School.created_at))
        return list(result.scalars().all())

    @staticmethod
    async def onboard_school(db: AsyncSession, data: SchoolOnboard) -> School:
        """
        Create a school and its administrator account transactionally.
        """
        existing = await db.execute(select(School).where(School.name == data.name))
        if existing.scalar_one_or_none():
            raise InvalidInputError("A school with this name already exists", details={"name": data.name})

        school = School(
            name=data.name,
            address=data.address,
            contact_email=data.contact_email,
            contact_phone=data.contact_phone,
            fee_schedule=_schedule_to_storage(data.fee_schedule),
        )
        db.add(school)
        await db.flush()  # Flush to get school.id

        await UserService.create_user(
            db=db,
            email=data.admin_email,
            password=data.admin_password,
            name=data.admin_name,
            role=UserRole.SCHOOL_ADMINISTRATOR,
            school_id=school.id,
            phone_number=data.contact_phone,
            bank_details=data.bank_details,
            auto_commit=False,
        )

        await db.commit()
        await db.refresh(school)
        logger.info("School onboarded", extra={"school_id": school.id})
        return school

    @staticmethod
    async def get_fee_schedule(db: AsyncSession, school_id: UUID) -> Dict[str, Decimal]:
        school = await SchoolService.get_school_or_404(db, school_id)
        return {grade: Decimal(amount) for grade, amount in (school.fee_schedule or {}).items()}

    @staticmethod
    def _require_fee_manager(session: Session, school_id: UUID) -> None:
        if not session.can_approve_for(school_id):
            raise PermissionDeniedError("Only the school's administrator or the platform owner can manage fees")

    @staticmethod
    async def set_fee(
        db: AsyncSession, school_id: UUID, grade: str, amount: Decimal, session: Session
    ) -> Dict[str, Decimal]:
        """Publish (or replace) the fee for one grade."""
        SchoolService._require_fee_manager(session, school_id)
        school = await SchoolService.get_school_or_404(db, school_id)
        schedule = dict(school.fee_schedule or {})
        schedule.update(_schedule_to_storage({grade: amount}))
        school.fee_schedule = schedule

        await db.commit()
        logger.info("Fee published", extra={"school_id": school_id, "grade": grade, "actor_id": session.account_id})
        return await SchoolService.get_fee_schedule(db, school_id)

    @staticmethod
    async def remove_fee(db: AsyncSession, school_id: UUID, grade: str, session: Session) -> Dict[str, Decimal]:
        """Withdraw a grade's fee. Existing enrollments keep their locked total."""
        SchoolService._require_fee_manager(session, school_id)
        school = await SchoolService.get_school_or_404(db, school_id)
        schedule = dict(school.fee_schedule or {})
        if grade not in schedule:
            raise NotFoundError("Fee", grade)
        del schedule[grade]
        school.fee_schedule = schedule

        await db.commit()
        logger.info("Fee withdrawn", extra={"school_id": school_id, "grade": grade, "actor_id": session.account_id})
        return await SchoolService.get_fee_schedule(db, school_id)

    @staticmethod
    async def delete_school(db: AsyncSession, school_id: UUID) -> dict:
        return await CascadeService.delete_school(db, school_id)
