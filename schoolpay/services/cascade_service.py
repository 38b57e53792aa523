"""
Cascade Deletes

One routine per root. Dependents go in a fixed order (transactions, then
enrollments, then notifications and broadcast read marks, then the root)
and every dependent collection is re-counted afterwards. Nothing is
committed unless the re-count comes back empty.
"""

from typing import Dict, List
from uuid import UUID
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.core.exceptions import CascadeDeleteError, NotFoundError
from schoolpay.core.logging import get_logger
from schoolpay.models.enrollment import Enrollment
from schoolpay.models.notification import Notification, notification_reads
from schoolpay.models.school import School
from schoolpay.models.transaction import Transaction
from schoolpay.models.user import User

logger = get_logger(__name__)


async def _count(db: AsyncSession, model, criterion) -> int:
    result = await db.execute(select(func.count()).select_from(model).where(criterion))
    return result.scalar_one() or 0


async def _delete(db: AsyncSession, model, criterion) -> int:
    result = await db.execute(
        delete(model).where(criterion).execution_options(synchronize_session=False)
    )
    return result.rowcount or 0


class CascadeService:
    """Explicit, verified cascade deletes for schools, accounts and enrollments"""

    @staticmethod
    async def _enrollment_ids(db: AsyncSession, criterion) -> List[UUID]:
        result = await db.execute(select(Enrollment.id).where(criterion))
        return list(result.scalars().all())

    @staticmethod
    async def _finish(
        db: AsyncSession,
        root: str,
        root_id: UUID,
        deleted: Dict[str, int],
        remaining_criteria: Dict[str, tuple],
    ) -> Dict[str, int]:
        """Re-count dependents, then commit or roll back."""
        await db.flush()
        remaining = {}
        for name, (model, criterion) in remaining_criteria.items():
            count = await _count(db, model, criterion)
            if count:
                remaining[name] = count

        if remaining:
            await db.rollback()
            logger.error(
                "Cascade delete incomplete",
                extra={"root": root, "root_id": root_id, "remaining": remaining},
            )
            raise CascadeDeleteError(root, root_id, remaining)

        try:
            await db.commit()
        except Exception:
            await db.rollback()
            logger.error("Cascade delete commit failed", extra={"root": root, "root_id": root_id}, exc_info=True)
            raise

        logger.info("Cascade delete complete", extra={"root": root, "root_id": root_id, "deleted": deleted})
        return deleted

    @staticmethod
    async def delete_school(db: AsyncSession, school_id: UUID) -> Dict[str, int]:
        """
        Delete a school with its enrollments, their transactions and notifications.
        Administrator accounts survive without an affiliation.

        Returns:
            Deleted row counts per collection
        """
        school = await db.get(School, school_id)
        if school is None:
            raise NotFoundError("School", school_id)

        enrollment_ids = await CascadeService._enrollment_ids(db, Enrollment.school_id == school_id)
        transactions = or_(Transaction.school_id == school_id, Transaction.enrollment_id.in_(enrollment_ids))
        enrollments = Enrollment.school_id == school_id
        notifications = Notification.enrollment_id.in_(enrollment_ids)

        deleted = {
            "transactions": await _delete(db, Transaction, transactions),
            "enrollments": await _delete(db, Enrollment, enrollments),
            "notifications": await _delete(db, Notification, notifications),
        }
        await db.execute(
            update(User).where(User.school_id == school_id).values(school_id=None)
            .execution_options(synchronize_session=False)
        )
        await db.delete(school)

        return await CascadeService._finish(db, "school", school_id, deleted, {
            "transactions": (Transaction, transactions),
            "enrollments": (Enrollment, enrollments),
            "notifications": (Notification, notifications),
            "schools": (School, School.id == school_id),
        })

    @staticmethod
    async def delete_account(db: AsyncSession, account_id: UUID) -> Dict[str, int]:
        """Delete an account with everything it owns or paid."""
        account = await db.get(User, account_id)
        if account is None:
            raise NotFoundError("User", account_id)

        enrollment_ids = await CascadeService._enrollment_ids(db, Enrollment.owner_id == account_id)
        transactions = or_(Transaction.payer_id == account_id, Transaction.enrollment_id.in_(enrollment_ids))
        enrollments = Enrollment.owner_id == account_id
        notifications = or_(Notification.user_id == account_id, Notification.enrollment_id.in_(enrollment_ids))
        reads = notification_reads.c.user_id == account_id

        deleted = {
            "transactions": await _delete(db, Transaction, transactions),
            "enrollments": await _delete(db, Enrollment, enrollments),
            "notifications": await _delete(db, Notification, notifications),
            "notification_reads": await _delete(db, notification_reads, reads),
        }
        await db.delete(account)

        return await CascadeService._finish(db, "account", account_id, deleted, {
            "transactions": (Transaction, transactions),
            "enrollments": (Enrollment, enrollments),
            "notifications": (Notification, notifications),
            "notification_reads": (notification_reads, reads),
            "users": (User, User.id == account_id),
        })

    @staticmethod
    async def delete_enrollment(db: AsyncSession, enrollment_id: UUID) -> Dict[str, int]:
        """Delete one enrollment: transactions, notifications, then the enrollment."""
        enrollment = await db.get(Enrollment, enrollment_id)
        if enrollment is None:
            raise NotFoundError("Enrollment", enrollment_id)

        transactions = Transaction.enrollment_id == enrollment_id
        notifications = Notification.enrollment_id == enrollment_id

        deleted = {
            "transactions": await _delete(db, Transaction, transactions),
            "notifications": await _delete(db, Notification, notifications),
        }
        await db.delete(enrollment)
        deleted["enrollments"] = 1

        return await CascadeService._finish(db, "enrollment", enrollment_id, deleted, {
            "transactions": (Transaction, transactions),
            "notifications": (Notification, notifications),
            "enrollments": (Enrollment, Enrollment.id == enrollment_id),
        })
