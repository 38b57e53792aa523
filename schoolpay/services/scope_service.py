"""Scoped Data Access - the access scope rules expressed as SQL"""

from typing import Any, List, Optional
from uuid import UUID
from sqlalchemy import false, or_, select, true
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.core.exceptions import NotFoundError
from schoolpay.domain import scope as scope_rules
from schoolpay.domain.session import Session
from schoolpay.models.enrollment import Enrollment
from schoolpay.models.enums import CollectionKind, UserRole
from schoolpay.models.notification import Notification
from schoolpay.models.transaction import Transaction

MODELS = {
    CollectionKind.ENROLLMENTS: Enrollment,
    CollectionKind.TRANSACTIONS: Transaction,
    CollectionKind.NOTIFICATIONS: Notification,
}

RESOURCE_NAMES = {
    CollectionKind.ENROLLMENTS: "Enrollment",
    CollectionKind.TRANSACTIONS: "Transaction",
    CollectionKind.NOTIFICATIONS: "Notification",
}


class ScopeService:
    """Loads only the rows the current session may see"""

    @staticmethod
    def where_clause(kind: CollectionKind, session: Session):
        """
        SQL criterion matching domain.scope.is_visible for one collection.
        Rows outside it are never loaded.
        """
        kind = CollectionKind(kind)
        model = MODELS[kind]
        if not session.is_authenticated or session.effective_role is None:
            return false()

        impersonated = session.impersonated_account_id if session.is_impersonating else None
        viewer_id = impersonated or session.account_id
        owner_column = getattr(model, scope_rules.OWNER_ATTRIBUTE[kind])
        owner_sees_all = session.effective_role == UserRole.PLATFORM_OWNER and impersonated is None

        if kind == CollectionKind.NOTIFICATIONS:
            if owner_sees_all:
                return true()
            return or_(owner_column.is_(None), owner_column == viewer_id)

        if owner_sees_all:
            return true()
        if session.effective_role == UserRole.SCHOOL_ADMINISTRATOR:
            if session.effective_school_id is None:
                return false()
            return model.school_id == session.effective_school_id
        return owner_column == viewer_id

    @staticmethod
    async def list(
        db: AsyncSession,
        kind: CollectionKind,
        session: Session,
        *criteria: Any,
        order_by: Any = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Any]:
        """List a collection within the session's scope, newest first by default."""
        kind = CollectionKind(kind)
        model = MODELS[kind]
        query = select(model).where(ScopeService.where_clause(kind, session), *criteria)
        query = query.order_by(order_by if order_by is not None else model.created_at.desc())
        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)

        result = await db.execute(query)
        # Re-filtering already scoped rows is a no-op; it guards the SQL rules
        return scope_rules.scope(kind, result.scalars().all(), session)

    @staticmethod
    async def get(
        db: AsyncSession,
        kind: CollectionKind,
        record_id: UUID,
        session: Session,
        for_update: bool = False,
    ) -> Any:
        """
        Load one record in scope. With for_update the row stays locked until
        the caller commits or rolls back.

        Raises:
            NotFoundError: unknown id, or a record the session may not see
        """
        kind = CollectionKind(kind)
        model = MODELS[kind]
        query = select(model).where(model.id == record_id, ScopeService.where_clause(kind, session))
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await db.execute(query)
        record = result.scalar_one_or_none()
        if record is None or not scope_rules.in_scope(kind, record, session):
            raise NotFoundError(RESOURCE_NAMES[kind], record_id)
        return record
