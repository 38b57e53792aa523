"""
Access scope resolution.

Filters enrollments, transactions and notifications down to what the current
actor may see. The same rules are applied in SQL by ScopeService; applying
them again here to already-scoped rows is harmless (scoping is idempotent)
and never widens access.
"""

from typing import Any, Iterable, List, Optional
from uuid import UUID

from schoolpay.domain.session import Session
from schoolpay.models.enums import CollectionKind, UserRole

# Attribute naming the owning account, per collection
OWNER_ATTRIBUTE = {
    CollectionKind.ENROLLMENTS: "owner_id",
    CollectionKind.TRANSACTIONS: "payer_id",
    CollectionKind.NOTIFICATIONS: "user_id",
}


def is_visible(
    kind: CollectionKind,
    record: Any,
    actor_id: Optional[UUID],
    effective_role: Optional[UserRole],
    impersonated_account_id: Optional[UUID] = None,
    institution_scope_id: Optional[UUID] = None,
) -> bool:
    """Whether one record is inside the actor's scope."""
    if actor_id is None or effective_role is None:
        return False

    kind = CollectionKind(kind)
    viewer_id = impersonated_account_id or actor_id
    owner_id = getattr(record, OWNER_ATTRIBUTE[kind], None)
    owner_sees_all = effective_role == UserRole.PLATFORM_OWNER and impersonated_account_id is None

    if kind == CollectionKind.NOTIFICATIONS:
        # Broadcasts reach everyone
        return owner_id is None or owner_sees_all or owner_id == viewer_id

    if owner_sees_all:
        return True
    if effective_role == UserRole.SCHOOL_ADMINISTRATOR:
        school_id = getattr(record, "school_id", None)
        return institution_scope_id is not None and school_id == institution_scope_id
    return owner_id is not None and owner_id == viewer_id


def scope_records(
    kind: CollectionKind,
    records: Iterable[Any],
    actor_id: Optional[UUID],
    effective_role: Optional[UserRole],
    impersonated_account_id: Optional[UUID] = None,
    institution_scope_id: Optional[UUID] = None,
) -> List[Any]:
    """
    Filter a collection to the actor's scope.

    Rules:
        - platform owner, not impersonating: everything
        - school administrator: records of ``institution_scope_id`` only
        - guardian / student: records owned by ``impersonated_account_id`` or the actor
        - notifications: the viewer's own plus every broadcast
    """
    return [
        record for record in records
        if is_visible(kind, record, actor_id, effective_role, impersonated_account_id, institution_scope_id)
    ]


def scope(kind: CollectionKind, records: Iterable[Any], session: Session) -> List[Any]:
    """scope_records driven by a Session."""
    return scope_records(
        kind,
        records,
        session.account_id,
        session.effective_role,
        session.impersonated_account_id if session.is_impersonating else None,
        session.effective_school_id,
    )


def in_scope(kind: CollectionKind, record: Any, session: Session) -> bool:
    return bool(scope(kind, [record], session))
