"""
Actor sessions and impersonation.

A Session is an immutable snapshot of who is signed in and whose view they
are looking at. SessionController owns the transitions between

    logged out -> authenticated(role) -> authenticated(role, impersonating)

Only a platform owner may impersonate; doing so never changes the owner's
stored role. Sessions travel between requests as token claims and are
re-validated on every read (see refresh).
"""

from typing import Any, Dict, Optional, Sequence
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from schoolpay.core.exceptions import IllegalTransitionError, InvalidInputError
from schoolpay.core.logging import get_logger
from schoolpay.models.enums import UserRole

logger = get_logger(__name__)


class Session(BaseModel):
    """Effective identity, role and institution scope of the current actor"""
    model_config = ConfigDict(frozen=True)

    account_id: Optional[UUID] = None
    own_role: Optional[UserRole] = None
    own_school_id: Optional[UUID] = None
    session_version: int = 0

    effective_role: Optional[UserRole] = None
    effective_school_id: Optional[UUID] = None
    impersonated_account_id: Optional[UUID] = None

    @classmethod
    def logged_out(cls) -> "Session":
        return cls()

    @classmethod
    def for_account(cls, account: Any) -> "Session":
        """Fresh authenticated session for an account, with no impersonation."""
        return cls(
            account_id=account.id,
            own_role=account.role,
            own_school_id=account.school_id,
            session_version=account.session_version or 0,
            effective_role=account.role,
            effective_school_id=account.school_id,
        )

    @property
    def is_authenticated(self) -> bool:
        return self.account_id is not None

    @property
    def is_platform_owner(self) -> bool:
        return self.own_role == UserRole.PLATFORM_OWNER

    @property
    def is_impersonating(self) -> bool:
        return self.is_platform_owner and (
            self.effective_role != UserRole.PLATFORM_OWNER
            or self.impersonated_account_id is not None
        )

    @property
    def sees_everything(self) -> bool:
        """Platform owner acting as itself"""
        return self.is_platform_owner and not self.is_impersonating

    @property
    def effective_account_id(self) -> Optional[UUID]:
        return self.impersonated_account_id or self.account_id

    @property
    def state(self) -> str:
        if not self.is_authenticated:
            return "logged_out"
        return "impersonating" if self.is_impersonating else "authenticated"

    def can_approve_for(self, school_id: Optional[UUID]) -> bool:
        """
        Approvers are decided by the stored role, not the acting role: the
        platform owner always, a school administrator only for their own school.
        """
        if self.own_role == UserRole.PLATFORM_OWNER:
            return True
        return (
            self.own_role == UserRole.SCHOOL_ADMINISTRATOR
            and school_id is not None
            and self.own_school_id == school_id
        )

    def to_claims(self) -> Dict[str, Any]:
        """Token claims for this session. Impersonation claims only when active."""
        claims: Dict[str, Any] = {
            "sub": str(self.account_id) if self.account_id else None,
            "role": self.own_role.value if self.own_role else None,
            "school_id": str(self.own_school_id) if self.own_school_id else None,
            "sv": self.session_version,
        }
        if self.is_impersonating:
            claims["acting_role"] = self.effective_role.value
            claims["acting_school_id"] = str(self.effective_school_id) if self.effective_school_id else None
            claims["acting_user_id"] = str(self.impersonated_account_id) if self.impersonated_account_id else None
        return claims

    @classmethod
    def from_claims(cls, account: Any, claims: Dict[str, Any]) -> "Session":
        """
        Rebuild a session for ``account`` from token claims.

        Role and affiliation always come from the stored account; impersonation
        claims are honoured only for platform owners and dropped if malformed.
        """
        base = cls.for_account(account)
        acting_role = claims.get("acting_role")
        if not acting_role or not base.is_platform_owner:
            return base
        try:
            school_id = claims.get("acting_school_id")
            target_id = claims.get("acting_user_id")
            return base.model_copy(update={
                "effective_role": UserRole(acting_role),
                "effective_school_id": UUID(school_id) if school_id else None,
                "impersonated_account_id": UUID(target_id) if target_id else None,
            })
        except ValueError:
            logger.warning("Dropping malformed impersonation claims", extra={"actor_id": account.id})
            return base


class SessionController:
    """State machine over a Session. Each transition returns the new session."""

    def __init__(self, session: Optional[Session] = None):
        self._session = session or Session.logged_out()

    @property
    def session(self) -> Session:
        return self._session

    def login(self, account: Any) -> Session:
        self._session = Session.for_account(account)
        return self._session

    def signup(self, account: Any) -> Session:
        """A new account signs straight in."""
        return self.login(account)

    def logout(self) -> Session:
        self._session = Session.logged_out()
        return self._session

    def enter_impersonation(
        self,
        role: Any,
        school_id: Optional[UUID] = None,
        account_id: Optional[UUID] = None,
        target_school_id: Optional[UUID] = None,
        available_school_ids: Sequence[UUID] = (),
    ) -> Session:
        """
        Act as another role, optionally scoped to a school or targeting an account.

        Args:
            role: Role to act as
            school_id: Explicit institution scope
            account_id: Account whose view to adopt
            target_school_id: School of ``account_id`` (resolved by the caller)
            available_school_ids: Known schools, used when no scope was given

        Raises:
            IllegalTransitionError: caller is not a platform owner
            InvalidInputError: unknown role
        """
        current = self._session
        if not current.is_authenticated:
            raise IllegalTransitionError("Sign in before acting as another role", current_state=current.state)
        if not current.is_platform_owner:
            raise IllegalTransitionError(
                "Only the platform owner may act as another role",
                current_state=current.own_role,
            )
        try:
            role = UserRole(role)
        except ValueError:
            raise InvalidInputError(f"Unknown role: {role}", details={"role": str(role)})

        if role == UserRole.PLATFORM_OWNER:
            return self.exit_impersonation()

        if role == UserRole.SCHOOL_ADMINISTRATOR:
            scope = school_id or target_school_id or next(iter(available_school_ids), None)
            if scope is None:
                # Nothing to administer yet: fall back to a plain guardian view
                self._session = self._owner_view().model_copy(update={"effective_role": UserRole.GUARDIAN})
            else:
                self._session = self._owner_view().model_copy(update={
                    "effective_role": role,
                    "effective_school_id": scope,
                    "impersonated_account_id": account_id,
                })
        else:
            self._session = self._owner_view().model_copy(update={
                "effective_role": role,
                "effective_school_id": None,
                "impersonated_account_id": account_id,
            })

        logger.info(
            "Entered impersonation",
            extra={
                "actor_id": current.account_id,
                "acting_as": self._session.effective_role.value,
                "school_id": self._session.effective_school_id,
            },
        )
        return self._session

    def exit_impersonation(self) -> Session:
        if self._session.is_authenticated:
            self._session = self._owner_view()
        return self._session

    def refresh(self, target_exists: bool = True, scope_exists: bool = True) -> Session:
        """
        Drop impersonation that can no longer be honoured because the target
        account or the scoped school was deleted.
        """
        current = self._session
        if not current.is_impersonating:
            return current
        stale_target = current.impersonated_account_id is not None and not target_exists
        stale_scope = current.effective_school_id is not None and not scope_exists
        if stale_target or stale_scope:
            logger.info(
                "Clearing stale impersonation",
                extra={"actor_id": current.account_id, "acting_as": current.effective_role.value},
            )
            self._session = self._owner_view()
        return self._session

    def _owner_view(self) -> Session:
        current = self._session
        return current.model_copy(update={
            "effective_role": current.own_role,
            "effective_school_id": current.own_school_id,
            "impersonated_account_id": None,
        })
