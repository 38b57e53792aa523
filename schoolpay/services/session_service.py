"""
Session Service

Bridges bearer tokens and the Session aggregate: issues tokens for a
session, rebuilds the session from a token on every request (dropping
impersonation whose target has gone away) and resolves impersonation
targets against the database.
"""

from typing import Tuple
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.core.exceptions import AuthenticationError, NotFoundError
from schoolpay.core.logging import get_logger
from schoolpay.core.security import create_access_token, create_refresh_token, decode_token
from schoolpay.domain.session import Session, SessionController
from schoolpay.models.enums import UserRole
from schoolpay.models.school import School
from schoolpay.models.user import User
from schoolpay.schemas.session import ImpersonationRequest
from schoolpay.services.school_service import SchoolService
from schoolpay.services.user_service import UserService

logger = get_logger(__name__)


class SessionService:

    @staticmethod
    def issue_tokens(session: Session) -> Tuple[str, str]:
        """(access, refresh) tokens for a session"""
        claims = session.to_claims()
        return create_access_token(claims), create_refresh_token(claims)

    @staticmethod
    async def resolve(db: AsyncSession, token: str) -> Tuple[User, Session]:
        """
        Rebuild the caller's session from an access token.

        Raises:
            AuthenticationError: bad or expired token, unknown or inactive
                account, or a token revoked by logout
        """
        payload = decode_token(token)
        if not payload or not payload.get("sub"):
            raise AuthenticationError()
        try:
            user_id = UUID(payload["sub"])
        except ValueError:
            raise AuthenticationError("Invalid user ID")

        user = await UserService.get_user_by_id(db, user_id)
        if not user or not user.is_active:
            raise AuthenticationError("Account not found or inactive")
        if payload.get("sv", 0) != (user.session_version or 0):
            raise AuthenticationError("Session has been revoked")

        session = Session.from_claims(user, payload)
        if not session.is_impersonating:
            return user, session

        target_exists = True
        if session.impersonated_account_id is not None:
            target_exists = await db.get(User, session.impersonated_account_id) is not None
        scope_exists = True
        if session.effective_school_id is not None:
            scope_exists = await db.get(School, session.effective_school_id) is not None

        controller = SessionController(session)
        return user, controller.refresh(target_exists=target_exists, scope_exists=scope_exists)

    @staticmethod
    async def enter_impersonation(db: AsyncSession, session: Session, request: ImpersonationRequest) -> Session:
        """
        Resolve the named target and school, then switch the session's view.

        Raises:
            IllegalTransitionError: caller is not a platform owner
            NotFoundError: a named account or school does not exist
        """
        controller = SessionController(session)
        target_school_id = None
        available = ()
        if session.is_platform_owner:
            if request.account_id is not None:
                target = await UserService.get_user_by_id(db, request.account_id)
                if target is None:
                    raise NotFoundError("User", request.account_id)
                target_school_id = target.school_id
            if request.school_id is not None:
                await SchoolService.get_school_or_404(db, request.school_id)
            elif target_school_id is None and request.role == UserRole.SCHOOL_ADMINISTRATOR:
                available = await SchoolService.list_school_ids(db)

        return controller.enter_impersonation(
            request.role,
            school_id=request.school_id,
            account_id=request.account_id,
            target_school_id=target_school_id,
            available_school_ids=available,
        )

    @staticmethod
    def exit_impersonation(session: Session) -> Session:
        if session.is_impersonating:
            logger.info("Exited impersonation", extra={"actor_id": session.account_id})
        return SessionController(session).exit_impersonation()

    @staticmethod
    async def logout(db: AsyncSession, user: User) -> Session:
        """Revoke issued tokens and end the session."""
        await UserService.revoke_sessions(db, user)
        return SessionController(Session.for_account(user)).logout()
