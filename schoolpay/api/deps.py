"""API Dependencies"""

from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.core.exceptions import AuthenticationError, PermissionDeniedError
from schoolpay.database import get_db
from schoolpay.domain.session import Session
from schoolpay.models.user import User
from schoolpay.services.session_service import SessionService

# Missing credentials are reported through AuthenticationError, not FastAPI's 403
security = HTTPBearer(auto_error=False)

__all__ = ["get_db", "get_session", "get_current_user", "require_platform_owner"]


async def get_session(
    request: Request,
    db: AsyncSession = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Session:
    """
    Resolve the caller's session from the bearer token.

    The session (with any impersonation still valid) and its account are kept
    on request.state for logging and for get_current_user.

    Raises:
        AuthenticationError: missing, invalid or revoked token
    """
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    user, session = await SessionService.resolve(db, credentials.credentials)
    request.state.user = user
    request.state.session = session
    return session


async def get_current_user(
    request: Request,
    session: Session = Depends(get_session),
) -> User:
    """The signed-in account itself, never the impersonated one."""
    return request.state.user


async def require_platform_owner(session: Session = Depends(get_session)) -> Session:
    if not session.is_platform_owner:
        raise PermissionDeniedError("Platform owner access required")
    return session
