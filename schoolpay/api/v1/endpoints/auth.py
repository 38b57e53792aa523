from typing import Any
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.api import deps
from schoolpay.domain.session import SessionController
from schoolpay.models.user import User
from schoolpay.schemas.auth import LoginRequest, SignupRequest, Token
from schoolpay.schemas.responses import SuccessResponse
from schoolpay.schemas.session import SessionResponse
from schoolpay.services.session_service import SessionService
from schoolpay.services.user_service import UserService

router = APIRouter()


def _token_for(user: User, session) -> Token:
    access_token, refresh_token = SessionService.issue_tokens(session)
    return Token(
        access_token=access_token,
        refresh_token=refresh_token,
        token_type="bearer",
        role=user.role.value,
        user_id=str(user.id),
        school_id=str(user.school_id) if user.school_id else None,
    )


@router.post("/signup", response_model=SuccessResponse[Token])
async def signup(
    signup_in: SignupRequest,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Create a guardian, student or school administrator account and sign in.
    """
    user = await UserService.signup(db, signup_in)
    session = SessionController().signup(user)
    return SuccessResponse(data=_token_for(user, session), message="Account created")


@router.post("/login", response_model=SuccessResponse[Token])
async def login(
    login_data: LoginRequest,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Unified login for all roles.
    Returns JWT access token, refresh token, and user role.
    """
    user = await UserService.authenticate_user(db, email=login_data.email, password=login_data.password)
    session = SessionController().login(user)
    return SuccessResponse(data=_token_for(user, session), message="Login successful")


@router.post("/logout", response_model=SuccessResponse[SessionResponse])
async def logout(
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    End the session. Every token issued to this account so far stops working.
    """
    session = await SessionService.logout(db, current_user)
    return SuccessResponse(data=SessionResponse.from_session(session), message="Logged out")
