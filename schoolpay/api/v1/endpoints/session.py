from typing import Any
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.api import deps
from schoolpay.domain.session import Session
from schoolpay.schemas.responses import SuccessResponse
from schoolpay.schemas.session import ImpersonationRequest, SessionResponse, SessionTokenResponse
from schoolpay.services.session_service import SessionService

router = APIRouter()


def _with_token(session: Session) -> SessionTokenResponse:
    access_token, _ = SessionService.issue_tokens(session)
    return SessionTokenResponse(
        **SessionResponse.from_session(session).model_dump(),
        access_token=access_token,
    )


@router.get("", response_model=SuccessResponse[SessionResponse])
async def get_session_state(
    session: Session = Depends(deps.get_session),
) -> Any:
    """
    Current effective role and scope. Impersonation of a deleted account
    or school has already been cleared here.
    """
    return SuccessResponse(data=SessionResponse.from_session(session))


@router.post("/impersonate", response_model=SuccessResponse[SessionTokenResponse])
async def enter_impersonation(
    impersonation_in: ImpersonationRequest,
    session: Session = Depends(deps.get_session),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Act as another role. Platform owner only.
    The returned access token carries the new view.
    """
    new_session = await SessionService.enter_impersonation(db, session, impersonation_in)
    return SuccessResponse(data=_with_token(new_session), message="Impersonation started")


@router.delete("/impersonate", response_model=SuccessResponse[SessionTokenResponse])
async def exit_impersonation(
    session: Session = Depends(deps.get_session),
) -> Any:
    """
    Return to the account's own view.
    """
    new_session = SessionService.exit_impersonation(session)
    return SuccessResponse(data=_with_token(new_session), message="Impersonation ended")
