from typing import Optional
from uuid import UUID
from pydantic import BaseModel

from schoolpay.domain.session import Session
from schoolpay.models.enums import UserRole


class ImpersonationRequest(BaseModel):
    role: UserRole
    school_id: Optional[UUID] = None
    account_id: Optional[UUID] = None


class SessionResponse(BaseModel):
    state: str
    account_id: Optional[UUID] = None
    own_role: Optional[UserRole] = None
    effective_role: Optional[UserRole] = None
    effective_school_id: Optional[UUID] = None
    impersonated_account_id: Optional[UUID] = None
    is_impersonating: bool = False

    @classmethod
    def from_session(cls, session: Session) -> "SessionResponse":
        return cls(
            state=session.state,
            account_id=session.account_id,
            own_role=session.own_role,
            effective_role=session.effective_role,
            effective_school_id=session.effective_school_id,
            impersonated_account_id=session.impersonated_account_id,
            is_impersonating=session.is_impersonating,
        )


class SessionTokenResponse(SessionResponse):
    """Session state plus a fresh access token carrying it"""
    access_token: Optional[str] = None
    token_type: str = "bearer"
