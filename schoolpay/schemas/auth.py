from typing import Optional
from uuid import UUID
from pydantic import BaseModel, EmailStr, Field, field_validator

from schoolpay.models.enums import UserRole


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class BankDetails(BaseModel):
    bank_name: str = Field(..., min_length=1)
    account_name: str = Field(..., min_length=1)
    account_number: str = Field(..., min_length=6, max_length=32)


class SignupRequest(BaseModel):
    """Self-service signup. The platform owner account is seeded, never signed up."""
    name: str = Field(..., min_length=1, description="Display name cannot be empty")
    email: EmailStr
    phone_number: Optional[str] = None
    password: str = Field(..., min_length=4)
    role: UserRole = UserRole.GUARDIAN
    school_id: Optional[UUID] = None
    bank_details: Optional[BankDetails] = None

    @field_validator("role")
    @classmethod
    def no_owner_signup(cls, v: UserRole) -> UserRole:
        if v == UserRole.PLATFORM_OWNER:
            raise ValueError("platform_owner accounts cannot be created by signup")
        return v


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    role: str
    user_id: str
    school_id: Optional[str] = None
