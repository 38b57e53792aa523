from typing import Any, List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from schoolpay.api import deps
from schoolpay.domain.session import Session
from schoolpay.models.enums import UserRole
from schoolpay.models.user import User
from schoolpay.schemas.responses import SuccessResponse
from schoolpay.schemas.user import UserResponse, UserUpdate
from schoolpay.services.user_service import UserService

router = APIRouter()


@router.get("/me", response_model=SuccessResponse[UserResponse])
async def get_profile(
    current_user: User = Depends(deps.get_current_user)
) -> Any:
    """
    Get current user profile.
    """
    return SuccessResponse(data=current_user)


@router.patch("/me", response_model=SuccessResponse[UserResponse])
async def update_profile(
    user_in: UserUpdate,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Update profile and settlement bank details.
    """
    user = await UserService.update_profile(db, current_user, user_in)
    return SuccessResponse(data=user, message="Profile updated successfully")


@router.get("", response_model=SuccessResponse[List[UserResponse]])
async def list_users(
    role: Optional[UserRole] = None,
    school_id: Optional[UUID] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    session: Session = Depends(deps.require_platform_owner),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    users = await UserService.list_users(db, role=role, school_id=school_id, skip=skip, limit=limit)
    return SuccessResponse(data=users)


@router.delete("/{user_id}", response_model=SuccessResponse)
async def delete_user(
    user_id: UUID,
    session: Session = Depends(deps.require_platform_owner),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Delete an account with its enrollments, transactions and notifications. Platform owner only.
    """
    deleted = await UserService.delete_user(db, user_id, session.account_id)
    return SuccessResponse(data={"deleted": deleted}, message="User deleted")
