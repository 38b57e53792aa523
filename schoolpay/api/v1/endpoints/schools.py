from typing import Any, List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from schoolpay.api import deps
from schoolpay.domain.session import Session
from schoolpay.schemas.responses import SuccessResponse
from schoolpay.schemas.school import (
    FeeScheduleResponse,
    FeeUpdate,
    SchoolOnboard,
    SchoolResponse,
)
from schoolpay.services.school_service import SchoolService

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[SchoolResponse]])
async def list_schools(
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Onboarded schools with their published fees. Public, used by enrollment forms.
    """
    schools = await SchoolService.list_schools(db)
    return SuccessResponse(data=schools)


@router.post("", response_model=SuccessResponse[SchoolResponse])
async def onboard_school(
    school_in: SchoolOnboard,
    session: Session = Depends(deps.require_platform_owner),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Create a school together with its administrator account. Platform owner only.
    """
    school = await SchoolService.onboard_school(db, school_in)
    return SuccessResponse(data=school, message="School onboarded successfully")


@router.delete("/{school_id}", response_model=SuccessResponse)
async def delete_school(
    school_id: UUID,
    session: Session = Depends(deps.require_platform_owner),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Delete a school with its enrollments, transactions and their notifications.
    """
    deleted = await SchoolService.delete_school(db, school_id)
    return SuccessResponse(data={"deleted": deleted}, message="School deleted")


@router.get("/{school_id}/fees", response_model=SuccessResponse[FeeScheduleResponse])
async def get_fees(
    school_id: UUID,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    fees = await SchoolService.get_fee_schedule(db, school_id)
    return SuccessResponse(data=FeeScheduleResponse(school_id=school_id, fees=fees))


@router.put("/{school_id}/fees", response_model=SuccessResponse[FeeScheduleResponse])
async def set_fee(
    school_id: UUID,
    fee_in: FeeUpdate,
    session: Session = Depends(deps.get_session),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Publish the fee for one grade. School administrator of this school, or the platform owner.
    """
    fees = await SchoolService.set_fee(db, school_id, fee_in.grade, fee_in.amount, session)
    return SuccessResponse(
        data=FeeScheduleResponse(school_id=school_id, fees=fees),
        message="Fee published",
    )


@router.delete("/{school_id}/fees/{grade}", response_model=SuccessResponse[FeeScheduleResponse])
async def remove_fee(
    school_id: UUID,
    grade: str,
    session: Session = Depends(deps.get_session),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    fees = await SchoolService.remove_fee(db, school_id, grade, session)
    return SuccessResponse(
        data=FeeScheduleResponse(school_id=school_id, fees=fees),
        message="Fee removed",
    )
