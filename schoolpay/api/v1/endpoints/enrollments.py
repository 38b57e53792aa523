from typing import Any, List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from schoolpay.api import deps
from schoolpay.domain.ledger import CollectionSummary
from schoolpay.domain.session import Session
from schoolpay.models.enums import EnrollmentStatus
from schoolpay.schemas.enrollment import EnrollmentCreate, EnrollmentResponse, EnrollmentStatusUpdate
from schoolpay.schemas.responses import SuccessResponse
from schoolpay.schemas.transaction import TransactionResponse
from schoolpay.services.enrollment_service import EnrollmentService

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[EnrollmentResponse]])
async def list_enrollments(
    status: Optional[EnrollmentStatus] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    session: Session = Depends(deps.get_session),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Enrollments in the caller's scope.
    """
    enrollments = await EnrollmentService.list_enrollments(db, session, status=status, skip=skip, limit=limit)
    return SuccessResponse(data=enrollments)


@router.get("/defaulters", response_model=SuccessResponse[List[EnrollmentResponse]])
async def list_defaulters(
    session: Session = Depends(deps.get_session),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    enrollments = await EnrollmentService.list_defaulters(db, session)
    return SuccessResponse(data=enrollments)


@router.get("/summary", response_model=SuccessResponse[CollectionSummary])
async def collection_summary(
    session: Session = Depends(deps.get_session),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Collected, outstanding and next-due totals over the caller's scope.
    """
    summary = await EnrollmentService.collection_summary(db, session)
    return SuccessResponse(data=summary)


@router.get("/{enrollment_id}", response_model=SuccessResponse[EnrollmentResponse])
async def get_enrollment(
    enrollment_id: UUID,
    session: Session = Depends(deps.get_session),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    enrollment = await EnrollmentService.get_enrollment(db, enrollment_id, session)
    return SuccessResponse(data=enrollment)


@router.post("", response_model=SuccessResponse[TransactionResponse])
async def enroll(
    enrollment_in: EnrollmentCreate,
    session: Session = Depends(deps.get_session),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Enroll a student and submit the activation payment for approval.
    Returns the pending activation transaction.
    """
    _, activation = await EnrollmentService.enroll(db, enrollment_in, session)
    return SuccessResponse(data=activation, message="Enrollment submitted for approval")


@router.patch("/{enrollment_id}/status", response_model=SuccessResponse[EnrollmentResponse])
async def update_status(
    enrollment_id: UUID,
    status_in: EnrollmentStatusUpdate,
    session: Session = Depends(deps.get_session),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Record an upstream status (e.g. "Overdue"). School administrator or platform owner.
    """
    enrollment = await EnrollmentService.update_status(db, enrollment_id, status_in.raw_status, session)
    return SuccessResponse(data=enrollment, message="Status updated")


@router.delete("/{enrollment_id}", response_model=SuccessResponse)
async def delete_enrollment(
    enrollment_id: UUID,
    session: Session = Depends(deps.get_session),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    deleted = await EnrollmentService.delete_enrollment(db, enrollment_id, session)
    return SuccessResponse(data={"deleted": deleted}, message="Enrollment deleted")
