from typing import Any, List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from schoolpay.api import deps
from schoolpay.domain.session import Session
from schoolpay.models.enums import TransactionStatus
from schoolpay.schemas.responses import SuccessResponse
from schoolpay.schemas.transaction import DirectPaymentCreate, PaymentCreate, TransactionResponse
from schoolpay.services.ledger_service import LedgerService

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[TransactionResponse]])
async def list_payments(
    status: Optional[TransactionStatus] = None,
    enrollment_id: Optional[UUID] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    session: Session = Depends(deps.get_session),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Transactions in the caller's scope, newest first.
    """
    transactions = await LedgerService.list_payments(
        db, session, status=status, enrollment_id=enrollment_id, skip=skip, limit=limit
    )
    return SuccessResponse(data=transactions)


@router.get("/pending", response_model=SuccessResponse[List[TransactionResponse]])
async def list_pending_payments(
    session: Session = Depends(deps.get_session),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Payments awaiting verification (the approval queue).
    """
    transactions = await LedgerService.list_payments(db, session, status=TransactionStatus.PENDING)
    return SuccessResponse(data=transactions)


@router.post("", response_model=SuccessResponse[TransactionResponse])
async def submit_payment(
    payment_in: PaymentCreate,
    session: Session = Depends(deps.get_session),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    transaction = await LedgerService.submit_payment(
        db, payment_in.enrollment_id, payment_in.amount, session, receipt_url=payment_in.receipt_url
    )
    return SuccessResponse(data=transaction, message="Payment submitted for verification")


@router.post("/direct", response_model=SuccessResponse[TransactionResponse])
async def direct_payment(
    payment_in: DirectPaymentCreate,
    session: Session = Depends(deps.get_session),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Record an already confirmed payment. The enrollment's owner, its school administrator or the platform owner.
    """
    transaction = await LedgerService.direct_payment(
        db, payment_in.enrollment_id, payment_in.amount, session, receipt_url=payment_in.receipt_url
    )
    return SuccessResponse(data=transaction, message="Payment recorded")


@router.post("/{transaction_id}/approve", response_model=SuccessResponse[TransactionResponse])
async def approve_payment(
    transaction_id: UUID,
    session: Session = Depends(deps.get_session),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    transaction = await LedgerService.approve_payment(db, transaction_id, session)
    return SuccessResponse(data=transaction, message="Payment approved")


@router.post("/{transaction_id}/decline", response_model=SuccessResponse[TransactionResponse])
async def decline_payment(
    transaction_id: UUID,
    session: Session = Depends(deps.get_session),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    transaction = await LedgerService.decline_payment(db, transaction_id, session)
    return SuccessResponse(data=transaction, message="Payment declined")
