"""Unit tests for LedgerService."""

import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, patch
from uuid import uuid4
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.core.exceptions import NotFoundError, PermissionDeniedError
from schoolpay.domain.session import Session
from schoolpay.models.enrollment import Enrollment
from schoolpay.models.enums import (
    EnrollmentStatus,
    TransactionKind,
    TransactionStatus,
    UserRole,
)
from schoolpay.models.notification import Notification
from schoolpay.models.school import School
from schoolpay.models.transaction import Transaction
from schoolpay.services.ledger_service import LedgerService

SCOPED_GET = "schoolpay.services.ledger_service.ScopeService.get"


def make_rows(total="120000", paid="0", amount="30000"):
    school_id, owner_id = uuid4(), uuid4()
    enrollment = Enrollment(
        id=uuid4(),
        owner_id=owner_id,
        school_id=school_id,
        student_name="Ada Okafor",
        grade="Basic 1",
        total_fee=Decimal(total),
        paid_amount=Decimal(paid),
        next_installment_amount=Decimal("30000"),
        raw_status=None,
        status=EnrollmentStatus.PENDING,
    )
    transaction = Transaction(
        id=uuid4(),
        payer_id=owner_id,
        enrollment_id=enrollment.id,
        school_id=school_id,
        kind=TransactionKind.INSTALLMENT,
        student_name="Ada Okafor",
        school_name="Febison",
        amount=Decimal(amount),
        platform_fee=Decimal("0"),
        status=TransactionStatus.PENDING,
        receipt_url=None,
    )
    return enrollment, transaction


def admin_for(school_id):
    return Session(
        account_id=uuid4(),
        own_role=UserRole.SCHOOL_ADMINISTRATOR,
        own_school_id=school_id,
        effective_role=UserRole.SCHOOL_ADMINISTRATOR,
        effective_school_id=school_id,
    )


def added(db, model):
    return [call.args[0] for call in db.add.call_args_list if isinstance(call.args[0], model)]


@pytest.mark.asyncio
async def test_approve_payment_credits_enrollment_and_commits_once():
    db = AsyncMock(spec=AsyncSession)
    enrollment, transaction = make_rows()
    db.get.return_value = enrollment

    with patch(SCOPED_GET, new_callable=AsyncMock) as mock_get:
        mock_get.return_value = transaction
        result = await LedgerService.approve_payment(db, transaction.id, admin_for(enrollment.school_id))

    assert result is transaction
    assert mock_get.await_args.kwargs["for_update"] is True
    assert db.get.await_args.kwargs["with_for_update"] is True
    assert transaction.status == TransactionStatus.SUCCESSFUL
    assert enrollment.paid_amount == Decimal("30000")
    assert enrollment.status == EnrollmentStatus.ACTIVE
    assert len(added(db, Notification)) == 1
    db.commit.assert_awaited_once()
    db.refresh.assert_awaited_once_with(transaction)


@pytest.mark.asyncio
async def test_failed_commit_rolls_back_and_reraises():
    db = AsyncMock(spec=AsyncSession)
    enrollment, transaction = make_rows()
    db.get.return_value = enrollment
    db.commit.side_effect = SQLAlchemyError("connection lost")

    with patch(SCOPED_GET, new_callable=AsyncMock) as mock_get:
        mock_get.return_value = transaction
        with pytest.raises(SQLAlchemyError):
            await LedgerService.approve_payment(db, transaction.id, admin_for(enrollment.school_id))

    db.rollback.assert_awaited_once()
    db.refresh.assert_not_awaited()


@pytest.mark.asyncio
async def test_approve_by_other_school_admin_writes_nothing():
    db = AsyncMock(spec=AsyncSession)
    enrollment, transaction = make_rows()
    db.get.return_value = enrollment

    with patch(SCOPED_GET, new_callable=AsyncMock) as mock_get:
        mock_get.return_value = transaction
        with pytest.raises(PermissionDeniedError):
            await LedgerService.approve_payment(db, transaction.id, admin_for(uuid4()))

    assert transaction.status == TransactionStatus.PENDING
    assert enrollment.paid_amount == Decimal("0")
    assert not db.add.called
    db.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_decline_payment_leaves_enrollment_alone():
    db = AsyncMock(spec=AsyncSession)
    enrollment, transaction = make_rows(paid="30000")

    with patch(SCOPED_GET, new_callable=AsyncMock) as mock_get:
        mock_get.return_value = transaction
        await LedgerService.decline_payment(db, transaction.id, admin_for(enrollment.school_id))

    assert mock_get.await_args.kwargs["for_update"] is True
    assert transaction.status == TransactionStatus.FAILED
    assert enrollment.paid_amount == Decimal("30000")
    db.get.assert_not_awaited()
    db.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_submit_payment_adds_pending_transaction_and_notification():
    db = AsyncMock(spec=AsyncSession)
    enrollment, _ = make_rows()
    db.get.return_value = School(id=enrollment.school_id, name="Febison")
    guardian = Session(account_id=enrollment.owner_id, own_role=UserRole.GUARDIAN, effective_role=UserRole.GUARDIAN)

    with patch(SCOPED_GET, new_callable=AsyncMock) as mock_get:
        mock_get.return_value = enrollment
        row = await LedgerService.submit_payment(db, enrollment.id, Decimal("10000"), guardian)

    assert isinstance(row, Transaction)
    assert row.status == TransactionStatus.PENDING
    assert row.school_name == "Febison"
    assert row.payer_id == enrollment.owner_id
    assert added(db, Transaction) == [row]
    assert len(added(db, Notification)) == 1
    assert enrollment.paid_amount == Decimal("0")


@pytest.mark.asyncio
async def test_out_of_scope_enrollment_is_not_found():
    db = AsyncMock(spec=AsyncSession)
    guardian = Session(account_id=uuid4(), own_role=UserRole.GUARDIAN, effective_role=UserRole.GUARDIAN)

    with patch(SCOPED_GET, new_callable=AsyncMock) as mock_get:
        mock_get.side_effect = NotFoundError("Enrollment")
        with pytest.raises(NotFoundError):
            await LedgerService.submit_payment(db, uuid4(), Decimal("10000"), guardian)

    db.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_guardian_direct_payment_locks_and_credits_enrollment():
    db = AsyncMock(spec=AsyncSession)
    enrollment, _ = make_rows()
    db.get.return_value = School(id=enrollment.school_id, name="Febison")
    guardian = Session(account_id=enrollment.owner_id, own_role=UserRole.GUARDIAN, effective_role=UserRole.GUARDIAN)

    with patch(SCOPED_GET, new_callable=AsyncMock) as mock_get:
        mock_get.return_value = enrollment
        row = await LedgerService.direct_payment(db, enrollment.id, Decimal("30000"), guardian)

    assert mock_get.await_args.kwargs["for_update"] is True
    assert row.status == TransactionStatus.SUCCESSFUL
    assert enrollment.paid_amount == Decimal("30000")
    assert enrollment.status == EnrollmentStatus.ACTIVE
    db.commit.assert_awaited_once()
