"""Unit tests for request and response schemas."""

import pytest
from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4
from pydantic import ValidationError

from schoolpay.domain.session import Session
from schoolpay.models.enums import EnrollmentStatus, FeeType, PlanFrequency, UserRole
from schoolpay.schemas.auth import SignupRequest
from schoolpay.schemas.enrollment import EnrollmentResponse
from schoolpay.schemas.school import FeeUpdate, SchoolOnboard
from schoolpay.schemas.session import SessionResponse


def test_signup_defaults_to_guardian():
    signup = SignupRequest(name="Parent", email="parent@example.com", password="pass1234")
    assert signup.role == UserRole.GUARDIAN


def test_signup_rejects_platform_owner():
    with pytest.raises(ValidationError):
        SignupRequest(name="X", email="x@example.com", password="pass1234", role="platform_owner")


def test_signup_rejects_blank_name():
    with pytest.raises(ValidationError):
        SignupRequest(name="", email="x@example.com", password="pass1234")


def test_fee_update_must_be_positive():
    with pytest.raises(ValidationError):
        FeeUpdate(grade="JSS1", amount=Decimal("0"))


def test_onboard_fee_schedule_parses_decimals():
    onboard = SchoolOnboard(
        name="Febison",
        admin_name="Bursar",
        admin_email="bursar@example.com",
        admin_password="pass1234",
        fee_schedule={"Basic 1": "120000", "JSS1": 180000},
    )
    assert onboard.fee_schedule == {"Basic 1": Decimal("120000"), "JSS1": Decimal("180000")}


def test_enrollment_response_exposes_remaining_balance():
    row = SimpleNamespace(
        id=uuid4(),
        owner_id=uuid4(),
        school_id=uuid4(),
        student_name="Ada",
        grade="Basic 1",
        fee_type=FeeType.TERM,
        installment_frequency=PlanFrequency.MONTHLY,
        total_fee=Decimal("120000"),
        paid_amount=Decimal("30000"),
        next_installment_amount=Decimal("30000"),
        next_due_date=None,
        term_start_date=None,
        term_end_date=None,
        raw_status=None,
        status=EnrollmentStatus.ACTIVE,
        avatar_url=None,
        created_at=datetime.now(timezone.utc),
    )
    response = EnrollmentResponse.model_validate(row)
    assert response.remaining_balance == Decimal("90000")
    assert response.model_dump()["remaining_balance"] == Decimal("90000")


def test_session_response_reflects_impersonation():
    target = uuid4()
    session = Session(
        account_id=uuid4(),
        own_role=UserRole.PLATFORM_OWNER,
        effective_role=UserRole.GUARDIAN,
        impersonated_account_id=target,
    )
    response = SessionResponse.from_session(session)

    assert response.state == "impersonating"
    assert response.is_impersonating
    assert response.impersonated_account_id == target
