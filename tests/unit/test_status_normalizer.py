"""Unit tests for canonical status derivation."""

from decimal import Decimal

import pytest

from schoolpay.domain.status import DEFAULT_VOCABULARY, StatusVocabulary, normalize_status, normalize_token
from schoolpay.models.enums import EnrollmentStatus


def test_failure_token_outranks_zero_balance():
    assert normalize_status("FAILED", 0, 500) == EnrollmentStatus.FAILED


@pytest.mark.parametrize("raw", ["Overdue", "DEFAULTED", "past_due", "In-Arrears"])
def test_overdue_tokens_default(raw):
    assert normalize_status(raw, Decimal("1000"), Decimal("500")) == EnrollmentStatus.DEFAULTED


def test_default_outranks_completion():
    assert normalize_status("Overdue", 0, 1000) == EnrollmentStatus.DEFAULTED


@pytest.mark.parametrize("raw", [None, "", "something new"])
def test_zero_balance_completes(raw):
    assert normalize_status(raw, Decimal("0"), Decimal("1000")) == EnrollmentStatus.COMPLETED


def test_completion_token_completes_with_balance_left():
    assert normalize_status("Fully Paid", Decimal("10"), Decimal("90")) == EnrollmentStatus.COMPLETED


@pytest.mark.parametrize("raw", ["Due Soon", "due_soon", "On Track", "partial"])
def test_active_tokens(raw):
    assert normalize_status(raw, Decimal("1000"), Decimal("0")) == EnrollmentStatus.ACTIVE


def test_any_payment_makes_active():
    assert normalize_status(None, Decimal("900"), Decimal("100")) == EnrollmentStatus.ACTIVE


def test_nothing_known_is_pending():
    assert normalize_status("Pending", Decimal("1000"), Decimal("0")) == EnrollmentStatus.PENDING


@pytest.mark.parametrize("remaining, paid", [(None, None), ("abc", "xyz"), (float("nan"), True)])
def test_unreadable_numbers_never_raise(remaining, paid):
    assert normalize_status(None, remaining, paid) == EnrollmentStatus.PENDING


def test_canonical_values_are_accepted_as_input():
    assert normalize_status(EnrollmentStatus.FAILED, 100, 0) == EnrollmentStatus.FAILED


def test_normalize_token_folds_separators():
    assert normalize_token("  Due_Soon ") == "due soon"
    assert normalize_token("past-due") == "past due"


def test_vocabulary_is_swappable():
    vocabulary = StatusVocabulary(
        version=DEFAULT_VOCABULARY.version + 1,
        failure=DEFAULT_VOCABULARY.failure | {"bounced"},
        default=DEFAULT_VOCABULARY.default,
        completion=DEFAULT_VOCABULARY.completion,
        active=DEFAULT_VOCABULARY.active,
    )
    assert normalize_status("Bounced", 100, 0, vocabulary) == EnrollmentStatus.FAILED
    assert normalize_status("Bounced", 100, 0) == EnrollmentStatus.PENDING
