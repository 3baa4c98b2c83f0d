"""Unit tests for input range checks"""

import pytest
from decimal import Decimal
from budgetwise.domain.exceptions import InputOutOfRangeError
from budgetwise.domain.models import BudgetSnapshot, CarDecision, EducationDecision, RentDecision
from budgetwise.domain.validation import validate_decision, validate_snapshot


def test_validate_snapshot_accepts_zeros(snapshot_factory):
    validate_snapshot(snapshot_factory(0, 0, savings=0, emergency_fund=0))


def test_validate_snapshot_rejects_negative():
    snapshot = BudgetSnapshot(
        monthly_income=Decimal("5000"),
        monthly_expenses=Decimal("-1"),
        savings=Decimal("0"),
        emergency_fund=Decimal("0"),
    )
    with pytest.raises(InputOutOfRangeError, match="monthly_expenses"):
        validate_snapshot(snapshot)


def test_validate_snapshot_rejects_non_finite():
    snapshot = BudgetSnapshot(
        monthly_income=Decimal("NaN"),
        monthly_expenses=Decimal("0"),
        savings=Decimal("0"),
        emergency_fund=Decimal("0"),
    )
    with pytest.raises(InputOutOfRangeError, match="finite"):
        validate_snapshot(snapshot)


def test_validate_decision_rejects_negative_amount():
    with pytest.raises(InputOutOfRangeError, match="down_payment"):
        validate_decision(CarDecision(monthly_payment=Decimal("100"), down_payment=Decimal("-5")))


def test_validate_decision_rejects_infinite_rent():
    with pytest.raises(InputOutOfRangeError):
        validate_decision(RentDecision(monthly_rent=Decimal("Infinity")))


@pytest.mark.parametrize("years", ["0", "-1"])
def test_validate_decision_rejects_non_positive_duration(years):
    with pytest.raises(InputOutOfRangeError, match="duration_years"):
        validate_decision(EducationDecision(total_cost=Decimal("1000"), duration_years=Decimal(years)))


def test_validate_decision_accepts_valid_education():
    validate_decision(EducationDecision(total_cost=Decimal("0"), duration_years=Decimal("0.5")))
