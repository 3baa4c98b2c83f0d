"""Range checks for budgets and decisions that arrive outside the API schemas"""

from dataclasses import fields
from decimal import Decimal

from budgetwise.domain.exceptions import InputOutOfRangeError
from budgetwise.domain.models import BudgetSnapshot, DecisionInput, EducationDecision


def _check_amount(name: str, value: Decimal) -> None:
    if not value.is_finite():
        raise InputOutOfRangeError(f"{name} must be a finite number, got {value!r}")
    if value < 0:
        raise InputOutOfRangeError(f"{name} must not be negative, got {value}")


def validate_snapshot(snapshot: BudgetSnapshot) -> None:
    """Raise InputOutOfRangeError unless every budget figure is finite and non-negative"""
    for field in fields(snapshot):
        _check_amount(field.name, getattr(snapshot, field.name))


def validate_decision(decision: DecisionInput) -> None:
    """
    Raise InputOutOfRangeError for negative or non-finite amounts, or for an
    education decision whose duration is not positive.
    """
    for field in fields(decision):
        _check_amount(field.name, getattr(decision, field.name))

    if isinstance(decision, EducationDecision) and decision.duration_years <= 0:
        raise InputOutOfRangeError(f"duration_years must be positive, got {decision.duration_years}")
