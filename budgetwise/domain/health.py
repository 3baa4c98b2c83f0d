"""Budget health scoring and straight-line savings projection"""

import math
from decimal import Decimal
from typing import List

from budgetwise.domain.models import (
    BudgetSnapshot,
    HealthAssessment,
    HealthStatus,
    SavingsProjection,
    Thresholds,
)

EMERGENCY_FUND_TARGET_MONTHS = 6
PROJECTION_MONTHS = 6


def assess_health(snapshot: BudgetSnapshot, thresholds: Thresholds) -> HealthAssessment:
    """
    Score a budget against the user's thresholds.

    Status bands:
    - below half the savings-rate threshold: needs_attention
    - below the savings-rate threshold:      fair
    - otherwise:                             healthy

    With the default 20% threshold this gives the familiar 10% / 20% bands.
    """
    savings_rate_pct = snapshot.savings_rate * 100
    expense_ratio_pct = snapshot.expense_ratio * 100
    emergency_months = snapshot.emergency_months

    savings_target = Decimal(thresholds.savings_rate_threshold)
    if savings_rate_pct < savings_target / 2:
        status = HealthStatus.NEEDS_ATTENTION
    elif savings_rate_pct < savings_target:
        status = HealthStatus.FAIR
    else:
        status = HealthStatus.HEALTHY

    alerts: List[str] = []
    if savings_rate_pct < savings_target:
        alerts.append(
            f"Savings rate {savings_rate_pct:.1f}% is below your {thresholds.savings_rate_threshold}% target"
        )
    if expense_ratio_pct > thresholds.expense_ratio_threshold:
        alerts.append(
            f"Expenses are {expense_ratio_pct:.1f}% of income, above your {thresholds.expense_ratio_threshold}% limit"
        )
    if snapshot.monthly_expenses > 0 and emergency_months < EMERGENCY_FUND_TARGET_MONTHS:
        alerts.append(
            f"Emergency fund covers {emergency_months:.1f} months, short of the "
            f"{EMERGENCY_FUND_TARGET_MONTHS}-month target"
        )

    return HealthAssessment(
        savings_rate_pct=savings_rate_pct,
        expense_ratio_pct=expense_ratio_pct,
        emergency_months=emergency_months,
        status=status,
        alerts=alerts,
    )


def project_savings(snapshot: BudgetSnapshot) -> SavingsProjection:
    disposable = snapshot.disposable_income

    months_to_target = 0
    if snapshot.emergency_months < EMERGENCY_FUND_TARGET_MONTHS:
        shortfall = snapshot.monthly_expenses * EMERGENCY_FUND_TARGET_MONTHS - snapshot.emergency_fund
        # Floor the monthly contribution at 1 so a flat or negative budget still yields a finite answer
        months_to_target = max(math.ceil(shortfall / max(disposable, Decimal(1))), 0)

    return SavingsProjection(
        projected_annual_savings=disposable * 12,
        projected_savings_6_months=snapshot.savings + disposable * PROJECTION_MONTHS,
        months_to_emergency_target=months_to_target,
    )
