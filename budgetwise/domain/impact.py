"""Decision impact engine - affordability scoring for life decisions"""

import math
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from budgetwise.domain.models import (
    ZERO,
    AffordabilityTier,
    AnalysisResult,
    BudgetSnapshot,
    CarDecision,
    DecisionCategory,
    DecisionInput,
    EducationDecision,
    MovingDecision,
    RentDecision,
    Thresholds,
)

INFINITY = Decimal("Infinity")
MONTHS_PER_YEAR = 12

# Housing is assumed to be 30% of current monthly expenses
CURRENT_RENT_SHARE = Decimal("0.30")

# Tier ladders: (tier, max primary ratio, max secondary ratio), checked in order.
# A decision must satisfy both limits of a rung to land on it.
RENT_TIERS = [
    (AffordabilityTier.EXCELLENT, Decimal("0.30")),
    (AffordabilityTier.GOOD, Decimal("0.50")),
    (AffordabilityTier.CAUTION, Decimal("0.70")),
]
CAR_TIERS = [
    (AffordabilityTier.EXCELLENT, Decimal("0.10"), Decimal("0.20")),
    (AffordabilityTier.GOOD, Decimal("0.20"), Decimal("0.30")),
    (AffordabilityTier.CAUTION, Decimal("0.30"), Decimal("0.50")),
]
EDUCATION_TIERS = [
    (AffordabilityTier.EXCELLENT, Decimal("0.30"), Decimal("0.50")),
    (AffordabilityTier.GOOD, Decimal("0.50"), Decimal("0.70")),
    (AffordabilityTier.CAUTION, Decimal("0.70"), Decimal("1.0")),
]
MOVING_TIERS = [
    (AffordabilityTier.EXCELLENT, Decimal("0.20"), Decimal("0.10")),
    (AffordabilityTier.GOOD, Decimal("0.40"), Decimal("0.20")),
    (AffordabilityTier.CAUTION, Decimal("0.60"), Decimal("0.30")),
]

# Alternatives are offered once the driving ratio passes these cutoffs
RENT_ALTERNATIVES_CUTOFF = Decimal("0.50")
CAR_ALTERNATIVES_CUTOFF = Decimal("0.20")
EDUCATION_ALTERNATIVES_CUTOFF = Decimal("0.50")
MOVING_ALTERNATIVES_CUTOFF = Decimal("0.20")

ALTERNATIVES: Dict[DecisionCategory, List[str]] = {
    DecisionCategory.RENT: [
        "Look for shared housing options",
        "Consider suburbs with lower rent",
        "Negotiate rent or find a roommate",
        "Explore different neighborhoods",
    ],
    DecisionCategory.CAR: [
        "Consider a certified pre-owned vehicle",
        "Look into longer loan terms to reduce monthly payment",
        "Explore leasing options",
        "Consider public transportation + occasional car sharing",
    ],
    DecisionCategory.EDUCATION: [
        "Apply for scholarships and grants",
        "Consider part-time study while working",
        "Look into employer education benefits",
        "Explore online or community college options",
    ],
    DecisionCategory.MOVING: [
        "Get quotes from multiple moving companies",
        "Consider a gradual move or shipping belongings",
        "Look for relocation assistance from employer",
        "Sell items instead of moving them",
    ],
}

RECOMMENDATIONS: Dict[DecisionCategory, Dict[AffordabilityTier, str]] = {
    DecisionCategory.RENT: {
        AffordabilityTier.EXCELLENT: "Excellent choice! This housing cost leaves plenty of room for savings and other goals.",
        AffordabilityTier.GOOD: "Good fit for your budget. You'll still have flexibility for other expenses and savings.",
        AffordabilityTier.CAUTION: "This will be tight on your budget. Consider if the location/amenities justify the cost.",
        AffordabilityTier.HIGH_RISK: "This housing cost is too high for your current income. Reconsider, look for alternatives or increase income.",
    },
    DecisionCategory.CAR: {
        AffordabilityTier.EXCELLENT: "Great choice! This car fits comfortably within your budget.",
        AffordabilityTier.GOOD: "Reasonable purchase that won't strain your finances significantly.",
        AffordabilityTier.CAUTION: "Consider if you need all the features or if a less expensive option would work better.",
        AffordabilityTier.HIGH_RISK: "This car is not affordable on your current budget. Reconsider, and look at used cars or alternative transportation.",
    },
    DecisionCategory.EDUCATION: {
        AffordabilityTier.EXCELLENT: "Excellent investment! You can afford this education comfortably over {duration} years.",
        AffordabilityTier.GOOD: "Good investment if it aligns with your career goals and earning potential.",
        AffordabilityTier.CAUTION: "Significant investment. Ensure the ROI justifies the cost and consider funding options.",
        AffordabilityTier.HIGH_RISK: "This education cost is not affordable in your current situation. Reconsider, and explore financial aid and alternatives.",
    },
    DecisionCategory.MOVING: {
        AffordabilityTier.EXCELLENT: "Great move! Living costs stay manageable and moving expenses are minimal.",
        AffordabilityTier.GOOD: "Reasonable move with manageable costs.",
        AffordabilityTier.CAUTION: "Consider if the benefits (career, lifestyle) justify the change in living costs and the moving expenses.",
        AffordabilityTier.HIGH_RISK: "This move is not affordable right now. Reconsider the timing, reduce moving costs or negotiate relocation assistance.",
    },
}


def safe_ratio(numerator: Decimal, denominator: Decimal) -> Decimal:
    """
    Divide, mapping a zero denominator to a sentinel.

    0 / 0 is 0 (nothing is being asked for); x / 0 with x > 0 is +infinity,
    which always lands on the worst tier.
    """
    if denominator > 0:
        return numerator / denominator
    return INFINITY if numerator > 0 else ZERO


def income_ratio(amount: Decimal, disposable_income: Decimal) -> Decimal:
    """Share of disposable income; no disposable income means the cost cannot be carried"""
    if disposable_income <= 0:
        return INFINITY
    return amount / disposable_income


def classify(ladder: Iterable[Tuple], *ratios: Decimal) -> AffordabilityTier:
    """Walk a tier ladder and return the first rung whose limits all hold"""
    for tier, *limits in ladder:
        if all(ratio <= limit for ratio, limit in zip(ratios, limits)):
            return tier
    return AffordabilityTier.HIGH_RISK


def format_pct(ratio: Decimal) -> str:
    if ratio.is_infinite():
        return "more than 100%"
    return f"{ratio * 100:.1f}%"


def _result(
    category: DecisionCategory,
    tier: AffordabilityTier,
    impact_summary: str,
    monthly_impact: Decimal,
    annual_savings_impact: Decimal,
    offer_alternatives: bool,
    time_to_recover_months: Optional[int] = None,
    **template_args,
) -> AnalysisResult:
    return AnalysisResult(
        category=category,
        tier=tier,
        impact_summary=impact_summary,
        recommendation=RECOMMENDATIONS[category][tier].format(**template_args),
        monthly_impact=monthly_impact,
        annual_savings_impact=annual_savings_impact,
        risk_level=tier.risk_level,
        time_to_recover_months=time_to_recover_months,
        alternatives=list(ALTERNATIVES[category]) if offer_alternatives else None,
    )


def calculate_rent_impact(snapshot: BudgetSnapshot, decision: RentDecision) -> AnalysisResult:
    disposable = snapshot.disposable_income
    rent = decision.monthly_rent
    # No disposable income at all: any rent, even zero, is unaffordable
    impact_ratio = income_ratio(rent, disposable)
    tier = classify(RENT_TIERS, impact_ratio)

    if impact_ratio.is_infinite():
        summary = "Exceeds your disposable income"
    else:
        summary = f"{format_pct(impact_ratio)} of your disposable income"

    return _result(
        DecisionCategory.RENT,
        tier,
        summary,
        monthly_impact=rent,
        annual_savings_impact=(disposable - rent) * MONTHS_PER_YEAR,
        offer_alternatives=impact_ratio > RENT_ALTERNATIVES_CUTOFF,
    )


def calculate_car_impact(snapshot: BudgetSnapshot, decision: CarDecision) -> AnalysisResult:
    disposable = snapshot.disposable_income
    impact_ratio = income_ratio(decision.monthly_payment, disposable)
    down_payment_ratio = safe_ratio(decision.down_payment, snapshot.savings)
    tier = classify(CAR_TIERS, impact_ratio, down_payment_ratio)

    summary = (
        f"{format_pct(impact_ratio)} of disposable income + "
        f"{format_pct(down_payment_ratio)} of savings"
    )

    return _result(
        DecisionCategory.CAR,
        tier,
        summary,
        monthly_impact=decision.monthly_payment,
        annual_savings_impact=(disposable - decision.monthly_payment) * MONTHS_PER_YEAR,
        offer_alternatives=impact_ratio > CAR_ALTERNATIVES_CUTOFF,
    )


def calculate_education_impact(snapshot: BudgetSnapshot, decision: EducationDecision) -> AnalysisResult:
    """
    Education is judged on the cost spread over its duration and on how much
    of current savings it would consume.

    annual_savings_impact is savings left after paying the full cost, not an
    annualized figure like the other categories.
    """
    disposable = snapshot.disposable_income
    total_cost = decision.total_cost
    months = decision.duration_years * MONTHS_PER_YEAR

    # A non-positive duration means the whole cost is due at once
    monthly_equivalent = total_cost / months if months > 0 else total_cost
    impact_ratio = income_ratio(monthly_equivalent, disposable)
    savings_ratio = safe_ratio(total_cost, snapshot.savings)
    tier = classify(EDUCATION_TIERS, impact_ratio, savings_ratio)

    if disposable > 0:
        time_to_recover = math.ceil(total_cost / (disposable * MONTHS_PER_YEAR))
    else:
        time_to_recover = None

    duration = f"{decision.duration_years.normalize():f}"
    summary = f"{format_pct(savings_ratio)} of current savings over {duration} years"

    return _result(
        DecisionCategory.EDUCATION,
        tier,
        summary,
        monthly_impact=monthly_equivalent,
        annual_savings_impact=snapshot.savings - total_cost,
        offer_alternatives=impact_ratio > EDUCATION_ALTERNATIVES_CUTOFF,
        time_to_recover_months=time_to_recover,
        duration=duration,
    )


def calculate_moving_impact(snapshot: BudgetSnapshot, decision: MovingDecision) -> AnalysisResult:
    disposable = snapshot.disposable_income
    current_rent_estimate = snapshot.monthly_expenses * CURRENT_RENT_SHARE
    rent_difference = decision.new_monthly_rent - current_rent_estimate

    one_time_ratio = safe_ratio(decision.moving_costs, snapshot.savings)
    monthly_ratio = income_ratio(abs(rent_difference), disposable)
    tier = classify(MOVING_TIERS, monthly_ratio, one_time_ratio)

    sign = "+" if rent_difference > 0 else "-" if rent_difference < 0 else ""
    summary = f"{format_pct(one_time_ratio)} of savings {sign}${abs(rent_difference):,.0f}/month rent"

    return _result(
        DecisionCategory.MOVING,
        tier,
        summary,
        monthly_impact=decision.new_monthly_rent,
        annual_savings_impact=(disposable + current_rent_estimate - decision.new_monthly_rent) * MONTHS_PER_YEAR,
        offer_alternatives=one_time_ratio > MOVING_ALTERNATIVES_CUTOFF,
    )


CALCULATORS: Dict[DecisionCategory, Callable[..., AnalysisResult]] = {
    DecisionCategory.RENT: calculate_rent_impact,
    DecisionCategory.CAR: calculate_car_impact,
    DecisionCategory.EDUCATION: calculate_education_impact,
    DecisionCategory.MOVING: calculate_moving_impact,
}


def analyze(
    snapshot: BudgetSnapshot,
    decision: DecisionInput,
    thresholds: Optional[Thresholds] = None,
) -> AnalysisResult:
    """
    Main entry point: score a life decision against the current budget.

    Tier cutoffs are fixed per category. ``thresholds`` is accepted so callers
    can pass one policy object around, but it does not affect tiering.
    """
    return CALCULATORS[decision.category](snapshot, decision)


def rescore_decisions(
    snapshot: BudgetSnapshot,
    decisions: Iterable[DecisionInput],
    thresholds: Optional[Thresholds] = None,
) -> List[AnalysisResult]:
    """Re-run the engine over stored decisions, preserving order"""
    return [analyze(snapshot, decision, thresholds) for decision in decisions]
