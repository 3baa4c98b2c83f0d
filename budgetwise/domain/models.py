"""Domain models - pure Python dataclasses representing budgets, decisions and results"""

from dataclasses import dataclass, asdict
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Union

ZERO = Decimal("0")


class DecisionCategory(str, Enum):
    """Kinds of life decision the calculator understands"""

    RENT = "rent"
    CAR = "car"
    EDUCATION = "education"
    MOVING = "moving"


class AffordabilityTier(str, Enum):
    """Ordered affordability classification, best first"""

    EXCELLENT = "excellent"
    GOOD = "good"
    CAUTION = "caution"
    HIGH_RISK = "high-risk"

    @property
    def risk_level(self) -> int:
        return _RISK_LEVELS[self]

    def is_worse_than(self, other: "AffordabilityTier") -> bool:
        return self.risk_level > other.risk_level

    def _rank_against(self, other, op: str) -> int:
        # Tiers order only against tiers; str ordering would be alphabetical
        if not isinstance(other, AffordabilityTier):
            raise TypeError(
                f"'{op}' not supported between AffordabilityTier and {type(other).__name__}"
            )
        return self.risk_level - other.risk_level

    def __lt__(self, other):
        return self._rank_against(other, "<") < 0

    def __le__(self, other):
        return self._rank_against(other, "<=") <= 0

    def __gt__(self, other):
        return self._rank_against(other, ">") > 0

    def __ge__(self, other):
        return self._rank_against(other, ">=") >= 0


_RISK_LEVELS = {
    AffordabilityTier.EXCELLENT: 1,
    AffordabilityTier.GOOD: 2,
    AffordabilityTier.CAUTION: 3,
    AffordabilityTier.HIGH_RISK: 4,
}


class HealthStatus(str, Enum):
    """Overall budget health label"""

    HEALTHY = "healthy"
    FAIR = "fair"
    NEEDS_ATTENTION = "needs_attention"


@dataclass(frozen=True)
class BudgetSnapshot:
    """User's current monthly budget figures"""

    monthly_income: Decimal
    monthly_expenses: Decimal
    savings: Decimal
    emergency_fund: Decimal

    @property
    def disposable_income(self) -> Decimal:
        # May be negative
        return self.monthly_income - self.monthly_expenses

    @property
    def savings_rate(self) -> Decimal:
        """Fraction of income left after expenses (0 when there is no income)"""
        if self.monthly_income == 0:
            return ZERO
        return self.disposable_income / self.monthly_income

    @property
    def expense_ratio(self) -> Decimal:
        if self.monthly_income == 0:
            return ZERO
        return self.monthly_expenses / self.monthly_income

    @property
    def emergency_months(self) -> Decimal:
        """Months of expenses the emergency fund covers (0 when there are no expenses)"""
        if self.monthly_expenses == 0:
            return ZERO
        return self.emergency_fund / self.monthly_expenses


@dataclass(frozen=True)
class Thresholds:
    """User-configured health thresholds, in percent"""

    savings_rate_threshold: int = 20
    expense_ratio_threshold: int = 80


@dataclass(frozen=True)
class RentDecision:
    category: ClassVar[DecisionCategory] = DecisionCategory.RENT

    monthly_rent: Decimal

    def to_payload(self) -> Dict[str, Any]:
        return _payload(self)


@dataclass(frozen=True)
class CarDecision:
    category: ClassVar[DecisionCategory] = DecisionCategory.CAR

    monthly_payment: Decimal
    down_payment: Decimal

    def to_payload(self) -> Dict[str, Any]:
        return _payload(self)


@dataclass(frozen=True)
class EducationDecision:
    category: ClassVar[DecisionCategory] = DecisionCategory.EDUCATION

    total_cost: Decimal
    duration_years: Decimal

    def to_payload(self) -> Dict[str, Any]:
        return _payload(self)


@dataclass(frozen=True)
class MovingDecision:
    category: ClassVar[DecisionCategory] = DecisionCategory.MOVING

    moving_costs: Decimal
    new_monthly_rent: Decimal

    def to_payload(self) -> Dict[str, Any]:
        return _payload(self)


DecisionInput = Union[RentDecision, CarDecision, EducationDecision, MovingDecision]

DECISION_TYPES = {
    DecisionCategory.RENT: RentDecision,
    DecisionCategory.CAR: CarDecision,
    DecisionCategory.EDUCATION: EducationDecision,
    DecisionCategory.MOVING: MovingDecision,
}


def decision_from_payload(payload: Dict[str, Any]) -> DecisionInput:
    """Rebuild a decision input from its stored JSON payload"""
    category = DecisionCategory(payload["category"])
    fields = {k: Decimal(str(v)) for k, v in payload.items() if k != "category"}
    return DECISION_TYPES[category](**fields)


@dataclass
class AnalysisResult:
    """Output of the decision impact engine"""

    category: DecisionCategory
    tier: AffordabilityTier
    impact_summary: str
    recommendation: str
    monthly_impact: Decimal
    annual_savings_impact: Decimal
    risk_level: int
    time_to_recover_months: Optional[int] = None
    alternatives: Optional[List[str]] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "category": self.category.value,
            "affordability": self.tier.value,
            "impact": self.impact_summary,
            "recommendation": self.recommendation,
            "monthly_impact": float(self.monthly_impact),
            "annual_savings_impact": float(self.annual_savings_impact),
            "risk_level": self.risk_level,
            "time_to_recover_months": self.time_to_recover_months,
            "alternatives": list(self.alternatives) if self.alternatives is not None else None,
        }


@dataclass
class HealthAssessment:
    """Budget health scored against the user's thresholds"""

    savings_rate_pct: Decimal
    expense_ratio_pct: Decimal
    emergency_months: Decimal
    status: HealthStatus
    alerts: List[str]


@dataclass
class SavingsProjection:
    """Straight-line projection of the current budget"""

    projected_annual_savings: Decimal
    projected_savings_6_months: Decimal
    months_to_emergency_target: int


def _payload(decision: DecisionInput) -> Dict[str, Any]:
    data = {k: float(v) for k, v in asdict(decision).items()}
    data["category"] = decision.category.value
    return data
