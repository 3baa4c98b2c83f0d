"""Pydantic schemas for API request/response validation"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, Field

from budgetwise.domain.models import (
    AnalysisResult,
    BudgetSnapshot,
    CarDecision,
    EducationDecision,
    MovingDecision,
    RentDecision,
)


# Largest value a Numeric(14, 2) budget column holds
MAX_BUDGET_AMOUNT = 999_999_999_999.99
CENT = Decimal("0.01")


def _budget_amount(description: str):
    return Field(..., ge=0, le=MAX_BUDGET_AMOUNT, allow_inf_nan=False, description=description)


class BudgetSchema(BaseModel):
    """Monthly budget figures"""

    monthly_income: float = _budget_amount("Monthly take-home income")
    monthly_expenses: float = _budget_amount("Total monthly expenses")
    savings: float = _budget_amount("Current savings balance")
    emergency_fund: float = _budget_amount("Emergency fund balance")

    def to_domain(self) -> BudgetSnapshot:
        """Snapshot rounded to cents, as the budget table stores it"""
        return BudgetSnapshot(
            monthly_income=_cents(self.monthly_income),
            monthly_expenses=_cents(self.monthly_expenses),
            savings=_cents(self.savings),
            emergency_fund=_cents(self.emergency_fund),
        )

    @classmethod
    def from_domain(cls, snapshot: BudgetSnapshot) -> "BudgetSchema":
        return cls(
            monthly_income=float(snapshot.monthly_income),
            monthly_expenses=float(snapshot.monthly_expenses),
            savings=float(snapshot.savings),
            emergency_fund=float(snapshot.emergency_fund),
        )


class BudgetRequest(BudgetSchema):
    """Request body for POST /v1/budget"""

    user_id: str = Field(..., min_length=1, description="User identifier")


class HealthSchema(BaseModel):
    savings_rate_pct: float
    expense_ratio_pct: float
    emergency_months: float
    status: str
    alerts: List[str]


class ProjectionSchema(BaseModel):
    projected_annual_savings: float
    projected_savings_6_months: float
    months_to_emergency_target: int


class BudgetResponse(BaseModel):
    """Response for POST /v1/budget and GET /v1/budget"""

    budget_id: str
    user_id: str
    budget: BudgetSchema
    disposable_income: float
    health: HealthSchema
    projection: ProjectionSchema
    created_at: str


class RentInput(BaseModel):
    category: Literal["rent"]
    monthly_rent: float = Field(..., ge=0, allow_inf_nan=False)

    def to_domain(self) -> RentDecision:
        return RentDecision(monthly_rent=_dec(self.monthly_rent))


class CarInput(BaseModel):
    category: Literal["car"]
    monthly_payment: float = Field(..., ge=0, allow_inf_nan=False)
    down_payment: float = Field(0, ge=0, allow_inf_nan=False)

    def to_domain(self) -> CarDecision:
        return CarDecision(monthly_payment=_dec(self.monthly_payment), down_payment=_dec(self.down_payment))


class EducationInput(BaseModel):
    category: Literal["education"]
    total_cost: float = Field(..., ge=0, allow_inf_nan=False)
    duration_years: float = Field(..., gt=0, allow_inf_nan=False)

    def to_domain(self) -> EducationDecision:
        return EducationDecision(total_cost=_dec(self.total_cost), duration_years=_dec(self.duration_years))


class MovingInput(BaseModel):
    category: Literal["moving"]
    moving_costs: float = Field(..., ge=0, allow_inf_nan=False)
    new_monthly_rent: float = Field(..., ge=0, allow_inf_nan=False)

    def to_domain(self) -> MovingDecision:
        return MovingDecision(moving_costs=_dec(self.moving_costs), new_monthly_rent=_dec(self.new_monthly_rent))


DecisionInputSchema = Annotated[
    Union[RentInput, CarInput, EducationInput, MovingInput],
    Field(discriminator="category"),
]


class DecisionRequest(BaseModel):
    """Request body for POST /v1/decision"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    decision: DecisionInputSchema
    budget: Optional[BudgetSchema] = Field(None, description="Budget to analyze against; defaults to the active budget")


class AnalysisSchema(BaseModel):
    """Affordability analysis of a single decision"""

    category: str
    affordability: str
    impact: str
    recommendation: str
    monthly_impact: float
    annual_savings_impact: float
    risk_level: int
    time_to_recover_months: Optional[int] = None
    alternatives: Optional[List[str]] = None

    @classmethod
    def from_domain(cls, result: AnalysisResult) -> "AnalysisSchema":
        return cls(**result.to_payload())


class DecisionResponse(BaseModel):
    """Response for POST /v1/decision"""

    decision_id: str
    analysis: AnalysisSchema


class HistoryItem(BaseModel):
    """Single decision in history"""

    decision_id: str
    category: str
    input: dict
    analysis: AnalysisSchema
    created_at: str


class HistoryResponse(BaseModel):
    """Response for GET /v1/decision/history"""

    user_id: str
    decisions: List[HistoryItem]


class RescoreItem(BaseModel):
    decision_id: str
    previous_affordability: str
    analysis: AnalysisSchema


class RescoreResponse(BaseModel):
    """Response for POST /v1/decision/rescore"""

    user_id: str
    results: List[RescoreItem]
    skipped: List[str]


class ProfileUpdate(BaseModel):
    """Request body for PUT /v1/profile/{user_id}"""

    display_name: Optional[str] = None
    subscription_tier: Optional[Literal["free", "premium"]] = None
    savings_rate_threshold: Optional[int] = Field(None, ge=0, le=100)
    expense_ratio_threshold: Optional[int] = Field(None, ge=0, le=100)


class ProfileResponse(BaseModel):
    user_id: str
    display_name: Optional[str] = None
    subscription_tier: str
    savings_rate_threshold: int
    expense_ratio_threshold: int


class ConversationRequest(BaseModel):
    """Request body for POST /v1/chat/conversations"""

    user_id: str = Field(..., min_length=1)
    title: str = Field("Financial Advice Chat", min_length=1, max_length=200)


class ChatMessageSchema(BaseModel):
    message_id: Optional[str] = None
    role: str
    content: str
    created_at: str


class ConversationResponse(BaseModel):
    conversation_id: str
    title: str
    welcome_message: ChatMessageSchema


class MessageRequest(BaseModel):
    """Request body for POST /v1/chat/conversations/{conversation_id}/messages"""

    user_id: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1, max_length=4000)


class MessageListResponse(BaseModel):
    conversation_id: str
    messages: List[ChatMessageSchema]


def _dec(value: float) -> Decimal:
    # Go through str so 0.1 stays 0.1 rather than its binary expansion
    return Decimal(str(value))


def _cents(value: float) -> Decimal:
    return _dec(value).quantize(CENT, rounding=ROUND_HALF_UP)
