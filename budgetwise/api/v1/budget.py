"""POST/GET /v1/budget - Budget snapshot with health assessment"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from budgetwise.api.v1.schemas import BudgetRequest, BudgetResponse, BudgetSchema, HealthSchema, ProjectionSchema
from budgetwise.api.dependencies import get_request_id
from budgetwise.infrastructure.database.session import get_db
from budgetwise.infrastructure.database.repositories import BudgetRepository, ProfileRepository
from budgetwise.infrastructure.database.models import Budget
from budgetwise.domain.health import assess_health, project_savings
from budgetwise.domain.models import Thresholds

router = APIRouter()


def build_budget_response(db_budget: Budget, thresholds: Thresholds) -> BudgetResponse:
    snapshot = BudgetRepository.to_snapshot(db_budget)
    health = assess_health(snapshot, thresholds)
    projection = project_savings(snapshot)

    return BudgetResponse(
        budget_id=str(db_budget.id),
        user_id=db_budget.user_id,
        budget=BudgetSchema.from_domain(snapshot),
        disposable_income=float(snapshot.disposable_income),
        health=HealthSchema(
            savings_rate_pct=round(float(health.savings_rate_pct), 2),
            expense_ratio_pct=round(float(health.expense_ratio_pct), 2),
            emergency_months=round(float(health.emergency_months), 2),
            status=health.status.value,
            alerts=health.alerts,
        ),
        projection=ProjectionSchema(
            projected_annual_savings=float(projection.projected_annual_savings),
            projected_savings_6_months=float(projection.projected_savings_6_months),
            months_to_emergency_target=projection.months_to_emergency_target,
        ),
        created_at=db_budget.created_at.isoformat(),
    )


@router.post("/budget", response_model=BudgetResponse)
def save_budget(body: BudgetRequest, request: Request, db: Session = Depends(get_db)):
    """
    Save a budget snapshot as the user's active budget.

    The previous active budget is kept for history but deactivated.
    """
    request_id = get_request_id(request)
    try:
        db_budget = BudgetRepository(db).save_budget(body.user_id, body.to_domain())
        thresholds = ProfileRepository.thresholds_for(ProfileRepository(db).get_or_create(body.user_id))
        db.commit()
    except Exception as e:
        db.rollback()
        logging.error(f"Failed to save budget: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    logging.info("Budget saved", extra={"request_id": request_id, "user_id": body.user_id})
    return build_budget_response(db_budget, thresholds)


@router.get("/budget", response_model=BudgetResponse)
def get_budget(
    user_id: str = Query(..., description="User identifier"),
    db: Session = Depends(get_db),
):
    """
    Retrieve the active budget with derived ratios.

    Health is scored against the thresholds stored on the user's profile.
    """
    db_budget = BudgetRepository(db).get_active_budget(user_id)
    if db_budget is None:
        raise HTTPException(status_code=404, detail="No budget found")

    profile = ProfileRepository(db).get_or_create(user_id)
    db.commit()
    return build_budget_response(db_budget, ProfileRepository.thresholds_for(profile))
