"""POST /v1/decision - Life decision affordability endpoint"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from budgetwise.api.v1.schemas import AnalysisSchema, DecisionRequest, DecisionResponse
from budgetwise.api.dependencies import get_request_id
from budgetwise.infrastructure.database.session import get_db
from budgetwise.infrastructure.database.repositories import BudgetRepository, DecisionRepository, ProfileRepository
from budgetwise.domain.impact import analyze
from budgetwise.domain.exceptions import BudgetNotFoundError
from budgetwise.infrastructure.observability.metrics import record_decision
from budgetwise.infrastructure.observability.logging import log_analysis

router = APIRouter()


@router.post("/decision", response_model=DecisionResponse)
def create_decision(
    request_body: DecisionRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Analyze the affordability of a life decision.

    Flow:
    1. Resolve the budget (request body, else the user's active budget)
    2. Run the decision impact engine
    3. Persist input + result
    4. Return the analysis
    """
    start_time = time.time()
    request_id = get_request_id(request)
    user_id = request_body.user_id

    try:
        # 1. Resolve budget snapshot
        if request_body.budget is not None:
            snapshot = request_body.budget.to_domain()
        else:
            db_budget = BudgetRepository(db).get_active_budget(user_id)
            if db_budget is None:
                raise BudgetNotFoundError("No budget provided and no active budget on file")
            snapshot = BudgetRepository.to_snapshot(db_budget)

        # 2. Analyze
        decision = request_body.decision.to_domain()
        profile = ProfileRepository(db).get_or_create(user_id)
        result = analyze(snapshot, decision, ProfileRepository.thresholds_for(profile))

        # 3. Persist
        db_decision = DecisionRepository(db).create_decision(user_id, decision, result)
        decision_id = str(db_decision.id)
        db.commit()

    except BudgetNotFoundError as e:
        db.rollback()
        logging.warning(f"Budget not found: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    # Record metrics and logs
    duration_ms = (time.time() - start_time) * 1000
    record_decision(result.category.value, result.tier.value, result.risk_level)
    log_analysis(request_id, user_id, result.category.value, result.tier.value, result.risk_level, duration_ms)

    return DecisionResponse(decision_id=decision_id, analysis=AnalysisSchema.from_domain(result))
