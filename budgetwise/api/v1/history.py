"""GET /v1/decision/history and POST /v1/decision/rescore - Stored decisions"""

import logging
from typing import List, Tuple
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from budgetwise.api.v1.schemas import AnalysisSchema, HistoryItem, HistoryResponse, RescoreItem, RescoreResponse
from budgetwise.api.dependencies import get_request_id
from budgetwise.config import settings
from budgetwise.infrastructure.database.session import get_db
from budgetwise.infrastructure.database.repositories import BudgetRepository, DecisionRepository
from budgetwise.infrastructure.database.models import Decision
from budgetwise.domain.exceptions import BudgetNotFoundError, InputOutOfRangeError
from budgetwise.domain.impact import rescore_decisions
from budgetwise.domain.models import DecisionInput, decision_from_payload
from budgetwise.domain.validation import validate_decision, validate_snapshot

router = APIRouter()


@router.get("/decision/history", response_model=HistoryResponse)
def get_decision_history(
    user_id: str = Query(..., description="User identifier"),
    limit: int = Query(settings.history_default_limit, ge=1, le=settings.history_max_limit),
    db: Session = Depends(get_db),
):
    """
    Retrieve recent decisions for a user.

    Returns:
        Decisions newest first, each with its raw input and analysis
    """
    decision_repo = DecisionRepository(db)
    decisions = decision_repo.get_decisions_by_user(user_id, limit=limit)

    history_items = [
        HistoryItem(
            decision_id=str(d.id),
            category=d.category,
            input=d.input_payload,
            analysis=AnalysisSchema(**d.result_payload),
            created_at=d.created_at.isoformat(),
        )
        for d in decisions
    ]

    return HistoryResponse(user_id=user_id, decisions=history_items)


@router.post("/decision/rescore", response_model=RescoreResponse)
def rescore_history(
    request: Request,
    user_id: str = Query(..., description="User identifier"),
    limit: int = Query(settings.history_default_limit, ge=1, le=settings.history_max_limit),
    db: Session = Depends(get_db),
):
    """
    Re-score a user's recent decisions against their active budget.

    Stored results are left untouched; records whose payload no longer
    validates are reported in ``skipped``.
    """
    request_id = get_request_id(request)

    try:
        db_budget = BudgetRepository(db).get_active_budget(user_id)
        if db_budget is None:
            raise BudgetNotFoundError("No active budget on file to rescore against")
        snapshot = BudgetRepository.to_snapshot(db_budget)
        validate_snapshot(snapshot)
    except BudgetNotFoundError as e:
        logging.warning(f"Budget not found: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))
    except InputOutOfRangeError as e:
        logging.warning(f"Stored budget out of range: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    rescorable: List[Tuple[Decision, DecisionInput]] = []
    skipped: List[str] = []
    for d in DecisionRepository(db).get_decisions_by_user(user_id, limit=limit):
        try:
            decision = decision_from_payload(d.input_payload)
            validate_decision(decision)
        except (InputOutOfRangeError, KeyError, ValueError, TypeError, ArithmeticError) as e:
            logging.warning(
                f"Skipping stored decision {d.id}: {e}",
                extra={"request_id": request_id, "user_id": user_id},
            )
            skipped.append(str(d.id))
            continue
        rescorable.append((d, decision))

    results = rescore_decisions(snapshot, [decision for _, decision in rescorable])

    return RescoreResponse(
        user_id=user_id,
        results=[
            RescoreItem(
                decision_id=str(d.id),
                previous_affordability=d.affordability,
                analysis=AnalysisSchema.from_domain(result),
            )
            for (d, _), result in zip(rescorable, results)
        ],
        skipped=skipped,
    )
