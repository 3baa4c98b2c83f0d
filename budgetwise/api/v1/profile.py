"""GET/PUT /v1/profile/{user_id} - Subscription tier and health thresholds"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from budgetwise.api.v1.schemas import ProfileResponse, ProfileUpdate
from budgetwise.infrastructure.database.session import get_db
from budgetwise.infrastructure.database.repositories import ProfileRepository
from budgetwise.infrastructure.database.models import Profile

router = APIRouter()


def _to_response(profile: Profile) -> ProfileResponse:
    return ProfileResponse(
        user_id=profile.user_id,
        display_name=profile.display_name,
        subscription_tier=profile.subscription_tier,
        savings_rate_threshold=profile.savings_rate_threshold,
        expense_ratio_threshold=profile.expense_ratio_threshold,
    )


@router.get("/profile/{user_id}", response_model=ProfileResponse)
def get_profile(user_id: str, db: Session = Depends(get_db)):
    """Fetch a profile; first access creates a free-tier profile with default thresholds"""
    profile = ProfileRepository(db).get_or_create(user_id)
    db.commit()
    return _to_response(profile)


@router.put("/profile/{user_id}", response_model=ProfileResponse)
def update_profile(user_id: str, body: ProfileUpdate, db: Session = Depends(get_db)):
    """Update display name, subscription tier or thresholds. Omitted fields are left unchanged."""
    profile = ProfileRepository(db).update_profile(user_id, **body.model_dump(exclude_none=True))
    db.commit()
    return _to_response(profile)
