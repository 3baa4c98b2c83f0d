"""Data access layer for profiles, budgets, decisions and chat history"""

import uuid
from decimal import Decimal
from typing import List, Optional
from sqlalchemy.orm import Session
from budgetwise.config import settings
from budgetwise.infrastructure.database.models import Profile, Budget, Decision, Conversation, Message
from budgetwise.domain.models import AnalysisResult, BudgetSnapshot, DecisionInput, Thresholds


class ProfileRepository:
    """Repository for user profiles and their thresholds"""

    def __init__(self, db: Session):
        self.db = db

    def get_or_create(self, user_id: str) -> Profile:
        """Fetch a profile, creating a free-tier one with default thresholds on first access"""
        profile = self.db.query(Profile).filter(Profile.user_id == user_id).first()
        if profile is None:
            profile = Profile(
                user_id=user_id,
                subscription_tier="free",
                savings_rate_threshold=settings.default_savings_rate_threshold,
                expense_ratio_threshold=settings.default_expense_ratio_threshold,
            )
            self.db.add(profile)
            self.db.flush()
        return profile

    def update_profile(self, user_id: str, **changes) -> Profile:
        """Apply non-None changes to a profile"""
        profile = self.get_or_create(user_id)
        for field, value in changes.items():
            if value is not None:
                setattr(profile, field, value)
        self.db.flush()
        return profile

    @staticmethod
    def thresholds_for(profile: Profile) -> Thresholds:
        return Thresholds(
            savings_rate_threshold=profile.savings_rate_threshold,
            expense_ratio_threshold=profile.expense_ratio_threshold,
        )


class BudgetRepository:
    """Repository for budget snapshots"""

    def __init__(self, db: Session):
        self.db = db

    def save_budget(self, user_id: str, snapshot: BudgetSnapshot) -> Budget:
        """Store a new active budget, deactivating the user's previous one"""
        (
            self.db.query(Budget)
            .filter(Budget.user_id == user_id, Budget.is_active.is_(True))
            .update({Budget.is_active: False}, synchronize_session=False)
        )
        db_budget = Budget(
            user_id=user_id,
            monthly_income=snapshot.monthly_income,
            monthly_expenses=snapshot.monthly_expenses,
            savings=snapshot.savings,
            emergency_fund=snapshot.emergency_fund,
            is_active=True,
        )
        self.db.add(db_budget)
        self.db.flush()
        return db_budget

    def get_active_budget(self, user_id: str) -> Optional[Budget]:
        """Fetch the user's most recent active budget"""
        return (
            self.db.query(Budget)
            .filter(Budget.user_id == user_id, Budget.is_active.is_(True))
            .order_by(Budget.created_at.desc())
            .first()
        )

    @staticmethod
    def to_snapshot(budget: Budget) -> BudgetSnapshot:
        return BudgetSnapshot(
            monthly_income=Decimal(str(budget.monthly_income)),
            monthly_expenses=Decimal(str(budget.monthly_expenses)),
            savings=Decimal(str(budget.savings)),
            emergency_fund=Decimal(str(budget.emergency_fund)),
        )


class DecisionRepository:
    """Repository for analyzed decisions"""

    def __init__(self, db: Session):
        self.db = db

    def create_decision(
        self,
        user_id: str,
        decision: DecisionInput,
        result: AnalysisResult,
    ) -> Decision:
        """Persist decision input and analysis result"""
        db_decision = Decision(
            user_id=user_id,
            category=decision.category.value,
            input_payload=decision.to_payload(),
            result_payload=result.to_payload(),
            affordability=result.tier.value,
            risk_level=result.risk_level,
        )
        self.db.add(db_decision)
        self.db.flush()  # Get ID without committing
        return db_decision

    def get_decisions_by_user(self, user_id: str, limit: int = 10) -> List[Decision]:
        """Fetch recent decisions for a user, newest first"""
        return (
            self.db.query(Decision)
            .filter(Decision.user_id == user_id)
            .order_by(Decision.created_at.desc())
            .limit(limit)
            .all()
        )


class ConversationRepository:
    """Repository for AI advisor conversations and messages"""

    def __init__(self, db: Session):
        self.db = db

    def create_conversation(self, user_id: str, title: str = "Financial Advice Chat") -> Conversation:
        conversation = Conversation(user_id=user_id, title=title)
        self.db.add(conversation)
        self.db.flush()
        return conversation

    def get_conversation(self, conversation_id: uuid.UUID, user_id: str) -> Optional[Conversation]:
        """Fetch a conversation only if it belongs to the user"""
        return (
            self.db.query(Conversation)
            .filter(Conversation.id == conversation_id, Conversation.user_id == user_id)
            .first()
        )

    def add_message(self, conversation_id: uuid.UUID, role: str, content: str) -> Message:
        message = Message(conversation_id=conversation_id, role=role, content=content)
        self.db.add(message)
        self.db.flush()
        return message

    def list_messages(self, conversation_id: uuid.UUID) -> List[Message]:
        """Fetch messages oldest first"""
        return (
            self.db.query(Message)
            .filter(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.asc())
            .all()
        )
