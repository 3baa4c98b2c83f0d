"""SQLAlchemy ORM models for profiles, budgets, decisions and chat history"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Boolean, DateTime, Integer, ForeignKey, Numeric, Text, JSON, Uuid
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def utcnow() -> datetime:
    # Python-side timestamps keep microsecond ordering on every backend
    return datetime.now(timezone.utc)


class Profile(Base):
    """User profile: subscription tier and health thresholds"""

    __tablename__ = "profile"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, unique=True, index=True)
    display_name = Column(Text, nullable=True)
    subscription_tier = Column(String(16), nullable=False, default="free")
    savings_rate_threshold = Column(Integer, nullable=False, default=20)
    expense_ratio_threshold = Column(Integer, nullable=False, default=80)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class Budget(Base):
    """Budget snapshot entered by a user; one active row per user"""

    __tablename__ = "budget"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    monthly_income = Column(Numeric(14, 2), nullable=False)
    monthly_expenses = Column(Numeric(14, 2), nullable=False)
    savings = Column(Numeric(14, 2), nullable=False)
    emergency_fund = Column(Numeric(14, 2), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class Decision(Base):
    """Analyzed life decision: raw input and engine result"""

    __tablename__ = "decision"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    category = Column(String(16), nullable=False)
    input_payload = Column(JSON, nullable=False)
    result_payload = Column(JSON, nullable=False)
    affordability = Column(String(16), nullable=False)
    risk_level = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class Conversation(Base):
    """AI advisor chat session"""

    __tablename__ = "ai_conversation"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    title = Column(Text, nullable=False, default="Financial Advice Chat")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    messages = relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="Message.created_at",
    )


class Message(Base):
    """Single chat message within a conversation"""

    __tablename__ = "ai_message"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    conversation_id = Column(Uuid, ForeignKey("ai_conversation.id", ondelete="CASCADE"), nullable=False)
    role = Column(String(16), nullable=False)  # "user" or "assistant"
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    conversation = relationship("Conversation", back_populates="messages")
