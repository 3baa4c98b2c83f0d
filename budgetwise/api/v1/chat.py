"""/v1/chat - Premium AI advisor conversations"""

import uuid
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from budgetwise.api.v1.schemas import (
    ChatMessageSchema,
    ConversationRequest,
    ConversationResponse,
    MessageListResponse,
    MessageRequest,
)
from budgetwise.api.dependencies import get_advisor_client, get_request_id
from budgetwise.infrastructure.database.session import get_db
from budgetwise.infrastructure.database.repositories import BudgetRepository, ConversationRepository, ProfileRepository
from budgetwise.infrastructure.database.models import Conversation, Message
from budgetwise.infrastructure.clients.advisor import AdvisorClient, build_welcome_message
from budgetwise.domain.exceptions import AdvisorUnavailableError, ConversationNotFoundError, PremiumRequiredError
from budgetwise.domain.models import BudgetSnapshot

router = APIRouter()


def _require_premium(db: Session, user_id: str) -> None:
    profile = ProfileRepository(db).get_or_create(user_id)
    if profile.subscription_tier != "premium":
        raise PremiumRequiredError("AI advisor is a premium feature")


def _active_snapshot(db: Session, user_id: str) -> Optional[BudgetSnapshot]:
    db_budget = BudgetRepository(db).get_active_budget(user_id)
    return BudgetRepository.to_snapshot(db_budget) if db_budget is not None else None


def _load_conversation(db: Session, conversation_id: str, user_id: str) -> Conversation:
    try:
        conversation_uuid = uuid.UUID(conversation_id)
    except ValueError:
        raise ConversationNotFoundError(f"Invalid conversation ID: {conversation_id}")

    conversation = ConversationRepository(db).get_conversation(conversation_uuid, user_id)
    if conversation is None:
        raise ConversationNotFoundError(f"Conversation {conversation_id} not found")
    return conversation


def _message_schema(message: Message) -> ChatMessageSchema:
    return ChatMessageSchema(
        message_id=str(message.id),
        role=message.role,
        content=message.content,
        created_at=message.created_at.isoformat(),
    )


@router.post("/chat/conversations", response_model=ConversationResponse)
def start_conversation(body: ConversationRequest, request: Request, db: Session = Depends(get_db)):
    """
    Open a new advisor conversation for a premium user.

    The welcome message references the active budget, if any, and is not stored.
    """
    request_id = get_request_id(request)
    try:
        _require_premium(db, body.user_id)
        conversation = ConversationRepository(db).create_conversation(body.user_id, body.title)
        welcome = build_welcome_message(_active_snapshot(db, body.user_id))
        db.commit()
    except PremiumRequiredError as e:
        db.commit()  # keep the lazily created profile
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        db.rollback()
        logging.error(f"Failed to start conversation: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    return ConversationResponse(
        conversation_id=str(conversation.id),
        title=conversation.title,
        welcome_message=ChatMessageSchema(
            role="assistant",
            content=welcome,
            created_at=conversation.created_at.isoformat(),
        ),
    )


@router.post("/chat/conversations/{conversation_id}/messages", response_model=ChatMessageSchema)
async def send_message(
    conversation_id: str,
    body: MessageRequest,
    request: Request,
    db: Session = Depends(get_db),
    advisor: AdvisorClient = Depends(get_advisor_client),
):
    """
    Send a user message and return the advisor's reply.

    Flow:
    1. Check premium tier and conversation ownership
    2. Store the user message
    3. Ask the advisor, passing the active budget
    4. Store and return the assistant reply

    If the advisor fails the user message stays stored and 503 is returned.
    """
    request_id = get_request_id(request)
    repo = ConversationRepository(db)

    try:
        _require_premium(db, body.user_id)
        conversation = _load_conversation(db, conversation_id, body.user_id)
        repo.add_message(conversation.id, "user", body.content)
        db.commit()

        reply = await advisor.get_advice(body.content, _active_snapshot(db, body.user_id))

        assistant_message = repo.add_message(conversation.id, "assistant", reply)
        db.commit()

    except PremiumRequiredError as e:
        db.commit()
        raise HTTPException(status_code=403, detail=str(e))

    except ConversationNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except AdvisorUnavailableError as e:
        db.rollback()
        logging.error(f"Advisor unavailable: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="AI advisor is temporarily unavailable. Please try again in a moment.")

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    return _message_schema(assistant_message)


@router.get("/chat/conversations/{conversation_id}/messages", response_model=MessageListResponse)
def list_messages(conversation_id: str, user_id: str, db: Session = Depends(get_db)):
    """Retrieve stored messages, oldest first"""
    try:
        conversation = _load_conversation(db, conversation_id, user_id)
    except ConversationNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    messages = ConversationRepository(db).list_messages(conversation.id)
    return MessageListResponse(
        conversation_id=str(conversation.id),
        messages=[_message_schema(m) for m in messages],
    )
