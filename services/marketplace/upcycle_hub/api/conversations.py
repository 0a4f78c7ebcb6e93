from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from uuid import UUID

from upcycle_hub.auth.dependencies import get_current_user
from upcycle_hub.db.database import get_db
from upcycle_hub.models.user import User
from upcycle_hub.schemas.conversation import (
    ConversationCreate,
    ConversationResponse,
    ConversationListResponse,
    MessageCreate,
    MessageResponse,
    MessageListResponse,
)
from upcycle_hub.services.conversation_service import ConversationService

router = APIRouter(
    prefix="/conversations",
    tags=["Conversations"]
)


def get_conversation_service(db: Session = Depends(get_db)) -> ConversationService:
    """Dependency to get conversation service"""
    return ConversationService(db)


def _translate(error: Exception) -> HTTPException:
    if isinstance(error, PermissionError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(error))
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))


@router.get(
    "",
    response_model=ConversationListResponse,
    summary="List my conversations",
    description="Conversations where the authenticated user is the buyer or the seller, most recent first.",
)
async def list_conversations(
    current_user: User = Depends(get_current_user),
    conversation_service: ConversationService = Depends(get_conversation_service)
):
    return ConversationListResponse(conversations=conversation_service.list_conversations(current_user))


@router.post(
    "",
    response_model=ConversationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Contact a seller",
    description="Start a conversation about a listing, or return the existing one. An opening message is optional.",
    responses={
        403: {"description": "Cannot contact yourself"},
        404: {"description": "Product not found"}
    }
)
async def start_conversation(
    request: ConversationCreate,
    current_user: User = Depends(get_current_user),
    conversation_service: ConversationService = Depends(get_conversation_service)
):
    try:
        return conversation_service.start_conversation(request.product_id, current_user, request.message)
    except (ValueError, PermissionError) as e:
        raise _translate(e)


@router.get(
    "/{conversation_id}/messages",
    response_model=MessageListResponse,
    summary="List messages",
    responses={
        403: {"description": "Not a participant"},
        404: {"description": "Conversation not found"}
    }
)
async def list_messages(
    conversation_id: UUID,
    current_user: User = Depends(get_current_user),
    conversation_service: ConversationService = Depends(get_conversation_service)
):
    try:
        return MessageListResponse(messages=conversation_service.list_messages(conversation_id, current_user))
    except (ValueError, PermissionError) as e:
        raise _translate(e)


@router.post(
    "/{conversation_id}/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send a message",
    responses={
        403: {"description": "Not a participant"},
        404: {"description": "Conversation not found"}
    }
)
async def send_message(
    conversation_id: UUID,
    request: MessageCreate,
    current_user: User = Depends(get_current_user),
    conversation_service: ConversationService = Depends(get_conversation_service)
):
    try:
        return conversation_service.send_message(conversation_id, current_user, request.body)
    except (ValueError, PermissionError) as e:
        raise _translate(e)
