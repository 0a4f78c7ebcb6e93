from sqlalchemy.orm import Session, selectinload
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from typing import List, Optional
from uuid import UUID
from datetime import datetime, timezone
import logging

from upcycle_hub.models.conversation import Conversation, Message
from upcycle_hub.models.product import Product
from upcycle_hub.models.user import User

logger = logging.getLogger(__name__)


def message_to_dict(message: Message) -> dict:
    return {
        "id": message.id,
        "conversation_id": message.conversation_id,
        "sender_id": message.sender_id,
        "body": message.body,
        "created_at": message.created_at,
    }


class ConversationService:
    """Service layer for buyer/seller conversations about a listing"""

    def __init__(self, db: Session):
        self.db = db

    def _to_response_dict(self, conversation: Conversation) -> dict:
        last_message = conversation.messages[-1] if conversation.messages else None
        return {
            "id": conversation.id,
            "product_id": conversation.product_id,
            "product_title": conversation.product.title if conversation.product else None,
            "buyer_id": conversation.buyer_id,
            "seller_id": conversation.seller_id,
            "last_message": message_to_dict(last_message) if last_message else None,
            "created_at": conversation.created_at,
            "updated_at": conversation.updated_at,
        }

    def _get_for_participant(self, conversation_id: UUID, user: User) -> Conversation:
        conversation = self.db.query(Conversation).options(
            selectinload(Conversation.messages)
        ).filter(Conversation.id == conversation_id).first()

        if not conversation:
            raise ValueError("Conversation not found")
        if user.id not in (conversation.buyer_id, conversation.seller_id):
            raise PermissionError("You are not a participant in this conversation")
        return conversation

    def list_conversations(self, user: User) -> List[dict]:
        conversations = self.db.query(Conversation).options(
            selectinload(Conversation.messages),
            selectinload(Conversation.product),
        ).filter(
            or_(Conversation.buyer_id == user.id, Conversation.seller_id == user.id)
        ).order_by(Conversation.updated_at.desc()).all()

        return [self._to_response_dict(conversation) for conversation in conversations]

    def _find_conversation(self, product_id: UUID, buyer_id: UUID) -> Optional[Conversation]:
        return self.db.query(Conversation).filter(
            Conversation.product_id == product_id,
            Conversation.buyer_id == buyer_id
        ).first()

    def start_conversation(self, product_id: UUID, buyer: User, message: Optional[str] = None) -> dict:
        """Open a conversation with the listing's seller, reusing an existing one"""
        product = self.db.query(Product).filter(
            Product.id == product_id,
            Product.deleted_at.is_(None)
        ).first()
        if not product:
            raise ValueError("Product not found")
        if product.seller_id == buyer.id:
            raise PermissionError("You cannot start a conversation about your own listing")

        conversation = self._find_conversation(product.id, buyer.id)
        if conversation is None:
            conversation = Conversation(
                product_id=product.id,
                buyer_id=buyer.id,
                seller_id=product.seller_id,
            )
            self.db.add(conversation)
            try:
                self.db.flush()
                logger.info(f"Started conversation {conversation.id} on product {product.id} for {buyer.email}")
            except IntegrityError:
                # Another request opened the same conversation first
                self.db.rollback()
                conversation = self._find_conversation(product.id, buyer.id)
                if conversation is None:
                    raise
                logger.info(f"Reusing concurrently created conversation {conversation.id}")

        if message:
            self.db.add(Message(conversation_id=conversation.id, sender_id=buyer.id, body=message))

        self.db.commit()
        self.db.refresh(conversation)
        return self._to_response_dict(conversation)

    def list_messages(self, conversation_id: UUID, user: User) -> List[dict]:
        conversation = self._get_for_participant(conversation_id, user)
        return [message_to_dict(message) for message in conversation.messages]

    def send_message(self, conversation_id: UUID, user: User, body: str) -> dict:
        conversation = self._get_for_participant(conversation_id, user)

        message = Message(conversation_id=conversation.id, sender_id=user.id, body=body)
        self.db.add(message)
        # Bump the thread so it sorts first in the inbox
        conversation.updated_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(message)
        return message_to_dict(message)
