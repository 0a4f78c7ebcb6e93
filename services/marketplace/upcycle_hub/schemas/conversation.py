from pydantic import BaseModel, Field
from typing import Optional, List
from uuid import UUID
from datetime import datetime


class ConversationCreate(BaseModel):
    product_id: UUID = Field(..., description="Listing the buyer is asking about")
    message: Optional[str] = Field(None, min_length=1, max_length=2000, description="Optional opening message")


class MessageCreate(BaseModel):
    body: str = Field(..., min_length=1, max_length=2000)


class MessageResponse(BaseModel):
    id: UUID
    conversation_id: UUID
    sender_id: str
    body: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ConversationResponse(BaseModel):
    id: UUID
    product_id: UUID
    product_title: Optional[str] = None
    buyer_id: str
    seller_id: str
    last_message: Optional[MessageResponse] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ConversationListResponse(BaseModel):
    conversations: List[ConversationResponse]


class MessageListResponse(BaseModel):
    messages: List[MessageResponse]
