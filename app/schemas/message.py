"""
Message Request/Response Models
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from uuid import UUID


class SendMessageRequest(BaseModel):
    receiver_id: UUID
    content: str = Field(..., min_length=1, max_length=5000)


class MessageResponse(BaseModel):
    id: UUID
    sender_id: UUID
    receiver_id: UUID
    content: str
    read: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ThreadMessageResponse(MessageResponse):
    """Message with the sender's public details"""
    username: Optional[str] = None
    profile_picture_url: Optional[str] = None


class ConversationResponse(BaseModel):
    """One row per counterpart, with the latest message"""
    other_user_id: UUID
    username: str
    profile_picture_url: Optional[str] = None
    last_message: Optional[str] = None
    last_message_time: Optional[datetime] = None


class UnreadCountResponse(BaseModel):
    unread_count: int
