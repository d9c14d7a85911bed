"""
Message Routes
All endpoints require authentication
"""

from uuid import UUID
from fastapi import APIRouter, Depends, status
from databases import Database
from app.auth import get_current_user
from app.database import get_database
from app.schemas.message import (
    SendMessageRequest,
    MessageResponse,
    ThreadMessageResponse,
    ConversationResponse,
    UnreadCountResponse
)
from app.services.message_service import message_service

router = APIRouter()


@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    request: SendMessageRequest,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """Send a message to another user"""
    return await message_service.send_message(
        db, current_user["user_id"], request.receiver_id, request.content
    )


@router.get("/conversations", response_model=list[ConversationResponse])
async def list_conversations(
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """One entry per counterpart with the latest message, newest first"""
    return await message_service.list_conversations(db, current_user["user_id"])


@router.get("/unread/count", response_model=UnreadCountResponse)
async def get_unread_count(
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """Number of unread messages addressed to the caller"""
    count = await message_service.unread_count(db, current_user["user_id"])
    return {"unread_count": count}


@router.get("/{user_id}", response_model=list[ThreadMessageResponse])
async def get_thread(
    user_id: UUID,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """Full conversation with another user, oldest first"""
    return await message_service.get_thread(db, current_user["user_id"], user_id)


@router.put("/{message_id}/read", response_model=MessageResponse)
async def mark_message_read(
    message_id: UUID,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """Mark a received message as read"""
    return await message_service.mark_read(db, message_id, current_user["user_id"])
