"""
Event Routes
Events and their pop-up shop listings
"""

from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from databases import Database
from app.auth import get_current_user
from app.database import get_database
from app.schemas.common import MessageOnlyResponse
from app.schemas.event import (
    CreateEventRequest,
    UpdateEventRequest,
    EventResponse,
    EventDetailResponse,
    EventListResponse,
    AttachListingRequest
)
from app.schemas.item import ItemResponse
from app.services.event_service import event_service

router = APIRouter()


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    request: CreateEventRequest,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """
    Create an event

    - **title**, **event_date**: required
    - **organization_id**: host organization (caller must be a member)
    """
    return await event_service.create_event(db, request, current_user["user_id"])


@router.get("", response_model=EventListResponse)
async def list_events(
    organization_id: Optional[UUID] = Query(None, description="Only events hosted by this organization"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100, description="Number of records to return"),
    db: Database = Depends(get_database)
):
    """
    List events by date

    Each event is shown from `event_begin` to `event_end` (three days later).
    """
    return await event_service.list_events(db, organization_id=organization_id, page=page, limit=limit)


@router.get("/{event_id}", response_model=EventDetailResponse)
async def get_event(
    event_id: UUID,
    db: Database = Depends(get_database)
):
    """Get event details with the creator's name"""
    return await event_service.get_event(db, event_id)


@router.put("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: UUID,
    request: UpdateEventRequest,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """Update an event (creator only)"""
    return await event_service.update_event(db, event_id, request, current_user["user_id"])


@router.delete("/{event_id}", response_model=MessageOnlyResponse)
async def delete_event(
    event_id: UUID,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """Delete an event (creator only)"""
    await event_service.delete_event(db, event_id, current_user["user_id"])
    return {"message": "Event deleted successfully"}


@router.get("/{event_id}/listings", response_model=list[ItemResponse])
async def list_event_items(
    event_id: UUID,
    db: Database = Depends(get_database)
):
    """Items listed at an event"""
    return await event_service.list_event_items(db, event_id)


@router.post("/{event_id}/listings", status_code=status.HTTP_201_CREATED)
async def attach_item(
    event_id: UUID,
    request: AttachListingRequest,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """List one of the caller's items at an event"""
    return await event_service.attach_item(db, event_id, request.item_id, current_user["user_id"])


@router.delete("/{event_id}/listings/{item_id}", response_model=MessageOnlyResponse)
async def detach_item(
    event_id: UUID,
    item_id: UUID,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """Remove an item from an event (item owner or event creator)"""
    await event_service.detach_item(db, event_id, item_id, current_user["user_id"])
    return {"message": "Listing removed"}
