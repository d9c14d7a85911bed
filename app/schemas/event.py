"""
Event Request/Response Models
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from uuid import UUID


class CreateEventRequest(BaseModel):
    """Request to create an event"""
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    event_date: datetime
    location: Optional[str] = Field(None, max_length=255)
    image_url: Optional[str] = Field(None, max_length=255)
    organization_id: Optional[UUID] = Field(None, description="Organization hosting the event")


class UpdateEventRequest(BaseModel):
    """Partial event update"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    event_date: Optional[datetime] = None
    location: Optional[str] = Field(None, max_length=255)
    image_url: Optional[str] = Field(None, max_length=255)

    @field_validator("title", "event_date", mode="before")
    @classmethod
    def _not_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class EventResponse(BaseModel):
    id: UUID
    creator_id: UUID
    organization_id: Optional[UUID] = None
    title: str
    description: Optional[str] = None
    event_date: datetime
    location: Optional[str] = None
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EventDetailResponse(EventResponse):
    creator_name: Optional[str] = None
    organizer_name: Optional[str] = None


class EventSummaryResponse(BaseModel):
    """Event as shown in listings, with its display window"""
    event_id: UUID
    title: str
    description: Optional[str] = None
    event_begin: datetime
    event_end: datetime
    location: Optional[str] = None
    image_url: Optional[str] = None
    organization_id: Optional[UUID] = None
    organizer_name: Optional[str] = None
    creator_name: Optional[str] = None


class EventListResponse(BaseModel):
    total: int
    page: int
    limit: int
    events: list[EventSummaryResponse]


class AttachListingRequest(BaseModel):
    item_id: UUID
