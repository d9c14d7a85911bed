"""
Bookmark Request/Response Models
"""

from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from uuid import UUID
from app.schemas.item import ItemResponse


class BookmarkRequest(BaseModel):
    item_id: UUID


class BookmarkStatusResponse(BaseModel):
    item_id: UUID
    bookmarked: bool


class BookmarkedItemResponse(ItemResponse):
    """Item plus the time it was bookmarked"""
    bookmarked_at: Optional[datetime] = None
