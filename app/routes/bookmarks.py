"""
Bookmark Routes
"""

from fastapi import APIRouter, Depends
from databases import Database
from app.auth import get_current_user
from app.database import get_database
from app.schemas.bookmark import BookmarkRequest, BookmarkStatusResponse, BookmarkedItemResponse
from app.services.bookmark_service import bookmark_service

router = APIRouter()


@router.get("", response_model=list[BookmarkedItemResponse])
async def list_bookmarks(
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """Items the caller has bookmarked"""
    return await bookmark_service.list_bookmarks(db, current_user["user_id"])


@router.post("/add", response_model=BookmarkStatusResponse)
async def add_bookmark(
    request: BookmarkRequest,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """Bookmark an item (no-op if already bookmarked)"""
    return await bookmark_service.add_bookmark(db, current_user["user_id"], request.item_id)


@router.post("/remove", response_model=BookmarkStatusResponse)
async def remove_bookmark(
    request: BookmarkRequest,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """Remove a bookmark (no-op if not bookmarked)"""
    return await bookmark_service.remove_bookmark(db, current_user["user_id"], request.item_id)
