"""
Clothing Item Routes
Listing CRUD and image management
"""

from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, UploadFile, File, status
from databases import Database
from app.auth import get_current_user, get_optional_user, require_owner
from app.database import get_database
from app.schemas.common import MessageOnlyResponse
from app.schemas.item import CreateItemRequest, UpdateItemRequest, ItemResponse
from app.services.listing_service import listing_service
from app.services.storage_service import StorageService

router = APIRouter()


@router.get("", response_model=list[ItemResponse])
async def list_items(
    category: Optional[str] = Query(None),
    size: Optional[str] = Query(None),
    organization_id: Optional[UUID] = Query(None, description="Only items owned by members of this organization"),
    owner_id: Optional[UUID] = Query(None, description="Only items owned by this user"),
    page: int = Query(1, ge=1, description="1-based page number"),
    limit: int = Query(10, ge=1, le=100, description="Number of records to return"),
    current_user: Optional[dict] = Depends(get_optional_user),
    db: Database = Depends(get_database)
):
    """
    List items

    All filters are optional. Authenticated callers also get `is_bookmarked` per item.
    """
    return await listing_service.list_items(
        db,
        category=category,
        size=size,
        organization_id=organization_id,
        owner_id=owner_id,
        viewer_id=current_user["user_id"] if current_user else None,
        page=page,
        limit=limit
    )


@router.post("", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
async def create_item(
    request: CreateItemRequest,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """
    List a new item for sale and/or rent

    The caller becomes the owner.
    """
    return await listing_service.create_item(db, request, current_user["user_id"])


@router.get("/{item_id}", response_model=ItemResponse)
async def get_item(
    item_id: UUID,
    db: Database = Depends(get_database)
):
    """Get item details"""
    return await listing_service.get_item(db, item_id)


@router.put("/{item_id}", response_model=ItemResponse)
async def update_item(
    item_id: UUID,
    request: UpdateItemRequest,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """
    Update an item (owner only)

    Omitted fields are left unchanged.
    """
    return await listing_service.update_item(db, item_id, request, current_user["user_id"])


@router.delete("/{item_id}", response_model=MessageOnlyResponse)
async def delete_item(
    item_id: UUID,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """
    Delete an item (owner only)

    Refused while the item has a pending or active transaction.
    """
    await listing_service.delete_item(db, item_id, current_user["user_id"])
    return {"message": "Item deleted successfully"}


@router.post("/{item_id}/images", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
async def upload_item_image(
    item_id: UUID,
    image: UploadFile = File(...),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """Upload an image and append it to the item's gallery (owner only)"""
    # Ownership is checked before anything is written to storage
    item = await listing_service.get_item(db, item_id)
    require_owner(item, current_user["user_id"], detail="You do not have access to this item")

    url = await StorageService.upload_image(f"items/{item_id}", image)
    return await listing_service.append_image(db, item_id, url, current_user["user_id"])


@router.delete("/{item_id}/images", response_model=ItemResponse)
async def delete_item_image(
    item_id: UUID,
    url: str = Query(..., description="Public URL of the image to remove"),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """Remove an image from the item's gallery (owner only)"""
    item = await listing_service.remove_image(db, item_id, url, current_user["user_id"])
    await StorageService.delete_by_url(url)
    return item
