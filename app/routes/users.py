"""
User Profile Routes
"""

from fastapi import APIRouter, Depends, UploadFile, File
from databases import Database
from app.auth import get_current_user
from app.database import get_database
from app.schemas.user import UpdateProfileRequest, UserResponse
from app.services.storage_service import StorageService
from app.services.user_service import user_service

router = APIRouter()


@router.get("/profile", response_model=UserResponse)
async def get_profile(
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """Get the caller's profile"""
    return await user_service.get_profile(db, current_user["user_id"])


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    request: UpdateProfileRequest,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """
    Update the caller's profile

    Omitted fields are left unchanged.
    """
    return await user_service.update_profile(db, current_user["user_id"], request)


@router.post("/profile/picture", response_model=UserResponse)
async def upload_profile_picture(
    image: UploadFile = File(...),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """Upload a new profile picture (PNG/JPG/WEBP)"""
    url = await StorageService.upload_image(f"users/{current_user['user_id']}", image)
    return await user_service.set_profile_picture(db, current_user["user_id"], url)
