"""
Authentication Routes
Registration, login and token introspection
"""

from fastapi import APIRouter, Depends, status
from databases import Database
from app.auth import get_current_user
from app.database import get_database
from app.schemas.user import RegisterRequest, LoginRequest, AuthResponse, UserResponse
from app.services.user_service import user_service

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    db: Database = Depends(get_database)
):
    """
    Register a new account

    - **email**: Institutional email address (required, unique)
    - **password**: Password (required)
    - **username**: Public handle (required, unique)
    - **full_name**: Display name

    Returns: The created user and an access token
    """
    return await user_service.register(db, request)


@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: LoginRequest,
    db: Database = Depends(get_database)
):
    """
    Login endpoint

    Returns the user (with their first organization, if any) and an access token.
    """
    return await user_service.login(db, credentials)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """
    Get current authenticated user information
    """
    return await user_service.get_profile(db, current_user["user_id"])
