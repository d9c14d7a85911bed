"""
User and Auth Request/Response Models
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime
from uuid import UUID


class RegisterRequest(BaseModel):
    """Request to register a new account"""
    email: EmailStr = Field(..., description="Institutional email address")
    password: str = Field(..., min_length=1, max_length=72)
    username: str = Field(..., min_length=1, max_length=50)
    full_name: Optional[str] = Field(None, max_length=100)

    class Config:
        json_schema_extra = {
            "example": {
                "email": "alice@lsu.edu",
                "password": "pw123",
                "username": "alice",
                "full_name": "Alice Tiger"
            }
        }


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserOrganization(BaseModel):
    """First organization a user belongs to"""
    organization_id: UUID
    organization_name: str


class UserResponse(BaseModel):
    """Public user details (never includes the password hash)"""
    id: UUID
    email: str
    username: str
    full_name: Optional[str] = None
    profile_picture_url: Optional[str] = None
    created_at: Optional[datetime] = None
    organization: Optional[UserOrganization] = None

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    """Returned by register and login"""
    user: UserResponse
    token: str


class UpdateProfileRequest(BaseModel):
    """Partial profile update"""
    full_name: Optional[str] = Field(None, max_length=100)
    profile_picture_url: Optional[str] = Field(None, max_length=255)
