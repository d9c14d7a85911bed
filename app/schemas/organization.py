"""
Organization Request/Response Models
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from uuid import UUID


class CreateOrganizationRequest(BaseModel):
    """Request to create a new organization"""
    name: str = Field(..., min_length=1, max_length=100, description="Organization name (unique)")
    description: Optional[str] = Field(None, max_length=2000)

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Fashion Club",
                "description": "Thrift swaps and pop-up shops"
            }
        }


class OrganizationResponse(BaseModel):
    id: UUID
    owner_id: UUID
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OrganizationDetailResponse(OrganizationResponse):
    member_count: int


class OrganizationListResponse(BaseModel):
    total: int
    organizations: list[OrganizationResponse]


class MemberResponse(BaseModel):
    user_id: UUID
    username: str
    full_name: Optional[str] = None
    joined_at: Optional[datetime] = None


class MembershipResponse(BaseModel):
    organization_id: UUID
    user_id: UUID
    is_member: bool
