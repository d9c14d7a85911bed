"""
Organization Routes
Organizations and memberships
"""

from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from databases import Database
from app.auth import get_current_user
from app.database import get_database
from app.schemas.organization import (
    CreateOrganizationRequest,
    OrganizationResponse,
    OrganizationDetailResponse,
    OrganizationListResponse,
    MemberResponse,
    MembershipResponse
)
from app.services.organization_service import organization_service

router = APIRouter()


@router.post("", response_model=OrganizationResponse, status_code=status.HTTP_201_CREATED)
async def create_organization(
    request: CreateOrganizationRequest,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """
    Create a new organization

    - **name**: Organization name (required, must be unique)
    - **description**: Optional description

    The caller becomes the owner and first member.
    """
    return await organization_service.create_organization(db, request, current_user["user_id"])


@router.get("", response_model=OrganizationListResponse)
async def list_organizations(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100, description="Number of records to return"),
    db: Database = Depends(get_database)
):
    """List all organizations"""
    return await organization_service.list_organizations(db, page=page, limit=limit)


@router.get("/mine", response_model=list[OrganizationResponse])
async def list_my_organizations(
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """Organizations the caller belongs to"""
    return await organization_service.list_user_organizations(db, current_user["user_id"])


@router.get("/{organization_id}", response_model=OrganizationDetailResponse)
async def get_organization(
    organization_id: UUID,
    db: Database = Depends(get_database)
):
    """Organization details with member count"""
    return await organization_service.get_organization(db, organization_id)


@router.get("/{organization_id}/members", response_model=list[MemberResponse])
async def list_members(
    organization_id: UUID,
    db: Database = Depends(get_database)
):
    """Members of an organization"""
    return await organization_service.list_members(db, organization_id)


@router.post("/{organization_id}/join", response_model=MembershipResponse)
async def join_organization(
    organization_id: UUID,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """Join an organization"""
    return await organization_service.join(db, organization_id, current_user["user_id"])


@router.post("/{organization_id}/leave", response_model=MembershipResponse)
async def leave_organization(
    organization_id: UUID,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """Leave an organization (owners cannot leave)"""
    return await organization_service.leave(db, organization_id, current_user["user_id"])
