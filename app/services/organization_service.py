"""
Organization Service
Business logic for organizations and memberships
"""

import logging
import uuid
from databases import Database
from fastapi import HTTPException, status
from app.auth import is_owner
from app.schemas.organization import CreateOrganizationRequest

logger = logging.getLogger(__name__)


class OrganizationService:
    """Service for organization management operations"""

    @staticmethod
    async def create_organization(db: Database, data: CreateOrganizationRequest, owner_id: str) -> dict:
        """Create an organization; the owner becomes its first member"""

        existing = await db.fetch_one(
            "SELECT id FROM organizations WHERE LOWER(name) = LOWER(:name)",
            {"name": data.name}
        )

        if existing:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Organization '{data.name}' already exists"
            )

        organization_id = str(uuid.uuid4())

        async with db.transaction():
            organization = await db.fetch_one(
                """
                INSERT INTO organizations (id, owner_id, name, description)
                VALUES (:id, :owner_id, :name, :description)
                RETURNING *
                """,
                {
                    "id": organization_id,
                    "owner_id": str(owner_id),
                    "name": data.name,
                    "description": data.description
                }
            )

            await db.execute(
                """
                INSERT INTO members (id, user_id, organization_id)
                VALUES (:id, :user_id, :organization_id)
                ON CONFLICT (user_id, organization_id) DO NOTHING
                """,
                {"id": str(uuid.uuid4()), "user_id": str(owner_id), "organization_id": organization_id}
            )

        logger.info("User %s created organization %s", owner_id, organization_id)
        return dict(organization)

    @staticmethod
    async def get_organization(db: Database, organization_id: str) -> dict:
        """Get organization by ID with its member count"""

        organization = await db.fetch_one(
            "SELECT * FROM organizations WHERE id = :id",
            {"id": str(organization_id)}
        )

        if not organization:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Organization not found"
            )

        member_count = await db.fetch_val(
            "SELECT COUNT(*) FROM members WHERE organization_id = :organization_id",
            {"organization_id": str(organization_id)}
        )

        return {**dict(organization), "member_count": member_count or 0}

    @staticmethod
    async def list_organizations(db: Database, page: int = 1, limit: int = 50) -> dict:
        """List organizations with pagination"""

        total = await db.fetch_val("SELECT COUNT(*) FROM organizations")

        organizations = await db.fetch_all(
            """
            SELECT * FROM organizations
            ORDER BY name ASC
            LIMIT :limit OFFSET :offset
            """,
            {"limit": limit, "offset": (page - 1) * limit}
        )

        return {
            "total": total or 0,
            "organizations": [dict(org) for org in organizations]
        }

    @staticmethod
    async def list_user_organizations(db: Database, user_id: str) -> list[dict]:
        """Organizations the user belongs to"""

        rows = await db.fetch_all(
            """
            SELECT o.*
            FROM organizations o
            JOIN members m ON o.id = m.organization_id
            WHERE m.user_id = :user_id
            ORDER BY m.created_at ASC
            """,
            {"user_id": str(user_id)}
        )

        return [dict(row) for row in rows]

    @staticmethod
    async def is_member(db: Database, organization_id: str, user_id: str) -> bool:
        row = await db.fetch_one(
            "SELECT id FROM members WHERE organization_id = :organization_id AND user_id = :user_id",
            {"organization_id": str(organization_id), "user_id": str(user_id)}
        )
        return row is not None

    @staticmethod
    async def join(db: Database, organization_id: str, user_id: str) -> dict:
        """Join an organization; joining twice changes nothing"""

        await OrganizationService.get_organization(db, organization_id)

        await db.execute(
            """
            INSERT INTO members (id, user_id, organization_id)
            VALUES (:id, :user_id, :organization_id)
            ON CONFLICT (user_id, organization_id) DO NOTHING
            """,
            {"id": str(uuid.uuid4()), "user_id": str(user_id), "organization_id": str(organization_id)}
        )

        return {"organization_id": organization_id, "user_id": user_id, "is_member": True}

    @staticmethod
    async def leave(db: Database, organization_id: str, user_id: str) -> dict:
        """Leave an organization (not allowed for its owner)"""

        organization = await OrganizationService.get_organization(db, organization_id)

        if is_owner(organization, user_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="The owner cannot leave their organization"
            )

        await db.execute(
            "DELETE FROM members WHERE organization_id = :organization_id AND user_id = :user_id",
            {"organization_id": str(organization_id), "user_id": str(user_id)}
        )

        return {"organization_id": organization_id, "user_id": user_id, "is_member": False}

    @staticmethod
    async def list_members(db: Database, organization_id: str) -> list[dict]:
        await OrganizationService.get_organization(db, organization_id)

        rows = await db.fetch_all(
            """
            SELECT u.id AS user_id, u.username, u.full_name, m.created_at AS joined_at
            FROM members m
            JOIN users u ON m.user_id = u.id
            WHERE m.organization_id = :organization_id
            ORDER BY m.created_at ASC
            """,
            {"organization_id": str(organization_id)}
        )

        return [dict(row) for row in rows]


# Create singleton instance
organization_service = OrganizationService()
