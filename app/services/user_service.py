"""
User Service
Registration, login and profile management
"""

import logging
import uuid
from asyncpg.exceptions import UniqueViolationError
from databases import Database
from fastapi import HTTPException, status
from app.auth import hash_password, verify_password, create_user_token
from app.config import settings
from app.schemas.user import RegisterRequest, LoginRequest, UpdateProfileRequest

logger = logging.getLogger(__name__)

PUBLIC_USER_COLUMNS = "id, email, username, full_name, profile_picture_url, created_at"


class UserService:
    """Service for account operations"""

    @staticmethod
    def is_allowed_email(email: str) -> bool:
        """Only institutional addresses may register or log in"""
        domain = settings.ALLOWED_EMAIL_DOMAIN.lower().lstrip("@")
        return email.lower().endswith(f"@{domain}")

    @staticmethod
    def _ensure_allowed_email(email: str) -> None:
        if not UserService.is_allowed_email(email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Only @{settings.ALLOWED_EMAIL_DOMAIN} email addresses are allowed"
            )

    @staticmethod
    async def register(db: Database, data: RegisterRequest) -> dict:
        """Create an account and issue its first token"""

        UserService._ensure_allowed_email(data.email)
        email = data.email.lower()

        existing = await db.fetch_one(
            "SELECT id FROM users WHERE LOWER(email) = :email OR username = :username",
            {"email": email, "username": data.username}
        )

        if existing:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User already exists"
            )

        try:
            user = await db.fetch_one(
                f"""
                INSERT INTO users (id, email, password_hash, username, full_name)
                VALUES (:id, :email, :password_hash, :username, :full_name)
                RETURNING {PUBLIC_USER_COLUMNS}
                """,
                {
                    "id": str(uuid.uuid4()),
                    "email": email,
                    "password_hash": hash_password(data.password),
                    "username": data.username,
                    "full_name": data.full_name
                }
            )
        except UniqueViolationError:
            # Lost a race with a concurrent registration
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User already exists"
            )

        user = dict(user)
        logger.info("Registered user %s", user["id"])

        return {"user": user, "token": create_user_token(user)}

    @staticmethod
    async def login(db: Database, data: LoginRequest) -> dict:
        """Verify credentials and issue a token"""

        UserService._ensure_allowed_email(data.email)

        row = await db.fetch_one(
            f"SELECT {PUBLIC_USER_COLUMNS}, password_hash FROM users WHERE LOWER(email) = :email",
            {"email": data.email.lower()}
        )

        if not row or not verify_password(data.password, row["password_hash"]):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid email or password"
            )

        user = dict(row)
        user.pop("password_hash", None)

        organization = await db.fetch_one(
            """
            SELECT o.id AS organization_id, o.name AS organization_name
            FROM organizations o
            JOIN members m ON o.id = m.organization_id
            WHERE m.user_id = :user_id
            ORDER BY m.created_at ASC
            LIMIT 1
            """,
            {"user_id": user["id"]}
        )
        user["organization"] = dict(organization) if organization else None

        return {"user": user, "token": create_user_token(user)}

    @staticmethod
    async def get_profile(db: Database, user_id: str) -> dict:
        """Get a user's public profile"""

        user = await db.fetch_one(
            f"SELECT {PUBLIC_USER_COLUMNS} FROM users WHERE id = :id",
            {"id": user_id}
        )

        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )

        return dict(user)

    @staticmethod
    async def update_profile(db: Database, user_id: str, data: UpdateProfileRequest) -> dict:
        """Partial profile update"""

        user = await db.fetch_one(
            f"""
            UPDATE users
            SET full_name = COALESCE(:full_name, full_name),
                profile_picture_url = COALESCE(:profile_picture_url, profile_picture_url),
                updated_at = NOW()
            WHERE id = :id
            RETURNING {PUBLIC_USER_COLUMNS}
            """,
            {
                "id": user_id,
                "full_name": data.full_name,
                "profile_picture_url": data.profile_picture_url
            }
        )

        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )

        return dict(user)

    @staticmethod
    async def set_profile_picture(db: Database, user_id: str, url: str) -> dict:
        return await UserService.update_profile(
            db, user_id, UpdateProfileRequest(profile_picture_url=url)
        )


# Create singleton instance
user_service = UserService()
