"""
Bookmark Service
Per-user saved items
"""

import uuid
from databases import Database
from fastapi import HTTPException, status


class BookmarkService:
    """Service for bookmark operations"""

    @staticmethod
    async def add_bookmark(db: Database, user_id: str, item_id: str) -> dict:
        """Save an item; saving it again changes nothing"""

        item = await db.fetch_one(
            "SELECT id FROM clothing_items WHERE id = :id",
            {"id": str(item_id)}
        )

        if not item:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Item not found"
            )

        await db.execute(
            """
            INSERT INTO bookmarks (id, user_id, clothing_id)
            VALUES (:id, :user_id, :clothing_id)
            ON CONFLICT (user_id, clothing_id) DO NOTHING
            """,
            {"id": str(uuid.uuid4()), "user_id": str(user_id), "clothing_id": str(item_id)}
        )

        return {"item_id": item_id, "bookmarked": True}

    @staticmethod
    async def remove_bookmark(db: Database, user_id: str, item_id: str) -> dict:
        await db.execute(
            "DELETE FROM bookmarks WHERE user_id = :user_id AND clothing_id = :clothing_id",
            {"user_id": str(user_id), "clothing_id": str(item_id)}
        )

        return {"item_id": item_id, "bookmarked": False}

    @staticmethod
    async def list_bookmarks(db: Database, user_id: str) -> list[dict]:
        """Bookmarked items, most recently saved first"""

        rows = await db.fetch_all(
            """
            SELECT c.*, TRUE AS is_bookmarked, b.created_at AS bookmarked_at
            FROM bookmarks b
            JOIN clothing_items c ON b.clothing_id = c.id
            WHERE b.user_id = :user_id
            ORDER BY b.created_at DESC
            """,
            {"user_id": str(user_id)}
        )

        return [dict(row) for row in rows]


# Create singleton instance
bookmark_service = BookmarkService()
