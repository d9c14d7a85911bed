"""
Listing Service
Business logic for clothing item listings
"""

import logging
import uuid
from typing import Optional
from databases import Database
from fastapi import HTTPException, status
from app.auth import require_owner
from app.schemas.item import CreateItemRequest, UpdateItemRequest
from app.schemas.transaction import OPEN_STATUSES

logger = logging.getLogger(__name__)

# Columns a caller may change through a partial update
UPDATABLE_COLUMNS = (
    "title",
    "description",
    "category",
    "size",
    "condition",
    "purchase_price",
    "rental_price",
    "is_available_for_rent",
    "is_available_for_sale",
    "images",
)

OPEN_STATUS_SQL = ", ".join(f"'{s}'" for s in OPEN_STATUSES)


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Item not found"
    )


class ListingService:
    """Service for clothing item operations"""

    @staticmethod
    async def list_items(
        db: Database,
        category: Optional[str] = None,
        size: Optional[str] = None,
        organization_id: Optional[str] = None,
        owner_id: Optional[str] = None,
        viewer_id: Optional[str] = None,
        page: int = 1,
        limit: int = 10
    ) -> list[dict]:
        """
        List items with optional filters and 1-based offset pagination

        When a viewer is given, each row carries ``is_bookmarked``.
        """
        where_clause = "1=1"
        params = {"limit": limit, "offset": (page - 1) * limit}

        if category:
            where_clause += " AND c.category = :category"
            params["category"] = category

        if size:
            where_clause += " AND c.size = :size"
            params["size"] = size

        if owner_id:
            where_clause += " AND c.owner_id = :owner_id"
            params["owner_id"] = str(owner_id)

        if organization_id:
            where_clause += """
                AND c.owner_id IN (
                    SELECT user_id FROM members WHERE organization_id = :organization_id
                )"""
            params["organization_id"] = str(organization_id)

        if viewer_id:
            query = f"""
            SELECT c.*, (b.id IS NOT NULL) AS is_bookmarked
            FROM clothing_items c
            LEFT JOIN bookmarks b ON b.clothing_id = c.id AND b.user_id = :viewer_id
            WHERE {where_clause}
            ORDER BY c.created_at DESC
            LIMIT :limit OFFSET :offset
            """
            params["viewer_id"] = str(viewer_id)
        else:
            query = f"""
            SELECT c.*
            FROM clothing_items c
            WHERE {where_clause}
            ORDER BY c.created_at DESC
            LIMIT :limit OFFSET :offset
            """

        rows = await db.fetch_all(query, params)
        return [dict(row) for row in rows]

    @staticmethod
    async def create_item(db: Database, data: CreateItemRequest, owner_id: str) -> dict:
        """Create a listing owned by the caller"""

        item = await db.fetch_one(
            """
            INSERT INTO clothing_items
            (id, owner_id, title, description, category, size, condition,
             purchase_price, rental_price, is_available_for_rent, is_available_for_sale, images)
            VALUES (:id, :owner_id, :title, :description, :category, :size, :condition,
                    :purchase_price, :rental_price, :is_available_for_rent, :is_available_for_sale, :images)
            RETURNING *
            """,
            {
                "id": str(uuid.uuid4()),
                "owner_id": str(owner_id),
                "title": data.title,
                "description": data.description,
                "category": data.category,
                "size": data.size,
                "condition": data.condition,
                "purchase_price": data.purchase_price,
                "rental_price": data.rental_price,
                "is_available_for_rent": data.is_available_for_rent,
                "is_available_for_sale": data.is_available_for_sale,
                "images": data.images
            }
        )

        logger.info("User %s listed item %s", owner_id, item["id"])
        return dict(item)

    @staticmethod
    async def get_item(db: Database, item_id: str) -> dict:
        """Get item by ID"""

        item = await db.fetch_one(
            "SELECT * FROM clothing_items WHERE id = :id",
            {"id": str(item_id)}
        )

        if not item:
            raise _not_found()

        return dict(item)

    @staticmethod
    async def update_item(db: Database, item_id: str, data: UpdateItemRequest, caller_id: str) -> dict:
        """Partial update, owner only"""

        item = await ListingService.get_item(db, item_id)
        require_owner(item, caller_id, detail="You do not have access to this item")

        changes = {
            column: value
            for column, value in data.model_dump(exclude_unset=True).items()
            if column in UPDATABLE_COLUMNS
        }

        if not changes:
            return item

        assignments = ", ".join(f"{column} = :{column}" for column in changes)
        params = {**changes, "id": str(item_id)}

        updated = await db.fetch_one(
            f"""
            UPDATE clothing_items
            SET {assignments}, updated_at = NOW()
            WHERE id = :id
            RETURNING *
            """,
            params
        )

        if not updated:
            raise _not_found()

        return dict(updated)

    @staticmethod
    async def delete_item(db: Database, item_id: str, caller_id: str) -> None:
        """
        Delete an item

        Refused with 409 while any open transaction references the item,
        whoever asks; otherwise owner only.
        """
        async with db.transaction():
            item = await db.fetch_one(
                "SELECT id, owner_id FROM clothing_items WHERE id = :id FOR UPDATE",
                {"id": str(item_id)}
            )

            if not item:
                raise _not_found()

            open_count = await db.fetch_val(
                f"""
                SELECT COUNT(*) FROM transactions
                WHERE item_id = :item_id AND UPPER(status) IN ({OPEN_STATUS_SQL})
                """,
                {"item_id": str(item_id)}
            )

            if open_count:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="Cannot delete item with active transactions"
                )

            require_owner(item, caller_id, detail="You do not have access to this item")

            await db.execute(
                "DELETE FROM clothing_items WHERE id = :id",
                {"id": str(item_id)}
            )

        logger.info("User %s deleted item %s", caller_id, item_id)

    @staticmethod
    async def append_image(db: Database, item_id: str, url: str, caller_id: str) -> dict:
        """Append an uploaded image URL to the item's ordered image list"""

        item = await ListingService.get_item(db, item_id)
        require_owner(item, caller_id, detail="You do not have access to this item")

        updated = await db.fetch_one(
            """
            UPDATE clothing_items
            SET images = array_append(images, :url), updated_at = NOW()
            WHERE id = :id
            RETURNING *
            """,
            {"id": str(item_id), "url": url}
        )

        if not updated:
            raise _not_found()

        return dict(updated)

    @staticmethod
    async def remove_image(db: Database, item_id: str, url: str, caller_id: str) -> dict:
        """Drop an image URL from the item"""

        item = await ListingService.get_item(db, item_id)
        require_owner(item, caller_id, detail="You do not have access to this item")

        if url not in (item.get("images") or []):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Image not found on this item"
            )

        updated = await db.fetch_one(
            """
            UPDATE clothing_items
            SET images = array_remove(images, :url), updated_at = NOW()
            WHERE id = :id
            RETURNING *
            """,
            {"id": str(item_id), "url": url}
        )

        if not updated:
            raise _not_found()

        return dict(updated)


# Create singleton instance
listing_service = ListingService()
