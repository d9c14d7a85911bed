"""
Event Service
Events, their display window, and pop-up shop listings
"""

import logging
import uuid
from typing import Optional
from databases import Database
from fastapi import HTTPException, status
from app.auth import require_owner
from app.schemas.event import CreateEventRequest, UpdateEventRequest
from app.services.organization_service import OrganizationService

logger = logging.getLogger(__name__)

# Events are shown from their date until three days later
EVENT_WINDOW = "INTERVAL '3 days'"

UPDATABLE_COLUMNS = ("title", "description", "event_date", "location", "image_url")


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Event not found"
    )


class EventService:
    """Service for event operations"""

    @staticmethod
    async def create_event(db: Database, data: CreateEventRequest, creator_id: str) -> dict:
        """Create an event, optionally hosted by one of the creator's organizations"""

        if data.organization_id is not None:
            await OrganizationService.get_organization(db, str(data.organization_id))
            if not await OrganizationService.is_member(db, str(data.organization_id), creator_id):
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="You must be a member of the organization to host its events"
                )

        event = await db.fetch_one(
            """
            INSERT INTO events
            (id, creator_id, organization_id, title, description, event_date, location, image_url)
            VALUES (:id, :creator_id, :organization_id, :title, :description, :event_date, :location, :image_url)
            RETURNING *
            """,
            {
                "id": str(uuid.uuid4()),
                "creator_id": str(creator_id),
                "organization_id": str(data.organization_id) if data.organization_id else None,
                "title": data.title,
                "description": data.description,
                "event_date": data.event_date,
                "location": data.location,
                "image_url": data.image_url
            }
        )

        logger.info("User %s created event %s", creator_id, event["id"])
        return dict(event)

    @staticmethod
    async def list_events(
        db: Database,
        organization_id: Optional[str] = None,
        page: int = 1,
        limit: int = 20
    ) -> dict:
        """List events in date order with their display window"""

        where_clause = "1=1"
        params = {}

        if organization_id:
            where_clause = "e.organization_id = :organization_id"
            params["organization_id"] = str(organization_id)

        total = await db.fetch_val(
            f"SELECT COUNT(*) FROM events e WHERE {where_clause}",
            params
        )

        rows = await db.fetch_all(
            f"""
            SELECT
                e.id AS event_id,
                e.title,
                e.description,
                e.event_date AS event_begin,
                e.event_date + {EVENT_WINDOW} AS event_end,
                e.location,
                e.image_url,
                e.organization_id,
                o.name AS organizer_name,
                u.username AS creator_name
            FROM events e
            JOIN users u ON e.creator_id = u.id
            LEFT JOIN organizations o ON e.organization_id = o.id
            WHERE {where_clause}
            ORDER BY e.event_date ASC
            LIMIT :limit OFFSET :offset
            """,
            {**params, "limit": limit, "offset": (page - 1) * limit}
        )

        return {
            "total": total or 0,
            "page": page,
            "limit": limit,
            "events": [dict(row) for row in rows]
        }

    @staticmethod
    async def get_event(db: Database, event_id: str) -> dict:
        """Get event by ID with creator and organizer names"""

        event = await db.fetch_one(
            """
            SELECT e.*, u.username AS creator_name, o.name AS organizer_name
            FROM events e
            JOIN users u ON e.creator_id = u.id
            LEFT JOIN organizations o ON e.organization_id = o.id
            WHERE e.id = :id
            """,
            {"id": str(event_id)}
        )

        if not event:
            raise _not_found()

        return dict(event)

    @staticmethod
    async def _get_owned_event(db: Database, event_id: str, caller_id: str) -> dict:
        event = await db.fetch_one(
            "SELECT * FROM events WHERE id = :id",
            {"id": str(event_id)}
        )

        if not event:
            raise _not_found()

        require_owner(event, caller_id, "creator_id", detail="Only the event creator can change this event")
        return dict(event)

    @staticmethod
    async def update_event(db: Database, event_id: str, data: UpdateEventRequest, caller_id: str) -> dict:
        """Partial update, creator only"""

        event = await EventService._get_owned_event(db, event_id, caller_id)

        changes = {
            column: value
            for column, value in data.model_dump(exclude_unset=True).items()
            if column in UPDATABLE_COLUMNS
        }

        if not changes:
            return event

        assignments = ", ".join(f"{column} = :{column}" for column in changes)

        updated = await db.fetch_one(
            f"""
            UPDATE events
            SET {assignments}, updated_at = NOW()
            WHERE id = :id
            RETURNING *
            """,
            {**changes, "id": str(event_id)}
        )

        if not updated:
            raise _not_found()

        return dict(updated)

    @staticmethod
    async def delete_event(db: Database, event_id: str, caller_id: str) -> None:
        await EventService._get_owned_event(db, event_id, caller_id)

        await db.execute(
            "DELETE FROM events WHERE id = :id",
            {"id": str(event_id)}
        )

        logger.info("User %s deleted event %s", caller_id, event_id)

    @staticmethod
    async def attach_item(db: Database, event_id: str, item_id: str, caller_id: str) -> dict:
        """Put one of the caller's items on an event's pop-up shop"""

        event = await db.fetch_one(
            "SELECT id FROM events WHERE id = :id",
            {"id": str(event_id)}
        )

        if not event:
            raise _not_found()

        item = await db.fetch_one(
            "SELECT id, owner_id FROM clothing_items WHERE id = :id",
            {"id": str(item_id)}
        )

        if not item:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Item not found"
            )

        require_owner(item, caller_id, detail="You can only list your own items at an event")

        await db.execute(
            """
            INSERT INTO event_listings (id, event_id, item_id)
            VALUES (:id, :event_id, :item_id)
            ON CONFLICT (event_id, item_id) DO NOTHING
            """,
            {"id": str(uuid.uuid4()), "event_id": str(event_id), "item_id": str(item_id)}
        )

        return {"event_id": event_id, "item_id": item_id}

    @staticmethod
    async def detach_item(db: Database, event_id: str, item_id: str, caller_id: str) -> None:
        """Remove an item from an event (item owner or event creator)"""

        listing = await db.fetch_one(
            """
            SELECT el.id, c.owner_id, e.creator_id
            FROM event_listings el
            JOIN clothing_items c ON el.item_id = c.id
            JOIN events e ON el.event_id = e.id
            WHERE el.event_id = :event_id AND el.item_id = :item_id
            """,
            {"event_id": str(event_id), "item_id": str(item_id)}
        )

        if not listing:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Item is not listed at this event"
            )

        require_owner(
            listing, caller_id, "owner_id", "creator_id",
            detail="Only the item owner or event creator can remove this listing"
        )

        await db.execute(
            "DELETE FROM event_listings WHERE id = :id",
            {"id": listing["id"]}
        )

    @staticmethod
    async def list_event_items(db: Database, event_id: str) -> list[dict]:
        """Items attached to an event"""

        event = await db.fetch_one(
            "SELECT id FROM events WHERE id = :id",
            {"id": str(event_id)}
        )

        if not event:
            raise _not_found()

        rows = await db.fetch_all(
            """
            SELECT c.*
            FROM event_listings el
            JOIN clothing_items c ON el.item_id = c.id
            WHERE el.event_id = :event_id
            ORDER BY el.created_at ASC
            """,
            {"event_id": str(event_id)}
        )

        return [dict(row) for row in rows]


# Create singleton instance
event_service = EventService()
