"""
Messages, bookmarks, organizations and events
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from fastapi import HTTPException

from app.schemas.event import CreateEventRequest, UpdateEventRequest
from app.schemas.organization import CreateOrganizationRequest
from app.services.bookmark_service import BookmarkService
from app.services.event_service import EventService
from app.services.message_service import MessageService
from app.services.organization_service import OrganizationService

from conftest import executed_sql, make_item


def make_message(sender, receiver, **overrides):
    message = {
        "id": str(uuid4()),
        "sender_id": str(sender),
        "receiver_id": str(receiver),
        "content": "Is this still available?",
        "read": False,
        "created_at": datetime.now(timezone.utc),
    }
    message.update(overrides)
    return message


class TestMessages:

    @pytest.mark.asyncio
    async def test_send_to_unknown_user(self, mock_db):
        with pytest.raises(HTTPException) as exc:
            await MessageService.send_message(mock_db, str(uuid4()), str(uuid4()), "hi")
        assert exc.value.status_code == 404
        assert mock_db.fetch_one.await_count == 1

    @pytest.mark.asyncio
    async def test_send_stores_unread_message(self, mock_db):
        sender, receiver = str(uuid4()), str(uuid4())
        mock_db.fetch_one.side_effect = [{"id": receiver}, make_message(sender, receiver)]

        result = await MessageService.send_message(mock_db, sender, receiver, "hi")

        assert result["read"] is False
        assert mock_db.fetch_one.await_args.args[1]["content"] == "hi"

    @pytest.mark.asyncio
    async def test_only_receiver_marks_read(self, mock_db):
        sender, receiver = str(uuid4()), str(uuid4())
        mock_db.fetch_one.side_effect = [make_message(sender, receiver)]

        with pytest.raises(HTTPException) as exc:
            await MessageService.mark_read(mock_db, str(uuid4()), sender)

        assert exc.value.status_code == 403

    @pytest.mark.asyncio
    async def test_mark_read_twice_is_a_no_op(self, mock_db):
        sender, receiver = str(uuid4()), str(uuid4())
        message = make_message(sender, receiver, read=True)
        mock_db.fetch_one.side_effect = [message]

        result = await MessageService.mark_read(mock_db, message["id"], receiver)

        assert result["read"] is True
        assert mock_db.fetch_one.await_count == 1

    @pytest.mark.asyncio
    async def test_unread_count(self, mock_db):
        mock_db.fetch_val.return_value = 3
        assert await MessageService.unread_count(mock_db, str(uuid4())) == 3

    @pytest.mark.asyncio
    async def test_thread_is_oldest_first(self, mock_db):
        await MessageService.get_thread(mock_db, str(uuid4()), str(uuid4()))
        assert "ORDER BY m.created_at ASC" in mock_db.fetch_all.await_args.args[0]


class TestBookmarks:

    @pytest.mark.asyncio
    async def test_bookmark_missing_item(self, mock_db):
        with pytest.raises(HTTPException) as exc:
            await BookmarkService.add_bookmark(mock_db, str(uuid4()), str(uuid4()))
        assert exc.value.status_code == 404
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_bookmark_is_idempotent_insert(self, mock_db):
        item_id = str(uuid4())
        mock_db.fetch_one.side_effect = [{"id": item_id}]

        result = await BookmarkService.add_bookmark(mock_db, str(uuid4()), item_id)

        assert result == {"item_id": item_id, "bookmarked": True}
        assert "ON CONFLICT (user_id, clothing_id) DO NOTHING" in executed_sql(mock_db.execute)[0]

    @pytest.mark.asyncio
    async def test_remove_bookmark(self, mock_db):
        item_id = str(uuid4())
        result = await BookmarkService.remove_bookmark(mock_db, str(uuid4()), item_id)
        assert result == {"item_id": item_id, "bookmarked": False}


class TestOrganizations:

    @pytest.mark.asyncio
    async def test_duplicate_name(self, mock_db):
        mock_db.fetch_one.side_effect = [{"id": str(uuid4())}]
        with pytest.raises(HTTPException) as exc:
            await OrganizationService.create_organization(
                mock_db, CreateOrganizationRequest(name="Fashion Club"), str(uuid4())
            )
        assert exc.value.status_code == 409

    @pytest.mark.asyncio
    async def test_owner_becomes_member(self, mock_db):
        owner = str(uuid4())
        organization = {"id": str(uuid4()), "owner_id": owner, "name": "Fashion Club", "description": None}
        mock_db.fetch_one.side_effect = [None, organization]

        result = await OrganizationService.create_organization(
            mock_db, CreateOrganizationRequest(name="Fashion Club"), owner
        )

        assert result["name"] == "Fashion Club"
        assert mock_db.execute.await_args.args[1]["user_id"] == owner

    @pytest.mark.asyncio
    async def test_owner_cannot_leave(self, mock_db):
        owner = str(uuid4())
        mock_db.fetch_one.side_effect = [{"id": str(uuid4()), "owner_id": owner, "name": "Fashion Club"}]
        mock_db.fetch_val.return_value = 1

        with pytest.raises(HTTPException) as exc:
            await OrganizationService.leave(mock_db, str(uuid4()), owner)

        assert exc.value.status_code == 400
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_member_count(self, mock_db):
        mock_db.fetch_one.side_effect = [{"id": "org-1", "owner_id": "u-1", "name": "Fashion Club"}]
        mock_db.fetch_val.return_value = 4

        result = await OrganizationService.get_organization(mock_db, "org-1")

        assert result["member_count"] == 4


class TestEvents:

    def event_request(self, **overrides):
        data = {
            "title": "Spring Swap",
            "event_date": datetime.now(timezone.utc) + timedelta(days=7),
            "location": "Quad",
        }
        data.update(overrides)
        return CreateEventRequest(**data)

    @pytest.mark.asyncio
    async def test_non_member_cannot_host_for_organization(self, mock_db):
        organization_id = uuid4()
        # organization lookup, then membership lookup
        mock_db.fetch_one.side_effect = [{"id": str(organization_id), "owner_id": "u-1", "name": "Club"}, None]
        mock_db.fetch_val.return_value = 1

        with pytest.raises(HTTPException) as exc:
            await EventService.create_event(
                mock_db, self.event_request(organization_id=organization_id), str(uuid4())
            )

        assert exc.value.status_code == 403

    @pytest.mark.asyncio
    async def test_personal_event(self, mock_db):
        creator = str(uuid4())
        mock_db.fetch_one.side_effect = [{"id": str(uuid4()), "creator_id": creator, "title": "Spring Swap"}]

        await EventService.create_event(mock_db, self.event_request(), creator)

        params = mock_db.fetch_one.await_args.args[1]
        assert params["creator_id"] == creator
        assert params["organization_id"] is None

    @pytest.mark.asyncio
    async def test_listing_window_is_three_days(self, mock_db):
        mock_db.fetch_val.return_value = 0
        result = await EventService.list_events(mock_db)
        assert "INTERVAL '3 days'" in mock_db.fetch_all.await_args.args[0]
        assert result["total"] == 0

    @pytest.mark.asyncio
    async def test_only_creator_updates(self, mock_db):
        mock_db.fetch_one.side_effect = [{"id": "e-1", "creator_id": str(uuid4())}]
        with pytest.raises(HTTPException) as exc:
            await EventService.update_event(mock_db, "e-1", UpdateEventRequest(title="x"), str(uuid4()))
        assert exc.value.status_code == 403

    @pytest.mark.asyncio
    async def test_attach_requires_item_owner(self, mock_db):
        mock_db.fetch_one.side_effect = [{"id": "e-1"}, make_item(uuid4())]
        with pytest.raises(HTTPException) as exc:
            await EventService.attach_item(mock_db, "e-1", str(uuid4()), str(uuid4()))
        assert exc.value.status_code == 403
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_event_creator_can_detach_any_item(self, mock_db):
        creator = str(uuid4())
        mock_db.fetch_one.side_effect = [{"id": "l-1", "owner_id": str(uuid4()), "creator_id": creator}]

        await EventService.detach_item(mock_db, "e-1", "i-1", creator)

        assert executed_sql(mock_db.execute)[0].startswith("DELETE FROM event_listings")
