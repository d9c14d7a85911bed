"""
Listing service tests
"""

from uuid import uuid4

import pytest
from fastapi import HTTPException

from app.schemas.item import CreateItemRequest, UpdateItemRequest
from app.services.listing_service import ListingService

from conftest import executed_sql, make_item


class TestListItems:

    @pytest.mark.asyncio
    async def test_pagination_is_one_based(self, mock_db):
        await ListingService.list_items(mock_db, page=3, limit=10)
        params = mock_db.fetch_all.await_args.args[1]
        assert params["limit"] == 10
        assert params["offset"] == 20

    @pytest.mark.asyncio
    async def test_filters_are_bound_parameters(self, mock_db):
        await ListingService.list_items(mock_db, category="pants", size="M")
        query, params = mock_db.fetch_all.await_args.args
        assert "c.category = :category" in query
        assert "c.size = :size" in query
        assert params["category"] == "pants"
        assert "pants" not in query

    @pytest.mark.asyncio
    async def test_viewer_gets_bookmark_flag(self, mock_db):
        viewer = str(uuid4())
        mock_db.fetch_all.return_value = [make_item(uuid4(), is_bookmarked=True)]

        items = await ListingService.list_items(mock_db, viewer_id=viewer)

        query, params = mock_db.fetch_all.await_args.args
        assert "is_bookmarked" in query
        assert params["viewer_id"] == viewer
        assert items[0]["is_bookmarked"] is True

    @pytest.mark.asyncio
    async def test_anonymous_listing_has_no_bookmark_join(self, mock_db):
        await ListingService.list_items(mock_db)
        query = mock_db.fetch_all.await_args.args[0]
        assert "bookmarks" not in query


class TestCreateItem:

    @pytest.mark.asyncio
    async def test_caller_becomes_owner(self, mock_db):
        owner = str(uuid4())
        mock_db.fetch_one.return_value = make_item(owner)

        await ListingService.create_item(
            mock_db,
            CreateItemRequest(title="Blue Jeans", category="pants", size="M", condition="good"),
            owner
        )

        params = mock_db.fetch_one.await_args.args[1]
        assert params["owner_id"] == owner
        assert params["images"] == []


class TestUpdateItem:

    @pytest.mark.asyncio
    async def test_non_owner_is_forbidden_and_nothing_written(self, mock_db):
        mock_db.fetch_one.side_effect = [make_item(uuid4())]

        with pytest.raises(HTTPException) as exc:
            await ListingService.update_item(
                mock_db, str(uuid4()), UpdateItemRequest(title="Mine now"), str(uuid4())
            )

        assert exc.value.status_code == 403
        assert mock_db.fetch_one.await_count == 1

    @pytest.mark.asyncio
    async def test_only_supplied_fields_change(self, mock_db):
        owner = str(uuid4())
        item = make_item(owner)
        mock_db.fetch_one.side_effect = [item, {**item, "title": "Dark Jeans"}]

        result = await ListingService.update_item(
            mock_db, item["id"], UpdateItemRequest(title="Dark Jeans"), owner
        )

        query, params = mock_db.fetch_one.await_args.args
        assert "title = :title" in query
        assert "size" not in params
        assert result["title"] == "Dark Jeans"

    @pytest.mark.asyncio
    async def test_empty_update_returns_item_unchanged(self, mock_db):
        owner = str(uuid4())
        item = make_item(owner)
        mock_db.fetch_one.side_effect = [item]

        result = await ListingService.update_item(mock_db, item["id"], UpdateItemRequest(), owner)

        assert result == item
        assert mock_db.fetch_one.await_count == 1

    @pytest.mark.asyncio
    async def test_missing_item(self, mock_db):
        with pytest.raises(HTTPException) as exc:
            await ListingService.update_item(mock_db, str(uuid4()), UpdateItemRequest(title="x"), str(uuid4()))
        assert exc.value.status_code == 404


class TestDeleteItem:

    @pytest.mark.asyncio
    async def test_open_transaction_blocks_delete(self, mock_db):
        owner = str(uuid4())
        item = make_item(owner)
        mock_db.fetch_one.side_effect = [item]
        mock_db.fetch_val.return_value = 1

        with pytest.raises(HTTPException) as exc:
            await ListingService.delete_item(mock_db, item["id"], owner)

        assert exc.value.status_code == 409
        assert exc.value.detail == "Cannot delete item with active transactions"
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_non_owner_is_forbidden(self, mock_db):
        item = make_item(uuid4())
        mock_db.fetch_one.side_effect = [item]
        mock_db.fetch_val.return_value = 0

        with pytest.raises(HTTPException) as exc:
            await ListingService.delete_item(mock_db, item["id"], str(uuid4()))

        assert exc.value.status_code == 403
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_owner_deletes(self, mock_db):
        owner = str(uuid4())
        item = make_item(owner)
        mock_db.fetch_one.side_effect = [item]
        mock_db.fetch_val.return_value = 0

        await ListingService.delete_item(mock_db, item["id"], owner)

        assert executed_sql(mock_db.execute)[0].startswith("DELETE FROM clothing_items")
        mock_db.transaction.assert_called_once()

    @pytest.mark.asyncio
    async def test_missing_item(self, mock_db):
        with pytest.raises(HTTPException) as exc:
            await ListingService.delete_item(mock_db, str(uuid4()), str(uuid4()))
        assert exc.value.status_code == 404


class TestImages:

    @pytest.mark.asyncio
    async def test_append_image(self, mock_db):
        owner = str(uuid4())
        item = make_item(owner)
        mock_db.fetch_one.side_effect = [item, {**item, "images": ["jeans1.jpg", "new.jpg"]}]

        result = await ListingService.append_image(mock_db, item["id"], "new.jpg", owner)

        assert "array_append" in mock_db.fetch_one.await_args.args[0]
        assert result["images"] == ["jeans1.jpg", "new.jpg"]

    @pytest.mark.asyncio
    async def test_remove_unknown_image(self, mock_db):
        owner = str(uuid4())
        item = make_item(owner)
        mock_db.fetch_one.side_effect = [item]

        with pytest.raises(HTTPException) as exc:
            await ListingService.remove_image(mock_db, item["id"], "other.jpg", owner)

        assert exc.value.status_code == 404
