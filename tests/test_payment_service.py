"""
Payment service tests (Stripe is never contacted)
"""

import hashlib
import hmac
import json
import time
from decimal import Decimal
from unittest.mock import patch
from uuid import uuid4

import pytest
import stripe
from fastapi import HTTPException

from app.config import settings
from app.schemas.payment import CreatePaymentIntentRequest
from app.services.payment_service import PaymentService, normalize_transaction_type

from conftest import make_item


def sign(payload: str, secret: str, timestamp: int | None = None) -> str:
    timestamp = timestamp or int(time.time())
    signed = f"{timestamp}.{payload}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def succeeded_event(event_id="evt_1", amount=2500, transaction_type="rental", item_id=None):
    return {
        "id": event_id,
        "type": "payment_intent.succeeded",
        "data": {
            "object": {
                "id": "pi_1",
                "amount": amount,
                "currency": "usd",
                "metadata": {
                    "user_id": str(uuid4()),
                    "seller_id": str(uuid4()),
                    "item_id": item_id or str(uuid4()),
                    "transaction_type": transaction_type,
                },
            }
        },
    }


class TestNormalizeType:

    @pytest.mark.parametrize("value,expected", [
        ("rental", "RENT"),
        ("RENT", "RENT"),
        ("purchase", "BUY"),
        ("BUY", "BUY"),
        (None, "BUY"),
    ])
    def test_mapping(self, value, expected):
        assert normalize_transaction_type(value) == expected


class TestCreatePaymentIntent:

    @pytest.mark.asyncio
    async def test_intent_carries_metadata(self, mock_db):
        seller, buyer = str(uuid4()), str(uuid4())
        item = make_item(seller)
        mock_db.fetch_one.side_effect = [item]

        with patch("app.services.payment_service.stripe.PaymentIntent.create",
                   return_value={"id": "pi_1", "client_secret": "pi_1_secret"}) as create:
            result = await PaymentService.create_payment_intent(
                mock_db, CreatePaymentIntentRequest(amount=4999, item_id=item["id"]), buyer
            )

        assert result == {
            "client_secret": "pi_1_secret",
            "publishable_key": settings.STRIPE_PUBLISHABLE_KEY,
            "payment_intent_id": "pi_1",
            "amount": 4999,
        }
        kwargs = create.call_args.kwargs
        assert kwargs["amount"] == 4999
        assert kwargs["metadata"] == {
            "user_id": buyer,
            "item_id": item["id"],
            "seller_id": seller,
            "transaction_type": "BUY",
        }

    @pytest.mark.asyncio
    async def test_amount_below_price_is_refused(self, mock_db):
        item = make_item(uuid4(), purchase_price=Decimal("49.99"))
        mock_db.fetch_one.side_effect = [item]

        with patch("app.services.payment_service.stripe.PaymentIntent.create") as create:
            with pytest.raises(HTTPException) as exc:
                await PaymentService.create_payment_intent(
                    mock_db, CreatePaymentIntentRequest(amount=1, item_id=item["id"]), str(uuid4())
                )

        assert exc.value.status_code == 400
        create.assert_not_called()

    @pytest.mark.asyncio
    async def test_amount_comes_from_rental_price(self, mock_db):
        item = make_item(uuid4(), rental_price=Decimal("5.99"))
        mock_db.fetch_one.side_effect = [item]

        with patch("app.services.payment_service.stripe.PaymentIntent.create",
                   return_value={"id": "pi_2", "client_secret": "pi_2_secret"}) as create:
            result = await PaymentService.create_payment_intent(
                mock_db,
                CreatePaymentIntentRequest(item_id=item["id"], transaction_type="RENT"),
                str(uuid4())
            )

        assert create.call_args.kwargs["amount"] == 599
        assert result["amount"] == 599

    @pytest.mark.asyncio
    async def test_item_without_price(self, mock_db):
        item = make_item(uuid4(), purchase_price=None)
        mock_db.fetch_one.side_effect = [item]

        with pytest.raises(HTTPException) as exc:
            await PaymentService.create_payment_intent(
                mock_db, CreatePaymentIntentRequest(item_id=item["id"]), str(uuid4())
            )

        assert exc.value.status_code == 400

    @pytest.mark.asyncio
    async def test_own_item(self, mock_db):
        owner = str(uuid4())
        item = make_item(owner)
        mock_db.fetch_one.side_effect = [item]

        with pytest.raises(HTTPException) as exc:
            await PaymentService.create_payment_intent(
                mock_db, CreatePaymentIntentRequest(amount=100, item_id=item["id"]), owner
            )

        assert exc.value.status_code == 400

    @pytest.mark.asyncio
    async def test_seller_mismatch(self, mock_db):
        item = make_item(uuid4())
        mock_db.fetch_one.side_effect = [item]

        with pytest.raises(HTTPException) as exc:
            await PaymentService.create_payment_intent(
                mock_db,
                CreatePaymentIntentRequest(amount=100, item_id=item["id"], seller_id=uuid4()),
                str(uuid4())
            )

        assert exc.value.status_code == 400

    @pytest.mark.asyncio
    async def test_provider_failure_is_bad_gateway(self, mock_db):
        item = make_item(uuid4())
        mock_db.fetch_one.side_effect = [item]

        with patch("app.services.payment_service.stripe.PaymentIntent.create",
                   side_effect=stripe.StripeError("card network down")):
            with pytest.raises(HTTPException) as exc:
                await PaymentService.create_payment_intent(
                    mock_db, CreatePaymentIntentRequest(item_id=item["id"]), str(uuid4())
                )

        assert exc.value.status_code == 502

    @pytest.mark.asyncio
    async def test_not_configured(self, mock_db, monkeypatch):
        monkeypatch.setattr(settings, "STRIPE_SECRET_KEY", None)

        with pytest.raises(HTTPException) as exc:
            await PaymentService.create_payment_intent(
                mock_db, CreatePaymentIntentRequest(amount=100, item_id=uuid4()), str(uuid4())
            )

        assert exc.value.status_code == 500
        mock_db.fetch_one.assert_not_awaited()


class TestVerifyWebhook:

    def test_valid_signature(self):
        payload = json.dumps(succeeded_event())
        event = PaymentService.verify_webhook(
            payload.encode("utf-8"), sign(payload, settings.STRIPE_WEBHOOK_SECRET)
        )
        assert event["id"] == "evt_1"

    def test_wrong_secret(self):
        payload = json.dumps(succeeded_event())
        with pytest.raises(HTTPException) as exc:
            PaymentService.verify_webhook(payload.encode("utf-8"), sign(payload, "whsec_other"))
        assert exc.value.status_code == 400

    def test_missing_signature(self):
        with pytest.raises(HTTPException) as exc:
            PaymentService.verify_webhook(b"{}", None)
        assert exc.value.status_code == 400


class TestHandleEvent:

    @pytest.mark.asyncio
    async def test_other_event_types_are_ignored(self, mock_db):
        result = await PaymentService.handle_event(mock_db, {"id": "evt_2", "type": "charge.refunded"})
        assert result["handled"] is False
        mock_db.fetch_val.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_first_delivery_records_transaction_at_listed_price(self, mock_db):
        seller = str(uuid4())
        item = make_item(seller, rental_price=Decimal("5.99"))
        event = succeeded_event(amount=599, transaction_type="rental", item_id=item["id"])
        mock_db.fetch_val.return_value = str(uuid4())
        # locked item row, then no open booking by this buyer
        mock_db.fetch_one.side_effect = [item, None]

        result = await PaymentService.handle_event(mock_db, event)

        assert result == {"received": True, "handled": True, "duplicate": False}
        lock_sql = mock_db.fetch_one.await_args_list[0].args[0]
        assert "FROM clothing_items" in lock_sql
        assert "FOR UPDATE" in lock_sql

        statements = [call.args for call in mock_db.execute.await_args_list]
        assert len(statements) == 3
        assert "UPDATE clothing_items" in statements[0][0]
        assert statements[0][1]["id"] == item["id"]
        assert "INSERT INTO transactions" in statements[1][0]
        assert statements[1][1]["price"] == Decimal("5.99")
        assert statements[1][1]["status"] == "COMPLETED"
        assert statements[1][1]["transaction_type"] == "RENT"
        assert statements[1][1]["seller_id"] == seller
        assert statements[2][1]["status"] == "CANCELLED"
        assert statements[2][1]["id"] == statements[1][1]["id"]

    @pytest.mark.asyncio
    async def test_buyer_booking_is_completed_not_duplicated(self, mock_db):
        item = make_item(uuid4())
        booking_id = str(uuid4())
        event = succeeded_event(amount=4999, transaction_type="BUY", item_id=item["id"])
        mock_db.fetch_val.return_value = str(uuid4())
        mock_db.fetch_one.side_effect = [item, {"id": booking_id}]

        await PaymentService.handle_event(mock_db, event)

        sql = [call.args[0] for call in mock_db.execute.await_args_list]
        assert not any("INSERT INTO transactions" in s for s in sql)
        completed = mock_db.execute.await_args_list[1].args[1]
        assert completed == {"status": "COMPLETED", "id": booking_id}
        cancelled = mock_db.execute.await_args_list[2].args[1]
        assert cancelled["status"] == "CANCELLED"
        assert cancelled["id"] == booking_id

    @pytest.mark.asyncio
    async def test_second_sale_of_sold_item_records_payment_only(self, mock_db):
        item = make_item(uuid4(), is_available_for_sale=False, is_available_for_rent=False)
        event = succeeded_event(event_id="evt_2", amount=4999, transaction_type="BUY", item_id=item["id"])
        mock_db.fetch_val.return_value = str(uuid4())
        mock_db.fetch_one.side_effect = [item]

        result = await PaymentService.handle_event(mock_db, event)

        assert result["conflict"] is True
        assert result["handled"] is True
        mock_db.fetch_val.assert_awaited_once()
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_deleted_item_records_payment_only(self, mock_db):
        mock_db.fetch_val.return_value = str(uuid4())
        mock_db.fetch_one.side_effect = [None]

        result = await PaymentService.handle_event(mock_db, succeeded_event())

        assert result["conflict"] is True
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_duplicate_delivery_changes_nothing(self, mock_db):
        mock_db.fetch_val.return_value = None

        result = await PaymentService.handle_event(mock_db, succeeded_event())

        assert result["duplicate"] is True
        mock_db.execute.assert_not_awaited()
