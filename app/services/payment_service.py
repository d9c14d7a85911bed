"""
Payment Service
Stripe PaymentIntent creation and webhook finalization
"""

import json
import logging
import uuid
from decimal import Decimal, ROUND_HALF_UP
import stripe
from databases import Database
from fastapi import HTTPException, status
from starlette.concurrency import run_in_threadpool
from app.auth import is_owner
from app.config import settings
from app.schemas.payment import CreatePaymentIntentRequest
from app.schemas.transaction import TransactionStatus, TransactionType, OPEN_STATUSES

logger = logging.getLogger(__name__)

PAYMENT_SUCCEEDED = "payment_intent.succeeded"

OPEN_STATUS_SQL = ", ".join(f"'{s}'" for s in OPEN_STATUSES)


def normalize_transaction_type(value: str | None) -> str:
    """Map provider metadata ('rental', 'RENT', 'purchase', ...) onto RENT/BUY"""
    if value and value.strip().upper() in ("RENT", "RENTAL"):
        return TransactionType.RENT.value
    return TransactionType.BUY.value


def to_minor_units(price) -> int:
    """Listed price (dollars) to the integer amount Stripe charges (cents)"""
    return int((Decimal(str(price)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _terms_for(item, transaction_type: str):
    """(is available, listed price) of an item row for RENT or BUY"""
    if transaction_type == TransactionType.RENT.value:
        return item["is_available_for_rent"], item["rental_price"]
    return item["is_available_for_sale"], item["purchase_price"]


class PaymentService:
    """Service for payment provider operations"""

    @staticmethod
    def _ensure_config(*keys: str):
        missing = [key for key in ("STRIPE_SECRET_KEY", *keys) if not getattr(settings, key)]
        if missing:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Payment provider is not configured"
            )

    @staticmethod
    async def create_payment_intent(db: Database, data: CreatePaymentIntentRequest, caller_id: str) -> dict:
        """
        Start a checkout for an item

        The charge is the item's listed price for the requested type; a
        client-sent amount must match it. Domain ids ride along as
        PaymentIntent metadata and the webhook reads them back.
        """
        PaymentService._ensure_config()

        item = await db.fetch_one(
            """
            SELECT id, owner_id, purchase_price, rental_price,
                   is_available_for_rent, is_available_for_sale
            FROM clothing_items
            WHERE id = :id
            """,
            {"id": str(data.item_id)}
        )

        if not item:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Item not found"
            )

        if is_owner(item, caller_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You cannot pay for your own item"
            )

        if data.seller_id is not None and not is_owner(item, data.seller_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Seller does not own this item"
            )

        available, price = _terms_for(item, data.transaction_type.value)

        if not available:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Item is not available"
            )

        if price is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Item has no price for this transaction type"
            )

        amount = to_minor_units(price)

        if data.amount is not None and data.amount != amount:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Amount does not match the item price ({amount})"
            )

        try:
            intent = await run_in_threadpool(
                stripe.PaymentIntent.create,
                api_key=settings.STRIPE_SECRET_KEY,
                amount=amount,
                currency=settings.PAYMENT_CURRENCY,
                metadata={
                    "user_id": str(caller_id),
                    "item_id": str(data.item_id),
                    "seller_id": str(item["owner_id"]),
                    "transaction_type": data.transaction_type.value
                },
                automatic_payment_methods={"enabled": True}
            )
        except stripe.StripeError as e:
            logger.error("Stripe PaymentIntent creation failed for item %s: %s", data.item_id, e)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Payment provider error"
            )

        return {
            "client_secret": intent["client_secret"],
            "publishable_key": settings.STRIPE_PUBLISHABLE_KEY,
            "payment_intent_id": intent["id"],
            "amount": amount
        }

    @staticmethod
    def verify_webhook(payload: bytes, signature: str | None) -> dict:
        """Check the Stripe-Signature header and decode the event"""
        PaymentService._ensure_config("STRIPE_WEBHOOK_SECRET")

        if not signature:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Missing Stripe-Signature header"
            )

        try:
            body = payload.decode("utf-8")
            stripe.WebhookSignature.verify_header(body, signature, settings.STRIPE_WEBHOOK_SECRET)
            return json.loads(body)
        except stripe.SignatureVerificationError:
            logger.warning("Rejected webhook with an invalid signature")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid webhook signature"
            )
        except (UnicodeDecodeError, ValueError):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid webhook payload"
            )

    @staticmethod
    async def handle_event(db: Database, event: dict) -> dict:
        """
        Apply a verified provider event

        Duplicate deliveries of the same event id hit the unique payments
        row and stop before touching listings or transactions. The item row
        is locked while the sale is finalized; a payment for an item that
        is no longer available is recorded but opens no transaction.
        """
        if event.get("type") != PAYMENT_SUCCEEDED:
            logger.info("Ignoring webhook event type %s", event.get("type"))
            return {"received": True, "handled": False, "duplicate": False}

        intent = event["data"]["object"]
        metadata = intent.get("metadata") or {}
        item_id = metadata.get("item_id")
        buyer_id = metadata.get("user_id")
        transaction_type = normalize_transaction_type(metadata.get("transaction_type"))
        amount = int(intent.get("amount") or 0)

        async with db.transaction():
            payment_id = await db.fetch_val(
                """
                INSERT INTO payments
                (id, event_id, stripe_payment_intent_id, user_id, item_id, amount, currency, status)
                VALUES (:id, :event_id, :intent_id, :user_id, :item_id, :amount, :currency, 'succeeded')
                ON CONFLICT DO NOTHING
                RETURNING id
                """,
                {
                    "id": str(uuid.uuid4()),
                    "event_id": event["id"],
                    "intent_id": intent["id"],
                    "user_id": buyer_id,
                    "item_id": item_id,
                    "amount": amount,
                    "currency": intent.get("currency") or settings.PAYMENT_CURRENCY
                }
            )

            if payment_id is None:
                logger.info("Duplicate webhook delivery %s ignored", event["id"])
                return {"received": True, "handled": False, "duplicate": True}

            if not item_id:
                logger.warning("Payment %s carries no item id", payment_id)
                return {"received": True, "handled": True, "duplicate": False}

            item = await db.fetch_one(
                """
                SELECT id, owner_id, purchase_price, rental_price,
                       is_available_for_rent, is_available_for_sale
                FROM clothing_items
                WHERE id = :id
                FOR UPDATE
                """,
                {"id": item_id}
            )

            available, price = _terms_for(item, transaction_type) if item else (False, None)
            if price is None:
                price = Decimal(amount) / 100

            if not available:
                logger.warning(
                    "Payment %s for item %s arrived after the item left the market; no transaction recorded",
                    payment_id, item_id
                )
                return {"received": True, "handled": True, "duplicate": False, "conflict": True}

            await db.execute(
                """
                UPDATE clothing_items
                SET is_available_for_rent = FALSE,
                    is_available_for_sale = FALSE,
                    updated_at = NOW()
                WHERE id = :id
                """,
                {"id": item_id}
            )

            booking = await db.fetch_one(
                f"""
                SELECT id FROM transactions
                WHERE item_id = :item_id AND buyer_id = :buyer_id
                  AND UPPER(status) IN ({OPEN_STATUS_SQL})
                ORDER BY created_at DESC
                LIMIT 1
                FOR UPDATE
                """,
                {"item_id": item_id, "buyer_id": buyer_id}
            )

            if booking:
                # The buyer's own booking is the sale; its captured price stands
                transaction_id = str(booking["id"])
                await db.execute(
                    """
                    UPDATE transactions
                    SET status = :status, updated_at = NOW()
                    WHERE id = :id
                    """,
                    {"status": TransactionStatus.COMPLETED.value, "id": transaction_id}
                )
            else:
                transaction_id = str(uuid.uuid4())
                await db.execute(
                    """
                    INSERT INTO transactions
                    (id, item_id, buyer_id, seller_id, transaction_type, status, price)
                    VALUES (:id, :item_id, :buyer_id, :seller_id, :transaction_type, :status, :price)
                    """,
                    {
                        "id": transaction_id,
                        "item_id": item_id,
                        "buyer_id": buyer_id,
                        "seller_id": str(item["owner_id"]),
                        "transaction_type": transaction_type,
                        "status": TransactionStatus.COMPLETED.value,
                        "price": price
                    }
                )

            # Anyone else's booking on the item can no longer be honored
            await db.execute(
                f"""
                UPDATE transactions
                SET status = :status, updated_at = NOW()
                WHERE item_id = :item_id AND id <> :id
                  AND UPPER(status) IN ({OPEN_STATUS_SQL})
                """,
                {"status": TransactionStatus.CANCELLED.value, "item_id": item_id, "id": transaction_id}
            )

        logger.info("Payment %s recorded for intent %s", payment_id, intent["id"])
        return {"received": True, "handled": True, "duplicate": False}


# Create singleton instance
payment_service = PaymentService()
