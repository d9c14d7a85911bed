"""
Transaction Service
Buy/rent bookings and their status lifecycle
"""

import logging
import uuid
from databases import Database
from fastapi import HTTPException, status
from app.auth import is_owner, require_owner
from app.schemas.transaction import (
    CreateTransactionRequest,
    TransactionStatus,
    TransactionType,
    OPEN_STATUSES,
    can_transition,
    normalize_status
)

logger = logging.getLogger(__name__)

OPEN_STATUS_SQL = ", ".join(f"'{s}'" for s in OPEN_STATUSES)


class TransactionService:
    """Service for transaction operations"""

    @staticmethod
    async def create_transaction(db: Database, data: CreateTransactionRequest, buyer_id: str) -> dict:
        """
        Book an item for the caller

        The item row stays locked from the availability check until the
        insert commits, so two buyers cannot both open a transaction on it.
        """
        async with db.transaction():
            item = await db.fetch_one(
                """
                SELECT id, owner_id, purchase_price, rental_price,
                       is_available_for_rent, is_available_for_sale
                FROM clothing_items
                WHERE id = :id
                FOR UPDATE
                """,
                {"id": str(data.item_id)}
            )

            if not item:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Item not found"
                )

            if is_owner(item, buyer_id):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="You cannot rent or buy your own item"
                )

            if data.transaction_type == TransactionType.RENT:
                available = item["is_available_for_rent"]
                price = item["rental_price"]
            else:
                available = item["is_available_for_sale"]
                price = item["purchase_price"]

            action = "rent" if data.transaction_type == TransactionType.RENT else "sale"

            if not available:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail=f"Item is not available for {action}"
                )

            if price is None:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Item has no {action} price"
                )

            open_count = await db.fetch_val(
                f"""
                SELECT COUNT(*) FROM transactions
                WHERE item_id = :item_id AND UPPER(status) IN ({OPEN_STATUS_SQL})
                """,
                {"item_id": str(data.item_id)}
            )

            if open_count:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="Item already has an open transaction"
                )

            transaction = await db.fetch_one(
                """
                INSERT INTO transactions
                (id, item_id, buyer_id, seller_id, transaction_type, status, start_date, end_date, price)
                VALUES (:id, :item_id, :buyer_id, :seller_id, :transaction_type, :status,
                        :start_date, :end_date, :price)
                RETURNING *
                """,
                {
                    "id": str(uuid.uuid4()),
                    "item_id": str(data.item_id),
                    "buyer_id": str(buyer_id),
                    "seller_id": str(item["owner_id"]),
                    "transaction_type": data.transaction_type.value,
                    "status": TransactionStatus.PENDING.value,
                    "start_date": data.start_date,
                    "end_date": data.end_date,
                    "price": price
                }
            )

        logger.info("Transaction %s opened on item %s", transaction["id"], data.item_id)
        return dict(transaction)

    @staticmethod
    async def list_my_transactions(db: Database, user_id: str) -> list[dict]:
        """Transactions where the caller is buyer or seller, newest first"""

        rows = await db.fetch_all(
            """
            SELECT t.*,
                   c.title AS item_title,
                   c.images AS item_images,
                   u.username AS other_party_username
            FROM transactions t
            LEFT JOIN clothing_items c ON t.item_id = c.id
            LEFT JOIN users u ON u.id = (
                CASE WHEN t.buyer_id = :user_id THEN t.seller_id ELSE t.buyer_id END
            )
            WHERE t.buyer_id = :user_id OR t.seller_id = :user_id
            ORDER BY t.created_at DESC
            """,
            {"user_id": str(user_id)}
        )

        return [dict(row) for row in rows]

    @staticmethod
    async def update_status(
        db: Database,
        transaction_id: str,
        new_status: TransactionStatus,
        caller_id: str
    ) -> dict:
        """Move a transaction along its lifecycle (buyer or seller only)"""

        async with db.transaction():
            transaction = await db.fetch_one(
                "SELECT * FROM transactions WHERE id = :id FOR UPDATE",
                {"id": str(transaction_id)}
            )

            if not transaction:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Transaction not found"
                )

            require_owner(
                transaction, caller_id, "buyer_id", "seller_id",
                detail="You are not a party to this transaction"
            )

            current = transaction["status"]
            if not can_transition(current, new_status):
                shown = normalize_status(current)
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail=f"Cannot change status from {shown.value if shown else current} to {new_status.value}"
                )

            updated = await db.fetch_one(
                """
                UPDATE transactions
                SET status = :status, updated_at = NOW()
                WHERE id = :id
                RETURNING *
                """,
                {"status": new_status.value, "id": str(transaction_id)}
            )

            # A completed sale takes the item off the market
            if (
                new_status == TransactionStatus.COMPLETED
                and str(transaction["transaction_type"]).upper() == TransactionType.BUY.value
                and transaction["item_id"] is not None
            ):
                await db.execute(
                    """
                    UPDATE clothing_items
                    SET is_available_for_rent = FALSE,
                        is_available_for_sale = FALSE,
                        updated_at = NOW()
                    WHERE id = :id
                    """,
                    {"id": str(transaction["item_id"])}
                )

        logger.info("Transaction %s moved to %s by %s", transaction_id, new_status.value, caller_id)
        return dict(updated)


# Create singleton instance
transaction_service = TransactionService()
