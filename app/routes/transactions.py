"""
Transaction Routes
"""

from uuid import UUID
from fastapi import APIRouter, Depends, status
from databases import Database
from app.auth import get_current_user
from app.database import get_database
from app.schemas.transaction import (
    CreateTransactionRequest,
    UpdateTransactionStatusRequest,
    TransactionResponse,
    MyTransactionResponse
)
from app.services.transaction_service import transaction_service

router = APIRouter()


@router.post("", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    request: CreateTransactionRequest,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """
    Rent or buy an item

    - **item_id**: Item to book (required)
    - **transaction_type**: RENT or BUY (required)
    - **start_date** / **end_date**: Rental window (required for RENT)

    The price is taken from the item at this moment and never changes afterwards.
    """
    return await transaction_service.create_transaction(db, request, current_user["user_id"])


@router.get("/my-transactions", response_model=list[MyTransactionResponse])
async def list_my_transactions(
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """Transactions where the caller is the buyer or the seller"""
    return await transaction_service.list_my_transactions(db, current_user["user_id"])


@router.put("/{transaction_id}/status", response_model=TransactionResponse)
async def update_transaction_status(
    transaction_id: UUID,
    request: UpdateTransactionStatusRequest,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """
    Change a transaction's status (buyer or seller only)

    Allowed: PENDING → ACTIVE | CANCELLED, ACTIVE → COMPLETED | CANCELLED.
    """
    return await transaction_service.update_status(
        db, transaction_id, request.status, current_user["user_id"]
    )
