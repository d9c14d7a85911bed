"""
Transaction Request/Response Models
Status enumeration and allowed transitions
"""

from enum import Enum
from pydantic import BaseModel, model_validator
from typing import Optional
from datetime import datetime
from uuid import UUID


class TransactionType(str, Enum):
    RENT = "RENT"
    BUY = "BUY"


class TransactionStatus(str, Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


ALLOWED_TRANSITIONS = {
    TransactionStatus.PENDING: {TransactionStatus.ACTIVE, TransactionStatus.CANCELLED},
    TransactionStatus.ACTIVE: {TransactionStatus.COMPLETED, TransactionStatus.CANCELLED},
    TransactionStatus.COMPLETED: set(),
    TransactionStatus.CANCELLED: set(),
}

# Stored statuses that still block the item (older rows used IN_PROGRESS)
OPEN_STATUSES = ("PENDING", "ACTIVE", "IN_PROGRESS")


def normalize_status(value: Optional[str]) -> Optional[TransactionStatus]:
    """Map a stored status string onto the enumeration, None if unknown"""
    if value is None:
        return None
    key = value.strip().upper()
    if key == "IN_PROGRESS":
        return TransactionStatus.ACTIVE
    try:
        return TransactionStatus(key)
    except ValueError:
        return None


def can_transition(current: Optional[str], new: TransactionStatus) -> bool:
    state = normalize_status(current)
    if state is None:
        return False
    return new in ALLOWED_TRANSITIONS[state]


class CreateTransactionRequest(BaseModel):
    """Request to buy or rent an item"""
    item_id: UUID
    transaction_type: TransactionType
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @model_validator(mode="after")
    def _check_rental_window(self):
        if self.transaction_type == TransactionType.RENT:
            if self.start_date is None or self.end_date is None:
                raise ValueError("Rentals require start_date and end_date")
            if self.end_date <= self.start_date:
                raise ValueError("end_date must be after start_date")
        return self


class UpdateTransactionStatusRequest(BaseModel):
    status: TransactionStatus


class TransactionResponse(BaseModel):
    """Transaction details"""
    id: UUID
    item_id: Optional[UUID] = None
    buyer_id: UUID
    seller_id: UUID
    transaction_type: str
    status: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    price: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MyTransactionResponse(TransactionResponse):
    """Transaction joined with item and counterpart details"""
    item_title: Optional[str] = None
    item_images: Optional[list[str]] = None
    other_party_username: Optional[str] = None
