"""
Payment Request/Response Models
"""

from pydantic import BaseModel, Field
from typing import Optional
from uuid import UUID
from app.schemas.transaction import TransactionType


class CreatePaymentIntentRequest(BaseModel):
    """Request to start a checkout for an item"""
    amount: Optional[int] = Field(
        None, gt=0,
        description="Expected charge in cents; when sent it must equal the item price"
    )
    item_id: UUID
    seller_id: Optional[UUID] = None
    transaction_type: TransactionType = TransactionType.BUY


class PaymentIntentResponse(BaseModel):
    client_secret: str
    publishable_key: Optional[str] = None
    payment_intent_id: str
    amount: int


class WebhookResponse(BaseModel):
    received: bool = True
    handled: bool = False
    duplicate: bool = False
    conflict: bool = False
