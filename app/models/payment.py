"""
Payment Model
Payments confirmed by the payment provider's webhook
"""

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, func, text
from sqlalchemy.dialects.postgresql import UUID
import uuid
from app.database import Base


class Payment(Base):
    __tablename__ = "payments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, server_default=text("gen_random_uuid()"))

    # Provider event id; one row per delivered event
    event_id = Column(String(255), unique=True, nullable=False)
    stripe_payment_intent_id = Column(String(255), unique=True, nullable=False)

    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    item_id = Column(UUID(as_uuid=True), ForeignKey("clothing_items.id", ondelete="SET NULL"), nullable=True)
    amount = Column(Integer, nullable=False)  # smallest currency unit
    currency = Column(String(10), nullable=False, server_default="usd")
    status = Column(String(50), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
