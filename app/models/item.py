"""
Clothing Item Model
Listings offered for sale and/or rent
"""

from sqlalchemy import Column, String, Text, Boolean, Numeric, DateTime, ForeignKey, func, text
from sqlalchemy.dialects.postgresql import UUID, ARRAY
from sqlalchemy.orm import relationship
import uuid
from app.database import Base


class ClothingItem(Base):
    __tablename__ = "clothing_items"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, server_default=text("gen_random_uuid()"))
    owner_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Listing info
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=False, index=True)
    size = Column(String(20), nullable=False)
    condition = Column(String(50), nullable=False)

    # Pricing and availability
    purchase_price = Column(Numeric(10, 2), nullable=True)
    rental_price = Column(Numeric(10, 2), nullable=True)
    is_available_for_rent = Column(Boolean, server_default=text("true"), nullable=False)
    is_available_for_sale = Column(Boolean, server_default=text("true"), nullable=False)

    # Ordered image URLs
    images = Column(ARRAY(Text), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    owner = relationship("User", backref="clothing_items")
