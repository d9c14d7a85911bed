"""
Clothing Item Request/Response Models
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal
from uuid import UUID


class CreateItemRequest(BaseModel):
    """Request to list a new item"""
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category: str = Field(..., min_length=1, max_length=50)
    size: str = Field(..., min_length=1, max_length=20)
    condition: str = Field(..., min_length=1, max_length=50)
    purchase_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    rental_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    is_available_for_rent: bool = True
    is_available_for_sale: bool = True
    images: list[str] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Blue Jeans",
                "category": "pants",
                "size": "M",
                "condition": "good",
                "purchase_price": 49.99
            }
        }


class UpdateItemRequest(BaseModel):
    """Partial item update; omitted fields stay unchanged"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    size: Optional[str] = Field(None, min_length=1, max_length=20)
    condition: Optional[str] = Field(None, min_length=1, max_length=50)
    purchase_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    rental_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    is_available_for_rent: Optional[bool] = None
    is_available_for_sale: Optional[bool] = None
    images: Optional[list[str]] = None

    @field_validator(
        "title", "category", "size", "condition",
        "is_available_for_rent", "is_available_for_sale",
        mode="before"
    )
    @classmethod
    def _not_null(cls, value, info):
        # Omit a field to leave it unchanged; these columns cannot be cleared
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class ItemResponse(BaseModel):
    """Clothing item details"""
    id: UUID
    owner_id: UUID
    title: str
    description: Optional[str] = None
    category: str
    size: str
    condition: str
    purchase_price: Optional[float] = None
    rental_price: Optional[float] = None
    is_available_for_rent: bool
    is_available_for_sale: bool
    images: list[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_bookmarked: Optional[bool] = None

    @field_validator("images", mode="before")
    @classmethod
    def _null_images(cls, value):
        return value or []

    class Config:
        from_attributes = True
