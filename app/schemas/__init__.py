"""
Pydantic schemas for request/response validation
"""

from app.schemas.common import ErrorResponse, MessageOnlyResponse
from app.schemas.user import RegisterRequest, LoginRequest, AuthResponse, UserResponse
from app.schemas.item import CreateItemRequest, UpdateItemRequest, ItemResponse
from app.schemas.transaction import (
    TransactionType,
    TransactionStatus,
    CreateTransactionRequest,
    TransactionResponse
)

__all__ = [
    "ErrorResponse",
    "MessageOnlyResponse",
    "RegisterRequest",
    "LoginRequest",
    "AuthResponse",
    "UserResponse",
    "CreateItemRequest",
    "UpdateItemRequest",
    "ItemResponse",
    "TransactionType",
    "TransactionStatus",
    "CreateTransactionRequest",
    "TransactionResponse",
]
