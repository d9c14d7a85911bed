"""
Authentication Module
Password hashing, JWT token management and ownership checks
"""

from app.auth.password import hash_password, verify_password
from app.auth.dependencies import (
    create_access_token,
    create_user_token,
    decode_access_token,
    get_current_user,
    get_optional_user
)
from app.auth.permissions import is_owner, require_owner

__all__ = [
    "hash_password",
    "verify_password",
    "create_access_token",
    "create_user_token",
    "decode_access_token",
    "get_current_user",
    "get_optional_user",
    "is_owner",
    "require_owner",
]
