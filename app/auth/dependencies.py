"""
Authentication Dependencies
JWT token handling and user authentication
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from app.config import settings

# Security scheme; missing headers are rejected by get_current_user so
# that every credential failure shares one status and body
security = HTTPBearer(auto_error=False)

CREDENTIALS_ERROR_DETAIL = "Could not validate credentials"


def _credentials_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=CREDENTIALS_ERROR_DETAIL,
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create JWT access token

    Args:
        data: Data to encode in token
        expires_delta: Token expiration time

    Returns:
        Encoded JWT token
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRATION_HOURS)

    to_encode.update({"exp": expire})

    encoded_jwt = jwt.encode(
        to_encode,
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM
    )

    return encoded_jwt


def create_user_token(user: dict) -> str:
    """Issue a token for a user row"""
    return create_access_token({"sub": str(user["id"]), "email": user["email"]})


def decode_access_token(token: str) -> dict:
    """
    Decode JWT access token

    Args:
        token: JWT token string

    Returns:
        Decoded token payload

    Raises:
        HTTPException: If token is invalid, unsigned or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError:
        raise _credentials_error()

    if not payload.get("sub"):
        raise _credentials_error()

    return payload


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> dict:
    """
    Get current authenticated user from JWT token

    Args:
        credentials: HTTP Authorization credentials

    Returns:
        User data from token

    Raises:
        HTTPException: If the header is absent or the token is invalid
    """
    if credentials is None or not credentials.credentials:
        raise _credentials_error()

    payload = decode_access_token(credentials.credentials)

    return {
        "user_id": payload["sub"],
        "email": payload.get("email"),
    }


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[dict]:
    """
    Like get_current_user, but for public routes

    Anonymous callers and callers with an expired or invalid token get None.
    """
    if credentials is None:
        return None
    try:
        return await get_current_user(credentials)
    except HTTPException:
        return None
