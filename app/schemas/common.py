"""
Shared Response Models
"""

from pydantic import BaseModel
from typing import Any, Optional


class ErrorResponse(BaseModel):
    """Envelope used for every error response"""
    error: str
    message: str
    details: Optional[Any] = None


class MessageOnlyResponse(BaseModel):
    message: str
