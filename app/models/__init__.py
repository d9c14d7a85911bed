"""
Database Models
Import all models here so their tables register on the shared metadata
"""

from app.models.user import User
from app.models.organization import Organization, Member
from app.models.item import ClothingItem
from app.models.transaction import Transaction
from app.models.message import Message
from app.models.event import Event, EventListing
from app.models.bookmark import Bookmark
from app.models.payment import Payment

__all__ = [
    "User",
    "Organization",
    "Member",
    "ClothingItem",
    "Transaction",
    "Message",
    "Event",
    "EventListing",
    "Bookmark",
    "Payment",
]
