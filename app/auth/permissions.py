"""
Ownership Checks
One predicate for every "only the owner may do this" rule
"""

from typing import Mapping, Any
from fastapi import HTTPException, status


def is_owner(resource: Mapping[str, Any], caller_id: Any, *owner_fields: str) -> bool:
    """
    True when any of the resource's owner columns equals the caller id

    Args:
        resource: Row (or dict) holding the owner columns
        caller_id: Authenticated user id
        owner_fields: Columns to compare; defaults to ``owner_id``
    """
    fields = owner_fields or ("owner_id",)
    caller = str(caller_id)
    return any(
        resource[field] is not None and str(resource[field]) == caller
        for field in fields
    )


def require_owner(
    resource: Mapping[str, Any],
    caller_id: Any,
    *owner_fields: str,
    detail: str = "You do not have access to this resource"
) -> None:
    """Raise 403 unless the caller owns the resource"""
    if not is_owner(resource, caller_id, *owner_fields):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail
        )
