"""
Health Check Route
"""

from fastapi import APIRouter

router = APIRouter()


@router.get("/healthz")
async def health_check():
    """Liveness check"""
    return {"status": "ok"}
