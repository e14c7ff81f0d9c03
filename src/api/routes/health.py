"""
Health check API route
"""

from datetime import datetime, timezone
from fastapi import APIRouter, HTTPException
from database.connection import get_user_store

router = APIRouter()

@router.get("/health")
async def health_check():
    """Health check - reports whether the user store answers"""
    try:
        await get_user_store().ping()
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "database": "connected"
        }

    except Exception as e:
        # Only report unhealthy for actual infrastructure issues
        raise HTTPException(status_code=503, detail=f"Health check failed: {str(e)}")
