"""Health endpoints."""

from __future__ import annotations

import time

from fastapi import APIRouter, status

router = APIRouter(tags=["health"])

_STARTED_AT = time.monotonic()


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "healthy", "uptime": round(time.monotonic() - _STARTED_AT, 1)}


@router.get("/health/pincodes", status_code=status.HTTP_200_OK)
def health_pincodes() -> dict:
    """Report how many postal codes the geocoder can fall back on."""
    from ...data.pincode_repository import get_pincode_table

    return {"service": "pincodes", "entries": len(get_pincode_table())}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check database connection and task table status."""
    from ...db.supabase import get_supabase_client

    supabase = get_supabase_client()
    if not supabase:
        return {
            "configured": False,
            "message": "Supabase not configured. Set FIELDTRACK_SUPABASE_URL and FIELDTRACK_SUPABASE_KEY environment variables.",
        }

    try:
        response = supabase.table("tasks").select("id", count="exact").limit(1).execute()
        return {
            "configured": True,
            "connected": True,
            "tasks_count": response.count or 0,
            "message": f"Database connected. Found {response.count or 0} tasks.",
        }
    except Exception as exc:
        return {
            "configured": True,
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
