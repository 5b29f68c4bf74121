"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ..deps import get_synchronizer
from ...services.tracking.synchronizer import TechnicianLocationSynchronizer

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/sync", status_code=status.HTTP_200_OK)
def health_sync(synchronizer: TechnicianLocationSynchronizer = Depends(get_synchronizer)) -> dict:
    """Report whether technician locations are being kept fresh."""
    return {
        "running": synchronizer.running,
        "loading": synchronizer.loading,
        "technicians": len(synchronizer.snapshots),
        "last_refreshed_at": synchronizer.last_refreshed_at.isoformat() if synchronizer.last_refreshed_at else None,
        "error": synchronizer.last_error,
    }


@router.get("/health/database", status_code=status.HTTP_200_OK)
async def check_database() -> dict:
    """Check that the Supabase project answers a roster query."""
    from ...db.supabase import get_supabase_client

    supabase = await get_supabase_client()
    if not supabase:
        return {
            "configured": False,
            "message": "Supabase not configured. Set FIELDOPS_SUPABASE_URL and FIELDOPS_SUPABASE_KEY environment variables.",
        }

    try:
        response = await supabase.table("profiles").select("id", count="exact").eq("role", "technician").limit(1).execute()
        return {
            "configured": True,
            "connected": True,
            "technician_count": response.count,
            "message": "Database connected.",
        }
    except Exception as exc:
        return {
            "configured": True,
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
