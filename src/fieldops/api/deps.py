"""Shared FastAPI dependencies."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from ..services.tracking.synchronizer import TechnicianLocationSynchronizer


def get_synchronizer(request: Request) -> TechnicianLocationSynchronizer:
    synchronizer = getattr(request.app.state, "synchronizer", None)
    if synchronizer is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Technician location sync is not initialised",
        )
    return synchronizer
