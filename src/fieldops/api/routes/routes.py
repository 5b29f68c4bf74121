"""Routing endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse

from ..deps import get_synchronizer
from ...schemas.routing import FleetOptimizationRequest, FleetOptimizationResponse
from ...services.dispatch.service import optimize_snapshots
from ...services.outputs.routing_formatter import fleet_result_to_csv
from ...services.routing.fleet import optimize_fleet
from ...services.tracking.synchronizer import TechnicianLocationSynchronizer

router = APIRouter(prefix="/routes", tags=["routes"])


@router.post("/optimize", response_model=FleetOptimizationResponse, status_code=status.HTTP_200_OK)
def optimize(payload: FleetOptimizationRequest) -> FleetOptimizationResponse:
    try:
        result = optimize_fleet([technician.to_domain() for technician in payload.technicians])
        return FleetOptimizationResponse.model_validate(result, from_attributes=True)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error optimizing routes: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to optimize routes: {str(exc)}"
        ) from exc


@router.post("/optimize-active", response_model=FleetOptimizationResponse, status_code=status.HTTP_200_OK)
def optimize_active(
    synchronizer: TechnicianLocationSynchronizer = Depends(get_synchronizer),
) -> FleetOptimizationResponse:
    """Optimize the routes of every technician from the current snapshots."""
    try:
        result = optimize_snapshots(synchronizer.snapshots)
        return FleetOptimizationResponse.model_validate(result, from_attributes=True)
    except Exception as exc:
        logging.exception(f"Error optimizing active routes: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to optimize routes: {str(exc)}"
        ) from exc


@router.get("/optimize-active.csv", response_class=PlainTextResponse, status_code=status.HTTP_200_OK)
def optimize_active_csv(
    synchronizer: TechnicianLocationSynchronizer = Depends(get_synchronizer),
) -> PlainTextResponse:
    result = optimize_snapshots(synchronizer.snapshots)
    return PlainTextResponse(
        fleet_result_to_csv(result),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="optimized_routes.csv"'},
    )
