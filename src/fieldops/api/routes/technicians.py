"""Technician location endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from ..deps import get_synchronizer
from ...models.domain import TechnicianSnapshot
from ...schemas.technicians import DispatchStatsModel, TechnicianListResponse, TechnicianSnapshotModel
from ...services.dispatch.service import compute_dispatch_stats
from ...services.tracking.liveness import LivenessThresholds, snapshot_liveness
from ...services.tracking.synchronizer import TechnicianLocationSynchronizer

router = APIRouter(prefix="/technicians", tags=["technicians"])


def _snapshot_model(snapshot: TechnicianSnapshot, thresholds: LivenessThresholds) -> TechnicianSnapshotModel:
    model = TechnicianSnapshotModel.model_validate(snapshot, from_attributes=True)
    # Liveness degrades between refreshes, so report it as of now.
    return model.model_copy(update={"liveness_state": snapshot_liveness(snapshot, thresholds=thresholds)})


def _list_response(synchronizer: TechnicianLocationSynchronizer) -> TechnicianListResponse:
    return TechnicianListResponse(
        technicians=[_snapshot_model(snapshot, synchronizer.thresholds) for snapshot in synchronizer.snapshots],
        loading=synchronizer.loading,
        error=synchronizer.last_error,
        last_refreshed_at=synchronizer.last_refreshed_at,
    )


@router.get("", response_model=TechnicianListResponse, status_code=status.HTTP_200_OK)
def list_technicians(synchronizer: TechnicianLocationSynchronizer = Depends(get_synchronizer)) -> TechnicianListResponse:
    """Last known technician snapshots, served even when the latest refresh failed."""
    return _list_response(synchronizer)


@router.post("/refresh", response_model=TechnicianListResponse, status_code=status.HTTP_200_OK)
async def refresh_technicians(
    synchronizer: TechnicianLocationSynchronizer = Depends(get_synchronizer),
) -> TechnicianListResponse:
    await synchronizer.refresh()
    return _list_response(synchronizer)


@router.get("/stats", response_model=DispatchStatsModel, status_code=status.HTTP_200_OK)
def technician_stats(synchronizer: TechnicianLocationSynchronizer = Depends(get_synchronizer)) -> DispatchStatsModel:
    stats = compute_dispatch_stats(synchronizer.snapshots, thresholds=synchronizer.thresholds)
    return DispatchStatsModel.model_validate(stats, from_attributes=True)


@router.get("/{technician_id}", response_model=TechnicianSnapshotModel, status_code=status.HTTP_200_OK)
def get_technician(
    technician_id: str,
    synchronizer: TechnicianLocationSynchronizer = Depends(get_synchronizer),
) -> TechnicianSnapshotModel:
    snapshot = synchronizer.get(technician_id)
    if snapshot is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Technician {technician_id} not found",
        )
    return _snapshot_model(snapshot, synchronizer.thresholds)
