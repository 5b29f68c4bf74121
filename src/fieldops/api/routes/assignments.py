"""Assignment suggestion endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ..deps import get_synchronizer
from ...schemas.routing import AssignmentRequest, AssignmentResponse, AssignmentSuggestionModel
from ...services.dispatch.service import suggest_technician
from ...services.routing.assignment import suggest_assignment
from ...services.tracking.synchronizer import TechnicianLocationSynchronizer

router = APIRouter(prefix="/assignments", tags=["assignments"])


@router.post("/suggest", response_model=AssignmentResponse, status_code=status.HTTP_200_OK)
def suggest(
    payload: AssignmentRequest,
    synchronizer: TechnicianLocationSynchronizer = Depends(get_synchronizer),
) -> AssignmentResponse:
    job = payload.job.to_domain()
    try:
        if payload.candidates is not None:
            suggestion = suggest_assignment(job, [candidate.to_domain() for candidate in payload.candidates])
        else:
            suggestion = suggest_technician(job, synchronizer.snapshots)
    except Exception as exc:
        logging.exception(f"Error suggesting technician for job {job.id}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to suggest technician: {str(exc)}"
        ) from exc

    if suggestion is None:
        return AssignmentResponse(suggestion=None, message="No technician available")
    return AssignmentResponse(suggestion=AssignmentSuggestionModel.model_validate(suggestion, from_attributes=True))
