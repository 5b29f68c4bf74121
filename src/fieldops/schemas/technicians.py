"""Technician snapshot response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from ..models.domain import LivenessState, Priority


class LocationSampleModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    latitude: float
    longitude: float
    accuracy_meters: Optional[float] = None
    captured_at: datetime


class JobRefModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    code: str
    title: str
    status: str
    priority: Priority
    customer_name: str
    customer_address: Optional[str] = None
    customer_latitude: Optional[float] = None
    customer_longitude: Optional[float] = None
    scheduled_at: Optional[datetime] = None
    estimated_duration_minutes: Optional[int] = None


class TechnicianSnapshotModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    technician_id: str
    display_name: str
    email: str
    phone: Optional[str] = None
    location: Optional[LocationSampleModel] = None
    active_jobs: List[JobRefModel]
    liveness_state: LivenessState


class TechnicianListResponse(BaseModel):
    technicians: List[TechnicianSnapshotModel]
    loading: bool
    error: Optional[str] = None
    last_refreshed_at: Optional[datetime] = None


class DispatchStatsModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_technicians: int
    fresh_technicians: int
    active_jobs: int
    utilization_percent: int
