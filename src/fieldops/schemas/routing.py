"""Routing and assignment request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.domain import Coordinates, Priority
from ..services.routing.models import AssignmentCandidate, FleetTechnician, RouteStop


class CoordinatesModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    def to_domain(self) -> Coordinates:
        return Coordinates(self.latitude, self.longitude)


class RouteStopModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    address: str = ""
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    priority: Priority = Priority.NORMAL
    scheduled_time: Optional[datetime] = None
    estimated_duration_minutes: Optional[int] = Field(default=None, ge=0)

    def to_domain(self) -> RouteStop:
        return RouteStop(
            id=self.id,
            name=self.name,
            address=self.address,
            latitude=self.latitude,
            longitude=self.longitude,
            priority=self.priority,
            scheduled_time=self.scheduled_time,
            estimated_duration_minutes=self.estimated_duration_minutes,
        )


class FleetTechnicianModel(BaseModel):
    id: str
    name: str
    location: Optional[CoordinatesModel] = None
    stops: List[RouteStopModel] = Field(default_factory=list)

    def to_domain(self) -> FleetTechnician:
        return FleetTechnician(
            id=self.id,
            name=self.name,
            location=self.location.to_domain() if self.location else None,
            stops=[stop.to_domain() for stop in self.stops],
        )


class FleetOptimizationRequest(BaseModel):
    technicians: List[FleetTechnicianModel]


class ArrivalEstimateModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    stop_id: str
    eta: datetime


class OptimizedRouteModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    technician_id: str
    technician_name: str
    start_location: CoordinatesModel
    stops: List[RouteStopModel]
    total_distance_miles: float
    total_duration_minutes: int
    arrival_estimates: List[ArrivalEstimateModel]
    external_navigation_url: str


class FleetSavingsModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    distance_saved_miles: float
    time_saved_minutes: int


class FleetOptimizationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    routes: List[OptimizedRouteModel]
    total_savings: FleetSavingsModel


class AssignmentCandidateModel(BaseModel):
    id: str
    name: str
    location: Optional[CoordinatesModel] = None
    current_stops: List[RouteStopModel] = Field(default_factory=list)
    skill_match: bool = True

    def to_domain(self) -> AssignmentCandidate:
        return AssignmentCandidate(
            id=self.id,
            name=self.name,
            location=self.location.to_domain() if self.location else None,
            current_stops=[stop.to_domain() for stop in self.current_stops],
            skill_match=self.skill_match,
        )


class AssignmentRequest(BaseModel):
    job: RouteStopModel
    candidates: Optional[List[AssignmentCandidateModel]] = Field(
        default=None,
        description="Explicit candidates. When omitted, every synchronized technician is considered.",
    )


class AssignmentSuggestionModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    technician_id: str
    technician_name: str
    additional_distance_miles: float
    additional_time_minutes: int


class AssignmentResponse(BaseModel):
    suggestion: Optional[AssignmentSuggestionModel] = None
    message: Optional[str] = None
