"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ...config import settings
from ...models.domain import Coordinates, Priority


@dataclass(slots=True)
class RouteStop:
    id: str
    name: str
    address: str
    latitude: float
    longitude: float
    priority: Priority = Priority.NORMAL
    scheduled_time: Optional[datetime] = None
    estimated_duration_minutes: Optional[int] = None

    def __post_init__(self) -> None:
        self.priority = Priority.parse(self.priority)

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(self.latitude, self.longitude)


@dataclass(slots=True)
class ArrivalEstimate:
    stop_id: str
    eta: datetime


@dataclass(slots=True)
class OptimizedRoute:
    technician_id: str
    technician_name: str
    start_location: Coordinates
    stops: List[RouteStop]
    total_distance_miles: float
    total_duration_minutes: int
    arrival_estimates: List[ArrivalEstimate]
    external_navigation_url: str


@dataclass(slots=True)
class FleetTechnician:
    id: str
    name: str
    location: Optional[Coordinates]
    stops: List[RouteStop] = field(default_factory=list)


@dataclass(slots=True)
class FleetSavings:
    distance_saved_miles: float
    time_saved_minutes: int


@dataclass(slots=True)
class FleetOptimizationResult:
    routes: List[OptimizedRoute]
    total_savings: FleetSavings


@dataclass(slots=True)
class AssignmentCandidate:
    id: str
    name: str
    location: Optional[Coordinates]
    current_stops: List[RouteStop] = field(default_factory=list)
    skill_match: bool = True


@dataclass(slots=True)
class AssignmentSuggestion:
    technician_id: str
    technician_name: str
    additional_distance_miles: float
    additional_time_minutes: int


@dataclass(slots=True, frozen=True)
class RoutingPolicy:
    """Dispatch policy knobs; defaults reproduce the dispatch board's behaviour."""

    average_speed_mph: float = 30.0
    default_stop_duration_minutes: int = 60
    urgent_priorities: frozenset[Priority] = frozenset({Priority.EMERGENCY, Priority.HIGH})

    @classmethod
    def from_settings(cls) -> "RoutingPolicy":
        return cls(
            average_speed_mph=settings.average_speed_mph,
            default_stop_duration_minutes=settings.default_stop_duration_minutes,
            urgent_priorities=frozenset(Priority.parse(value) for value in settings.urgent_priorities),
        )

    def dwell_minutes(self, stop: RouteStop) -> int:
        if stop.estimated_duration_minutes:
            return stop.estimated_duration_minutes
        return self.default_stop_duration_minutes
