"""Domain models for technicians, location samples and job references."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class LivenessState(str, Enum):
    """Freshness of a technician's last known location."""

    FRESH = "fresh"
    DEGRADED = "degraded"
    STALE = "stale"


class Priority(str, Enum):
    """Dispatch priority of a job or route stop."""

    EMERGENCY = "emergency"
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    @classmethod
    def parse(cls, value: "Priority | str | None") -> "Priority":
        """Map a ticket priority onto the dispatch vocabulary.

        Tickets carry free-form priorities; "urgent" is treated as an emergency
        and anything unrecognised (or missing) falls back to normal.
        """
        if isinstance(value, Priority):
            return value
        if not value:
            return cls.NORMAL
        normalised = str(value).strip().lower()
        if normalised == "urgent":
            return cls.EMERGENCY
        try:
            return cls(normalised)
        except ValueError:
            return cls.NORMAL


_PRIORITY_RANK = {
    Priority.EMERGENCY: 0,
    Priority.HIGH: 1,
    Priority.NORMAL: 2,
    Priority.LOW: 3,
}

ACTIVE_JOB_STATUSES = ("scheduled", "in_progress")


@dataclass(slots=True, frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(slots=True, frozen=True)
class LocationSample:
    """Most recent position reported by a technician's device."""

    latitude: float
    longitude: float
    captured_at: datetime
    accuracy_meters: Optional[float] = None

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(self.latitude, self.longitude)


@dataclass(slots=True, frozen=True)
class TechnicianProfile:
    """Roster entry for an active field technician."""

    id: str
    full_name: str
    email: str
    phone: Optional[str] = None


@dataclass(slots=True, frozen=True)
class JobRef:
    """Read-only projection of a ticket assigned to a technician."""

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

    @property
    def is_routable(self) -> bool:
        return self.customer_latitude is not None and self.customer_longitude is not None


@dataclass(slots=True, frozen=True)
class TechnicianSnapshot:
    """Best-known state of one technician, built in a single refresh cycle."""

    technician_id: str
    display_name: str
    email: str
    location: Optional[LocationSample]
    liveness_state: LivenessState
    active_jobs: tuple[JobRef, ...] = field(default_factory=tuple)
    phone: Optional[str] = None
    observed_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.location is None and self.liveness_state is not LivenessState.STALE:
            raise ValueError("A technician without a location must be stale.")

    @property
    def coordinates(self) -> Optional[Coordinates]:
        return self.location.coordinates if self.location else None
