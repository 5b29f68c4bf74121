"""Dispatch orchestration over synchronized technician snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Sequence

from ...config import settings
from ...models.domain import JobRef, LivenessState, TechnicianSnapshot
from ..routing.assignment import suggest_assignment
from ..routing.fleet import optimize_fleet
from ..routing.models import (
    AssignmentCandidate,
    AssignmentSuggestion,
    FleetOptimizationResult,
    FleetTechnician,
    RouteStop,
    RoutingPolicy,
)
from ..tracking.liveness import LivenessThresholds, snapshot_liveness

SkillMatcher = Callable[[TechnicianSnapshot, RouteStop], bool]


@dataclass(slots=True)
class DispatchStats:
    total_technicians: int
    fresh_technicians: int
    active_jobs: int
    utilization_percent: int


def _any_technician(snapshot: TechnicianSnapshot, job: RouteStop) -> bool:
    return True


def job_to_route_stop(job: JobRef, default_duration_minutes: int | None = None) -> Optional[RouteStop]:
    """Project a ticket onto a route stop; ``None`` when the customer has no coordinates."""
    if not job.is_routable:
        return None
    duration = default_duration_minutes if default_duration_minutes is not None else settings.default_stop_duration_minutes
    return RouteStop(
        id=job.id,
        name=job.customer_name or job.title,
        address=job.customer_address or "",
        latitude=job.customer_latitude,
        longitude=job.customer_longitude,
        priority=job.priority,
        scheduled_time=job.scheduled_at,
        estimated_duration_minutes=job.estimated_duration_minutes or duration,
    )


def _route_stops(snapshot: TechnicianSnapshot) -> list[RouteStop]:
    stops = (job_to_route_stop(job) for job in snapshot.active_jobs)
    return [stop for stop in stops if stop is not None]


def build_fleet(snapshots: Sequence[TechnicianSnapshot]) -> list[FleetTechnician]:
    """Technicians with a known position and at least one active job."""
    fleet: list[FleetTechnician] = []
    for snapshot in snapshots:
        if snapshot.location is None or not snapshot.active_jobs:
            continue
        fleet.append(
            FleetTechnician(
                id=snapshot.technician_id,
                name=snapshot.display_name,
                location=snapshot.coordinates,
                stops=_route_stops(snapshot),
            )
        )
    return fleet


def optimize_snapshots(
    snapshots: Sequence[TechnicianSnapshot],
    *,
    now: datetime | None = None,
    policy: RoutingPolicy | None = None,
) -> FleetOptimizationResult:
    return optimize_fleet(build_fleet(snapshots), now=now, policy=policy)


def build_candidates(
    snapshots: Sequence[TechnicianSnapshot],
    job: RouteStop,
    skill_matcher: SkillMatcher | None = None,
) -> list[AssignmentCandidate]:
    matcher = skill_matcher or _any_technician
    return [
        AssignmentCandidate(
            id=snapshot.technician_id,
            name=snapshot.display_name,
            location=snapshot.coordinates,
            current_stops=_route_stops(snapshot),
            skill_match=matcher(snapshot, job),
        )
        for snapshot in snapshots
    ]


def suggest_technician(
    job: RouteStop,
    snapshots: Sequence[TechnicianSnapshot],
    skill_matcher: SkillMatcher | None = None,
    *,
    policy: RoutingPolicy | None = None,
) -> AssignmentSuggestion | None:
    candidates = build_candidates(snapshots, job, skill_matcher)
    return suggest_assignment(job, candidates, policy=policy)


def compute_dispatch_stats(
    snapshots: Sequence[TechnicianSnapshot],
    *,
    now: datetime | None = None,
    thresholds: LivenessThresholds | None = None,
) -> DispatchStats:
    total = len(snapshots)
    fresh = sum(
        1
        for snapshot in snapshots
        if snapshot_liveness(snapshot, now=now, thresholds=thresholds) is LivenessState.FRESH
    )
    active_jobs = sum(len(snapshot.active_jobs) for snapshot in snapshots)
    busy = sum(1 for snapshot in snapshots if snapshot.active_jobs)
    utilization = round(busy / total * 100) if total else 0
    return DispatchStats(
        total_technicians=total,
        fresh_technicians=fresh,
        active_jobs=active_jobs,
        utilization_percent=utilization,
    )
