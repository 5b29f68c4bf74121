"""Fleet-wide route optimization and savings reporting."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Sequence

from .models import FleetOptimizationResult, FleetSavings, FleetTechnician, OptimizedRoute, RoutingPolicy
from .optimizer import optimize_route, walk_route

logger = logging.getLogger(__name__)


def optimize_fleet(
    technicians: Sequence[FleetTechnician],
    *,
    now: datetime | None = None,
    policy: RoutingPolicy | None = None,
) -> FleetOptimizationResult:
    """Optimize every routable technician and compare against the assigned order.

    Technicians without a location or without stops are left out of both the
    routes and the savings totals. Savings can be negative when the assigned
    order was already better than the heuristic; that is reported as is.
    """
    policy = policy or RoutingPolicy.from_settings()
    departure = now or datetime.now(timezone.utc)

    routes: list[OptimizedRoute] = []
    distance_before = 0.0
    distance_after = 0.0
    minutes_before = 0
    minutes_after = 0

    for technician in technicians:
        if technician.location is None or not technician.stops:
            continue

        as_assigned = walk_route(technician.location, technician.stops, departure=departure, policy=policy)
        optimized = optimize_route(
            technician.id,
            technician.name,
            technician.location,
            technician.stops,
            now=departure,
            policy=policy,
        )
        optimized_walk = walk_route(technician.location, optimized.stops, departure=departure, policy=policy)

        distance_before += as_assigned.distance_miles
        minutes_before += as_assigned.duration_minutes
        distance_after += optimized_walk.distance_miles
        minutes_after += optimized_walk.duration_minutes
        routes.append(optimized)

    savings = FleetSavings(
        distance_saved_miles=round(distance_before - distance_after, 1),
        time_saved_minutes=minutes_before - minutes_after,
    )
    logger.info(
        f"Optimized {len(routes)} technician routes: "
        f"{savings.distance_saved_miles} mi / {savings.time_saved_minutes} min saved"
    )
    return FleetOptimizationResult(routes=routes, total_savings=savings)
