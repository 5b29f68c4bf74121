"""Single-technician route optimization.

Urgent work (emergency and high priority by default) is visited first in
priority order regardless of geography. The remaining stops are ordered with
a nearest-neighbour sweep that starts where the urgent work ends.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Sequence
from urllib.parse import quote

from ...models.domain import Coordinates
from ..geospatial import distance_between, estimate_travel_minutes
from .models import ArrivalEstimate, OptimizedRoute, RouteStop, RoutingPolicy

DIRECTIONS_BASE_URL = "https://www.google.com/maps/dir/?api=1"


@dataclass(slots=True)
class RouteWalk:
    """Cost of visiting stops in a fixed order."""

    distance_miles: float
    duration_minutes: int
    arrival_estimates: list[ArrivalEstimate]


def walk_route(
    start: Coordinates,
    stops: Sequence[RouteStop],
    *,
    departure: datetime,
    policy: RoutingPolicy,
) -> RouteWalk:
    """Accumulate travel and on-site time along ``stops`` in the given order."""

    distance = 0.0
    duration = 0
    clock = departure
    current = start
    arrivals: list[ArrivalEstimate] = []

    for stop in stops:
        leg_miles = distance_between(current, stop.coordinates)
        leg_minutes = estimate_travel_minutes(leg_miles, policy.average_speed_mph)
        dwell = policy.dwell_minutes(stop)

        distance += leg_miles
        duration += leg_minutes + dwell

        clock += timedelta(minutes=leg_minutes)
        arrivals.append(ArrivalEstimate(stop_id=stop.id, eta=clock))
        clock += timedelta(minutes=dwell)
        current = stop.coordinates

    return RouteWalk(distance_miles=distance, duration_minutes=duration, arrival_estimates=arrivals)


def nearest_neighbor_order(start: Coordinates, stops: Sequence[RouteStop]) -> list[RouteStop]:
    """Greedy ordering that always travels to the closest unvisited stop.

    Ties keep input order because ``min`` returns the first minimal element.
    """
    remaining = list(stops)
    ordered: list[RouteStop] = []
    current = start
    while remaining:
        nearest_index = min(
            range(len(remaining)),
            key=lambda index: distance_between(current, remaining[index].coordinates),
        )
        nearest = remaining.pop(nearest_index)
        ordered.append(nearest)
        current = nearest.coordinates
    return ordered


def prioritized_order(
    start: Coordinates,
    stops: Sequence[RouteStop],
    policy: RoutingPolicy,
) -> list[RouteStop]:
    by_priority = sorted(stops, key=lambda stop: stop.priority.rank)
    urgent = [stop for stop in by_priority if stop.priority in policy.urgent_priorities]
    regular = [stop for stop in by_priority if stop.priority not in policy.urgent_priorities]

    sweep_origin = urgent[-1].coordinates if urgent else start
    return urgent + nearest_neighbor_order(sweep_origin, regular)


def build_directions_url(start: Coordinates, stops: Sequence[RouteStop]) -> str:
    """Google Maps directions link: origin, waypoints in visiting order, destination."""
    if not stops:
        return ""

    origin = f"{start.latitude},{start.longitude}"
    destination = f"{stops[-1].latitude},{stops[-1].longitude}"
    waypoints = "|".join(f"{stop.latitude},{stop.longitude}" for stop in stops[:-1])

    url = f"{DIRECTIONS_BASE_URL}&origin={origin}&destination={destination}"
    if waypoints:
        url += f"&waypoints={quote(waypoints, safe='')}"
    url += "&travelmode=driving"
    return url


def optimize_route(
    technician_id: str,
    technician_name: str,
    start: Coordinates,
    stops: Sequence[RouteStop],
    *,
    now: datetime | None = None,
    policy: RoutingPolicy | None = None,
) -> OptimizedRoute:
    """Order one technician's stops and estimate arrivals from ``now``."""

    if not stops:
        return OptimizedRoute(
            technician_id=technician_id,
            technician_name=technician_name,
            start_location=start,
            stops=[],
            total_distance_miles=0.0,
            total_duration_minutes=0,
            arrival_estimates=[],
            external_navigation_url="",
        )

    policy = policy or RoutingPolicy.from_settings()
    departure = now or datetime.now(timezone.utc)

    ordered = prioritized_order(start, stops, policy)
    walk = walk_route(start, ordered, departure=departure, policy=policy)

    return OptimizedRoute(
        technician_id=technician_id,
        technician_name=technician_name,
        start_location=start,
        stops=ordered,
        total_distance_miles=round(walk.distance_miles, 1),
        total_duration_minutes=walk.duration_minutes,
        arrival_estimates=walk.arrival_estimates,
        external_navigation_url=build_directions_url(start, ordered),
    )
