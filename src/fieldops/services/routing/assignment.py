"""Cheapest-insertion technician suggestions for unassigned jobs."""

from __future__ import annotations

import logging
import math
from typing import Sequence

from ...models.domain import Coordinates
from ..geospatial import distance_between, estimate_travel_minutes
from .models import AssignmentCandidate, AssignmentSuggestion, RouteStop, RoutingPolicy

logger = logging.getLogger(__name__)


def insertion_cost(
    location: Coordinates,
    current_stops: Sequence[RouteStop],
    job: RouteStop,
) -> tuple[float, int]:
    """Smallest extra distance from slotting ``job`` into an existing route.

    Returns ``(cost_miles, position)`` where ``position`` is the index the job
    would take in ``current_stops``. The technician's current position acts as
    the stop before the first one; appending after the last stop costs only
    the final leg.
    """
    target = job.coordinates
    if not current_stops:
        return distance_between(location, target), 0

    best_cost = math.inf
    best_position = 0
    previous = location
    for position, stop in enumerate(current_stops):
        following = stop.coordinates
        cost = (
            distance_between(previous, target)
            + distance_between(target, following)
            - distance_between(previous, following)
        )
        if cost < best_cost:
            best_cost = cost
            best_position = position
        previous = following

    append_cost = distance_between(previous, target)
    if append_cost < best_cost:
        best_cost = append_cost
        best_position = len(current_stops)

    return best_cost, best_position


def suggest_assignment(
    job: RouteStop,
    candidates: Sequence[AssignmentCandidate],
    *,
    policy: RoutingPolicy | None = None,
) -> AssignmentSuggestion | None:
    """Recommend the technician whose route grows the least by taking ``job``.

    Candidates without a location or without the required skills are never
    suggested. This is a per-job greedy choice and does not rebalance other
    assignments.
    """
    policy = policy or RoutingPolicy.from_settings()
    best: AssignmentSuggestion | None = None
    best_cost = math.inf

    for candidate in candidates:
        if candidate.location is None or not candidate.skill_match:
            continue

        cost, _ = insertion_cost(candidate.location, candidate.current_stops, job)
        if cost < best_cost:
            best_cost = cost
            best = AssignmentSuggestion(
                technician_id=candidate.id,
                technician_name=candidate.name,
                additional_distance_miles=round(cost, 1),
                additional_time_minutes=estimate_travel_minutes(cost, policy.average_speed_mph),
            )

    if best is None:
        logger.info(f"No qualifying technician for job {job.id}")
    return best
