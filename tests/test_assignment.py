import math

import pytest

from fieldops.models.domain import Coordinates
from fieldops.services.geospatial import EARTH_RADIUS_MILES, haversine_miles
from fieldops.services.routing.assignment import insertion_cost, suggest_assignment
from fieldops.services.routing.models import AssignmentCandidate, RouteStop, RoutingPolicy

POLICY = RoutingPolicy()


def _deg(miles: float) -> float:
    return math.degrees(miles / EARTH_RADIUS_MILES)


def _stop(stop_id: str, east_miles: float, north_miles: float = 0.0) -> RouteStop:
    return RouteStop(
        id=stop_id,
        name=f"Stop {stop_id}",
        address="",
        latitude=_deg(north_miles),
        longitude=_deg(east_miles),
    )


def _candidate(candidate_id: str, location, stops=None, skill_match=True) -> AssignmentCandidate:
    return AssignmentCandidate(
        id=candidate_id,
        name=f"Tech {candidate_id}",
        location=location,
        current_stops=list(stops or []),
        skill_match=skill_match,
    )


def _dist(a: RouteStop, b: RouteStop) -> float:
    return haversine_miles(a.latitude, a.longitude, b.latitude, b.longitude)


def test_job_between_two_stops_is_inserted_in_the_middle():
    first = _stop("first", 0)
    second = _stop("second", 10)
    job = _stop("new", 5, north_miles=1)
    location = Coordinates(0.0, _deg(-1))

    cost, position = insertion_cost(location, [first, second], job)

    expected = _dist(first, job) + _dist(job, second) - _dist(first, second)
    assert position == 1
    assert cost == pytest.approx(expected)

    suggestion = suggest_assignment(job, [_candidate("t1", location, [first, second])], policy=POLICY)

    assert suggestion.technician_id == "t1"
    assert suggestion.technician_name == "Tech t1"
    assert suggestion.additional_distance_miles == round(expected, 1) == 0.2
    assert suggestion.additional_time_minutes == 0


def test_append_after_last_stop_costs_final_leg_only():
    stops = [_stop("a", 1), _stop("b", 2)]
    job = _stop("new", 3)

    cost, position = insertion_cost(Coordinates(0.0, 0.0), stops, job)

    assert position == 2
    assert cost == pytest.approx(1.0)


def test_empty_route_costs_distance_from_current_position():
    job = _stop("new", 6)

    suggestion = suggest_assignment(job, [_candidate("t1", Coordinates(0.0, 0.0))], policy=POLICY)

    assert suggestion.additional_distance_miles == 6.0
    assert suggestion.additional_time_minutes == 12


def test_unlocated_and_unskilled_candidates_are_never_suggested():
    job = _stop("new", 5)
    candidates = [
        _candidate("unskilled", Coordinates(0.0, _deg(5)), skill_match=False),
        _candidate("lost", None),
        _candidate("far", Coordinates(0.0, _deg(20))),
    ]

    suggestion = suggest_assignment(job, candidates, policy=POLICY)

    assert suggestion.technician_id == "far"
    assert suggestion.additional_distance_miles == 15.0


def test_cheapest_candidate_wins():
    job = _stop("new", 5)
    candidates = [
        _candidate("far", Coordinates(0.0, 0.0)),
        _candidate("close", Coordinates(0.0, _deg(4))),
    ]

    assert suggest_assignment(job, candidates, policy=POLICY).technician_id == "close"


def test_ties_go_to_the_first_candidate():
    job = _stop("new", 5)
    candidates = [
        _candidate("first", Coordinates(0.0, 0.0)),
        _candidate("second", Coordinates(0.0, 0.0)),
    ]

    assert suggest_assignment(job, candidates, policy=POLICY).technician_id == "first"


def test_no_qualifying_candidate_returns_none():
    job = _stop("new", 5)

    assert suggest_assignment(job, [], policy=POLICY) is None
    assert suggest_assignment(job, [_candidate("lost", None)], policy=POLICY) is None
