import math
from datetime import datetime, timezone

from fieldops.models.domain import Coordinates, Priority
from fieldops.services.geospatial import EARTH_RADIUS_MILES
from fieldops.services.routing.fleet import optimize_fleet
from fieldops.services.routing.models import FleetTechnician, RouteStop, RoutingPolicy

NOW = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)
ORIGIN = Coordinates(0.0, 0.0)
POLICY = RoutingPolicy()


def _east(miles: float) -> float:
    return math.degrees(miles / EARTH_RADIUS_MILES)


def _stop(stop_id: str, miles: float, priority=Priority.NORMAL) -> RouteStop:
    return RouteStop(
        id=stop_id,
        name=f"Stop {stop_id}",
        address="",
        latitude=0.0,
        longitude=_east(miles),
        priority=priority,
    )


def test_single_stop_route_has_no_savings():
    technicians = [
        FleetTechnician(id="a", name="A", location=ORIGIN, stops=[]),
        FleetTechnician(
            id="b",
            name="B",
            location=ORIGIN,
            stops=[RouteStop(id="s1", name="S1", address="", latitude=0.0, longitude=1.0)],
        ),
    ]

    result = optimize_fleet(technicians, now=NOW, policy=POLICY)

    assert [route.technician_id for route in result.routes] == ["b"]
    assert result.total_savings.distance_saved_miles == 0.0
    assert result.total_savings.time_saved_minutes == 0


def test_technicians_without_location_are_skipped():
    technicians = [
        FleetTechnician(id="lost", name="Lost", location=None, stops=[_stop("s1", 3), _stop("s2", 1)]),
        FleetTechnician(id="idle", name="Idle", location=ORIGIN, stops=[]),
    ]

    result = optimize_fleet(technicians, now=NOW, policy=POLICY)

    assert result.routes == []
    assert result.total_savings.distance_saved_miles == 0.0
    assert result.total_savings.time_saved_minutes == 0


def test_reordering_reports_savings():
    # Assigned order doubles back: 3 miles out, then 2 back.
    technicians = [
        FleetTechnician(id="t1", name="Alice", location=ORIGIN, stops=[_stop("far", 3), _stop("near", 1)]),
    ]

    result = optimize_fleet(technicians, now=NOW, policy=POLICY)

    route = result.routes[0]
    assert [stop.id for stop in route.stops] == ["near", "far"]
    assert route.total_distance_miles == 3.0
    assert result.total_savings.distance_saved_miles == 2.0
    assert result.total_savings.time_saved_minutes == 4


def test_savings_sum_across_technicians():
    technicians = [
        FleetTechnician(id="t1", name="Alice", location=ORIGIN, stops=[_stop("far", 3), _stop("near", 1)]),
        FleetTechnician(id="t2", name="Bob", location=ORIGIN, stops=[_stop("x", -2), _stop("y", -1)]),
    ]

    result = optimize_fleet(technicians, now=NOW, policy=POLICY)

    assert len(result.routes) == 2
    assert result.total_savings.distance_saved_miles == 3.0
    assert result.total_savings.time_saved_minutes == 6


def test_priority_ordering_can_cost_more_than_assigned_order():
    technicians = [
        FleetTechnician(
            id="t1",
            name="Alice",
            location=ORIGIN,
            stops=[_stop("low", 1, Priority.LOW), _stop("emergency", 10, Priority.EMERGENCY)],
        ),
    ]

    result = optimize_fleet(technicians, now=NOW, policy=POLICY)

    assert [stop.id for stop in result.routes[0].stops] == ["emergency", "low"]
    assert result.total_savings.distance_saved_miles == -9.0
    assert result.total_savings.time_saved_minutes == -18
