"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Sequence

from ..models.domain import Coordinates

EARTH_RADIUS_MILES = 3959.0
DEFAULT_AVERAGE_SPEED_MPH = 30.0


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MILES * c


def distance_between(origin: Coordinates, destination: Coordinates) -> float:
    return haversine_miles(origin.latitude, origin.longitude, destination.latitude, destination.longitude)


def estimate_travel_minutes(distance_miles: float, average_speed_mph: float = DEFAULT_AVERAGE_SPEED_MPH) -> int:
    """Estimate driving time at a fixed average speed.

    This is a straight-line approximation with no road network or traffic
    model behind it.
    """
    if average_speed_mph <= 0:
        raise ValueError("average_speed_mph must be positive")
    return round(distance_miles / average_speed_mph * 60)


def distance_matrix(points: Sequence[Coordinates]) -> list[list[float]]:
    """Pairwise great-circle distances in miles with a zero diagonal."""

    size = len(points)
    matrix = [[0.0] * size for _ in range(size)]
    for i in range(size):
        for j in range(i + 1, size):
            distance = distance_between(points[i], points[j])
            matrix[i][j] = distance
            matrix[j][i] = distance
    return matrix
