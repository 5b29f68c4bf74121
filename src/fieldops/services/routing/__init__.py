"""Route optimization and assignment services."""

from .assignment import insertion_cost, suggest_assignment
from .fleet import optimize_fleet
from .optimizer import build_directions_url, optimize_route

__all__ = [
    "optimize_route",
    "build_directions_url",
    "optimize_fleet",
    "suggest_assignment",
    "insertion_cost",
]
