"""Dispatch board services."""

from .service import (
    DispatchStats,
    build_candidates,
    build_fleet,
    compute_dispatch_stats,
    job_to_route_stop,
    optimize_snapshots,
    suggest_technician,
)

__all__ = [
    "DispatchStats",
    "job_to_route_stop",
    "build_fleet",
    "build_candidates",
    "optimize_snapshots",
    "suggest_technician",
    "compute_dispatch_stats",
]
