"""Technician location tracking services."""

from .liveness import LivenessThresholds, classify_liveness, snapshot_liveness
from .synchronizer import TechnicianLocationSynchronizer

__all__ = [
    "LivenessThresholds",
    "classify_liveness",
    "snapshot_liveness",
    "TechnicianLocationSynchronizer",
]
