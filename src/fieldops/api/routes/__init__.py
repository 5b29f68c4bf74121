"""Route group exports."""

from . import assignments, health, routes, technicians

__all__ = ["assignments", "health", "routes", "technicians"]
