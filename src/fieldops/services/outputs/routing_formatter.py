"""Serializers for routing outputs."""

from __future__ import annotations

import csv
import io

from ..routing.models import FleetOptimizationResult, OptimizedRoute


def optimized_route_to_json(route: OptimizedRoute) -> dict:
    return {
        "technician_id": route.technician_id,
        "technician_name": route.technician_name,
        "start_location": {
            "latitude": route.start_location.latitude,
            "longitude": route.start_location.longitude,
        },
        "stops": [
            {
                "id": stop.id,
                "name": stop.name,
                "address": stop.address,
                "latitude": stop.latitude,
                "longitude": stop.longitude,
                "priority": stop.priority.value,
                "scheduled_time": stop.scheduled_time.isoformat() if stop.scheduled_time else None,
                "estimated_duration_minutes": stop.estimated_duration_minutes,
            }
            for stop in route.stops
        ],
        "total_distance_miles": route.total_distance_miles,
        "total_duration_minutes": route.total_duration_minutes,
        "arrival_estimates": [
            {"stop_id": estimate.stop_id, "eta": estimate.eta.isoformat()}
            for estimate in route.arrival_estimates
        ],
        "external_navigation_url": route.external_navigation_url,
    }


def fleet_result_to_json(result: FleetOptimizationResult) -> dict:
    return {
        "routes": [optimized_route_to_json(route) for route in result.routes],
        "total_savings": {
            "distance_saved_miles": result.total_savings.distance_saved_miles,
            "time_saved_minutes": result.total_savings.time_saved_minutes,
        },
    }


def fleet_result_to_csv(result: FleetOptimizationResult) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "technician_id",
        "technician_name",
        "sequence",
        "stop_id",
        "stop_name",
        "priority",
        "eta",
        "total_distance_miles",
        "total_duration_minutes",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for route in result.routes:
        etas = {estimate.stop_id: estimate.eta for estimate in route.arrival_estimates}
        for sequence, stop in enumerate(route.stops, start=1):
            eta = etas.get(stop.id)
            writer.writerow(
                {
                    "technician_id": route.technician_id,
                    "technician_name": route.technician_name,
                    "sequence": sequence,
                    "stop_id": stop.id,
                    "stop_name": stop.name,
                    "priority": stop.priority.value,
                    "eta": eta.isoformat() if eta else "",
                    "total_distance_miles": route.total_distance_miles,
                    "total_duration_minutes": route.total_duration_minutes,
                }
            )
    return buffer.getvalue()
