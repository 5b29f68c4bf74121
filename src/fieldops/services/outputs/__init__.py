"""Routing output serializers."""

from .routing_formatter import fleet_result_to_csv, fleet_result_to_json, optimized_route_to_json

__all__ = ["optimized_route_to_json", "fleet_result_to_json", "fleet_result_to_csv"]
