"""API router package"""

from . import analyze_routes, dashboard_routes, network_routes, health_routes

__all__ = [
    "analyze_routes",
    "dashboard_routes",
    "network_routes",
    "health_routes",
]
