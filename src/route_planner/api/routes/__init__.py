"""Route group exports."""

from . import health, routes, saved_routes

__all__ = ["health", "routes", "saved_routes"]
