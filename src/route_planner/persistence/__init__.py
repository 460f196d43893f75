"""Local persistence."""

from .filesystem import FileStorage, MemoryStorage, SlotStorage
from .saved_routes import RouteStore, default_route_name

__all__ = ["FileStorage", "MemoryStorage", "SlotStorage", "RouteStore", "default_route_name"]
