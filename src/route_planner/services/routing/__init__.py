"""Route optimization pipeline."""

from .duration import parse_duration
from .gemini_client import GeminiClient
from .request_builder import build_route_request, split_address_block
from .schedule import compute_schedule
from .service import RouteOptimizer, build_maps_url
from .validator import parse_route_response

__all__ = [
    "parse_duration",
    "GeminiClient",
    "build_route_request",
    "split_address_block",
    "compute_schedule",
    "RouteOptimizer",
    "build_maps_url",
    "parse_route_response",
]
