"""Route optimization orchestration service."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Optional, Protocol, Sequence
from urllib.parse import quote
from zoneinfo import ZoneInfo

from ...config import Settings, settings as default_settings
from ...errors import OptimizationInProgress
from ...models.domain import Location, OptimizedRoute, OracleReply, RouteRequest
from .gemini_client import GeminiClient
from .request_builder import build_route_request
from .schedule import compute_schedule
from .validator import check_stop_sequence, parse_route_response

logger = logging.getLogger(__name__)

# Characters encodeURIComponent leaves untouched.
_URI_COMPONENT_SAFE = "-_.!~*'()"


class RouteOracle(Protocol):
    def generate(self, request: RouteRequest) -> OracleReply: ...


def build_maps_url(route: Sequence[dict], base_url: str | None = None) -> Optional[str]:
    """Return a multi-stop map viewer link, or ``None`` for routes with fewer than two stops."""
    if len(route) <= 1:
        return None
    base = base_url if base_url is not None else default_settings.maps_base_url
    return base + "/".join(quote(str(step.get("address", "")), safe=_URI_COMPONENT_SAFE) for step in route)


class RouteOptimizer:
    """Runs build -> oracle -> validate -> schedule for one logical session.

    Only one optimization may be in flight per instance; a concurrent call is
    rejected with ``OptimizationInProgress`` rather than queued.
    """

    def __init__(
        self,
        oracle_factory: Callable[[], RouteOracle] | None = None,
        config: Settings | None = None,
    ) -> None:
        self.config = config or default_settings
        self._oracle_factory = oracle_factory or GeminiClient
        self._in_flight = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._in_flight.locked()

    def _start_instant(self, now: datetime | None) -> datetime:
        zone = ZoneInfo(self.config.timezone)
        if now is None:
            return datetime.now(zone)
        if now.tzinfo is None:
            return now.replace(tzinfo=zone)
        return now

    def optimize(
        self,
        start_address: str,
        delivery_addresses: Sequence[str],
        round_trip: bool = False,
        location: Location | None = None,
        now: datetime | None = None,
    ) -> OptimizedRoute:
        request = build_route_request(
            start_address,
            delivery_addresses,
            round_trip,
            location,
            region=self.config.service_region,
        )

        start = self._start_instant(now)
        if not self._in_flight.acquire(blocking=False):
            raise OptimizationInProgress("A route optimization is already in progress.")
        try:
            oracle = self._oracle_factory()
            try:
                reply = oracle.generate(request)
            finally:
                close = getattr(oracle, "close", None)
                if callable(close):
                    close()
        finally:
            self._in_flight.release()

        validated = parse_route_response(reply.raw_text)
        if self.config.verify_stop_sequence:
            check_stop_sequence(validated.route)

        processed = compute_schedule(validated.route, start, ZoneInfo(self.config.timezone))
        logger.info(
            f"Optimized route from '{request.warehouse}' with {len(processed)} stops "
            f"({validated.total_travel_time})"
        )

        return OptimizedRoute(
            start_address=request.warehouse,
            delivery_addresses=list(request.deliveries),
            round_trip=request.round_trip,
            route=processed,
            total_travel_time=validated.total_travel_time,
            computed_at=start,
            grounding_chunks=reply.grounding_chunks,
            maps_url=build_maps_url(processed, self.config.maps_base_url),
        )
