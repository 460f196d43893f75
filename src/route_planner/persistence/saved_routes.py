"""Durable collection of named saved routes."""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from typing import Callable

from ..config import settings
from ..errors import InvalidInput, NotFound
from ..models.domain import OptimizedRoute, SavedRoute
from .filesystem import SlotStorage

logger = logging.getLogger(__name__)


def default_route_name(start_address: str, stop_count: int) -> str:
    """``Route from <first part of the start address> (<n> stops)``."""
    label = start_address.split(",")[0].strip() or start_address.strip()
    return f"Route from {label} ({stop_count} stops)"


class RouteStore:
    """CRUD over the saved route collection held in a single storage slot.

    Every mutation is a read-modify-write of the whole collection. There is no
    locking: concurrent writers from separate processes can overwrite each other.
    """

    def __init__(
        self,
        storage: SlotStorage,
        slot: str | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.storage = storage
        self.slot = slot or settings.saved_routes_slot
        self._clock = clock
        self._last_issued_ms = 0

    def _read_all(self) -> list[SavedRoute]:
        try:
            text = self.storage.read(self.slot)
        except UnicodeDecodeError as exc:
            logger.warning(f"Saved route slot '{self.slot}' is not valid text, treating as empty: {exc}")
            return []
        if text is None:
            return []
        try:
            records = json.loads(text)
            if not isinstance(records, list):
                raise TypeError(f"expected a JSON array, got {type(records).__name__}")
            return [SavedRoute.from_record(record) for record in records]
        except (ValueError, TypeError, KeyError, AttributeError) as exc:
            logger.warning(f"Saved route slot '{self.slot}' is corrupt, treating as empty: {exc}")
            return []

    def _write_all(self, routes: list[SavedRoute]) -> None:
        self.storage.write(self.slot, json.dumps([route.to_record() for route in routes], ensure_ascii=False))

    def _next_id(self, existing: set[str]) -> str:
        candidate_ms = max(int(self._clock() * 1000), self._last_issued_ms + 1)
        while f"route-{candidate_ms}" in existing:
            candidate_ms += 1
        self._last_issued_ms = candidate_ms
        return f"route-{candidate_ms}"

    def list(self) -> list[SavedRoute]:
        return self._read_all()

    def save(self, route: OptimizedRoute, name: str | None = None) -> SavedRoute:
        """Append ``route`` as a new snapshot with a fresh id and persist the collection."""
        if not route.start_address.strip():
            raise InvalidInput("Cannot save a route without a start address.")
        if not route.route:
            raise InvalidInput("Cannot save a route without stops.")
        for index, step in enumerate(route.route, start=1):
            if not isinstance(step, dict) or not isinstance(step.get("estimatedArrivalTime"), str):
                raise InvalidInput(f"Route step {index} has no estimated arrival time.")
        if not route.total_travel_time.strip():
            raise InvalidInput("Cannot save a route without a total travel time.")

        routes = self._read_all()
        created_at = datetime.fromtimestamp(self._clock(), tz=timezone.utc)
        saved = SavedRoute(
            id=self._next_id({existing.id for existing in routes}),
            name=(name or "").strip() or default_route_name(route.start_address, len(route.route)),
            start_address=route.start_address,
            delivery_addresses=tuple(route.delivery_addresses),
            optimized_route=tuple(route.route),
            total_travel_time=route.total_travel_time,
            created_at=created_at.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        )
        routes.append(saved)
        self._write_all(routes)
        logger.info(f"Saved route {saved.id} '{saved.name}' ({len(routes)} total)")
        return saved

    def load(self, route_id: str) -> SavedRoute:
        for route in self._read_all():
            if route.id == route_id:
                return route
        raise NotFound(route_id)

    def delete(self, route_id: str) -> None:
        """Remove ``route_id`` if present; unknown ids are ignored."""
        routes = self._read_all()
        remaining = [route for route in routes if route.id != route_id]
        if len(remaining) == len(routes):
            return
        self._write_all(remaining)
        logger.info(f"Deleted saved route {route_id}")
