"""Domain models for route requests, oracle replies and saved routes."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping, Optional


@dataclass(slots=True, frozen=True)
class Location:
    """Caller position used only as a bias hint for maps grounding."""

    latitude: float
    longitude: float


@dataclass(slots=True, frozen=True)
class RouteRequest:
    """A fully composed optimization request ready to be sent to the oracle."""

    warehouse: str
    deliveries: tuple[str, ...]
    round_trip: bool
    final_stop_instruction: str
    prompt: str
    location: Optional[Location] = None


@dataclass(slots=True, frozen=True)
class GroundingChunk:
    """Maps citation attached by the oracle; ``uri`` may be absent."""

    title: str
    uri: Optional[str] = None

    def to_payload(self) -> dict:
        return {"maps": {"title": self.title, "uri": self.uri}}


@dataclass(slots=True, frozen=True)
class OracleReply:
    raw_text: str
    grounding_chunks: tuple[GroundingChunk, ...] = ()


@dataclass(slots=True, frozen=True)
class ValidatedRoute:
    """Oracle payload that passed schema checks. Steps are kept as the oracle sent them."""

    route: list[dict[str, Any]]
    total_travel_time: str


@dataclass(slots=True)
class OptimizedRoute:
    start_address: str
    delivery_addresses: list[str]
    round_trip: bool
    route: list[dict[str, Any]]
    total_travel_time: str
    computed_at: datetime
    grounding_chunks: tuple[GroundingChunk, ...] = ()
    maps_url: Optional[str] = None


@dataclass(slots=True, frozen=True)
class SavedRoute:
    """Immutable snapshot of a computed route, persisted under a generated id.

    Steps are private deep copies exposed as read-only mappings.
    """

    id: str
    name: str
    start_address: str
    delivery_addresses: tuple[str, ...]
    optimized_route: tuple[Mapping[str, Any], ...]
    total_travel_time: str
    created_at: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "delivery_addresses", tuple(self.delivery_addresses))
        object.__setattr__(
            self,
            "optimized_route",
            tuple(MappingProxyType(copy.deepcopy(dict(step))) for step in self.optimized_route),
        )

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "startAddress": self.start_address,
            "deliveryAddresses": list(self.delivery_addresses),
            "optimizedRoute": [copy.deepcopy(dict(step)) for step in self.optimized_route],
            "totalTravelTime": self.total_travel_time,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "SavedRoute":
        """Rebuild a saved route from its persisted layout. Raises on missing keys."""
        optimized_route = record["optimizedRoute"]
        delivery_addresses = record["deliveryAddresses"]
        if not isinstance(optimized_route, list) or not isinstance(delivery_addresses, list):
            raise TypeError("Saved route record has malformed address or step lists.")
        return cls(
            id=str(record["id"]),
            name=str(record["name"]),
            start_address=str(record["startAddress"]),
            delivery_addresses=tuple(str(address) for address in delivery_addresses),
            optimized_route=tuple(dict(step) for step in optimized_route),
            total_travel_time=str(record["totalTravelTime"]),
            created_at=str(record["createdAt"]),
        )
