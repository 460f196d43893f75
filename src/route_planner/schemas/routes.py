"""Route optimization and saved route request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..models.domain import GroundingChunk, OptimizedRoute, SavedRoute
from ..services.routing.request_builder import split_address_block


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LocationModel(CamelModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class OptimizeRouteRequest(CamelModel):
    start_address: str = Field(..., description="Warehouse address the route starts from.")
    delivery_addresses: List[str] = Field(
        ...,
        description="Delivery addresses, as a list or a newline-separated block.",
    )
    round_trip: bool = Field(default=False, description="If True, the route ends back at the warehouse.")
    location: Optional[LocationModel] = Field(default=None, description="Caller position used to bias map lookups.")

    @field_validator("delivery_addresses", mode="before")
    @classmethod
    def _split_address_block(cls, value: Any) -> Any:
        if isinstance(value, str):
            return split_address_block(value)
        return value


class GroundingChunkModel(BaseModel):
    maps: Dict[str, Optional[str]]

    @classmethod
    def from_domain(cls, chunk: GroundingChunk) -> "GroundingChunkModel":
        return cls.model_validate(chunk.to_payload())


class OptimizeRouteResponse(CamelModel):
    start_address: str
    delivery_addresses: List[str]
    round_trip: bool
    route: List[Dict[str, Any]]
    total_travel_time: str
    computed_at: datetime
    grounding_chunks: List[GroundingChunkModel]
    maps_url: Optional[str] = None

    @classmethod
    def from_domain(cls, result: OptimizedRoute) -> "OptimizeRouteResponse":
        return cls(
            start_address=result.start_address,
            delivery_addresses=result.delivery_addresses,
            round_trip=result.round_trip,
            route=result.route,
            total_travel_time=result.total_travel_time,
            computed_at=result.computed_at,
            grounding_chunks=[GroundingChunkModel.from_domain(chunk) for chunk in result.grounding_chunks],
            maps_url=result.maps_url,
        )


class ProcessedRouteStepModel(CamelModel):
    """A route step with its derived arrival time. Extra oracle fields are kept as sent."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    stop: int = Field(..., ge=1)
    address: str = Field(..., min_length=1)
    instructions: str
    travel_time_from_previous: str
    estimated_arrival_time: str = Field(..., min_length=1)


class SaveRouteRequest(CamelModel):
    name: Optional[str] = Field(default=None, description="Display name; generated from the start address if omitted.")
    start_address: str = Field(..., min_length=1)
    delivery_addresses: List[str]
    optimized_route: List[ProcessedRouteStepModel] = Field(..., min_length=1)
    total_travel_time: str = Field(..., min_length=1)

    @field_validator("start_address", "total_travel_time", "name", mode="before")
    @classmethod
    def _strip_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    def route_steps(self) -> List[Dict[str, Any]]:
        return [step.model_dump(by_alias=True) for step in self.optimized_route]


class SavedRouteModel(CamelModel):
    id: str
    name: str
    start_address: str
    delivery_addresses: List[str]
    optimized_route: List[Dict[str, Any]]
    total_travel_time: str
    created_at: str

    @classmethod
    def from_domain(cls, route: SavedRoute) -> "SavedRouteModel":
        return cls.model_validate(route.to_record())
