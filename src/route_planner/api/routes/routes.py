"""Route optimization endpoints."""

from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import APIRouter, HTTPException, status

from ...errors import (
    InvalidInput,
    MalformedResponse,
    OptimizationInProgress,
    OracleMisconfigured,
    OracleUnavailable,
    RoutePlannerError,
)
from ...models.domain import Location
from ...schemas.routes import OptimizeRouteRequest, OptimizeRouteResponse
from ...services.routing.service import RouteOptimizer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/routes", tags=["routes"])


@lru_cache()
def get_optimizer() -> RouteOptimizer:
    return RouteOptimizer()


def to_http_error(exc: RoutePlannerError) -> HTTPException:
    """Map a planner failure to the HTTP status the API reports for it."""
    if isinstance(exc, InvalidInput):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, OptimizationInProgress):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, OracleMisconfigured):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    elif isinstance(exc, (OracleUnavailable, MalformedResponse)):
        code = status.HTTP_502_BAD_GATEWAY
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=str(exc))


def run_optimization(
    start_address: str,
    delivery_addresses: list[str],
    round_trip: bool,
    location: Location | None = None,
) -> OptimizeRouteResponse:
    try:
        result = get_optimizer().optimize(start_address, delivery_addresses, round_trip, location)
    except RoutePlannerError as exc:
        if not isinstance(exc, (InvalidInput, OptimizationInProgress)):
            logger.error(f"Route optimization failed: {exc}")
        raise to_http_error(exc) from exc
    return OptimizeRouteResponse.from_domain(result)


@router.post("/optimize", response_model=OptimizeRouteResponse, status_code=status.HTTP_200_OK)
def optimize(payload: OptimizeRouteRequest) -> OptimizeRouteResponse:
    location = (
        Location(latitude=payload.location.latitude, longitude=payload.location.longitude)
        if payload.location
        else None
    )
    return run_optimization(payload.start_address, payload.delivery_addresses, payload.round_trip, location)
