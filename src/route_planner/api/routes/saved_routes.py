"""Saved route endpoints."""

from __future__ import annotations

from datetime import datetime, timezone
from functools import lru_cache

from fastapi import APIRouter, HTTPException, Path, Query, Response, status

from ...errors import InvalidInput, NotFound
from ...models.domain import OptimizedRoute
from ...persistence.filesystem import FileStorage
from ...persistence.saved_routes import RouteStore
from ...schemas.routes import OptimizeRouteResponse, SaveRouteRequest, SavedRouteModel
from .routes import run_optimization

router = APIRouter(prefix="/saved-routes", tags=["saved-routes"])


@lru_cache()
def get_route_store() -> RouteStore:
    return RouteStore(FileStorage())


@router.get("", response_model=list[SavedRouteModel])
def list_saved_routes() -> list[SavedRouteModel]:
    return [SavedRouteModel.from_domain(route) for route in get_route_store().list()]


@router.post("", response_model=SavedRouteModel, status_code=status.HTTP_201_CREATED)
def save_route(payload: SaveRouteRequest) -> SavedRouteModel:
    route = OptimizedRoute(
        start_address=payload.start_address,
        delivery_addresses=[address.strip() for address in payload.delivery_addresses if address.strip()],
        round_trip=False,
        route=payload.route_steps(),
        total_travel_time=payload.total_travel_time,
        computed_at=datetime.now(timezone.utc),
    )
    try:
        saved = get_route_store().save(route, name=payload.name)
    except InvalidInput as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return SavedRouteModel.from_domain(saved)


@router.get("/{route_id}", response_model=SavedRouteModel)
def load_saved_route(route_id: str = Path(..., description="Saved route identifier")) -> SavedRouteModel:
    try:
        return SavedRouteModel.from_domain(get_route_store().load(route_id))
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.delete("/{route_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_saved_route(route_id: str = Path(..., description="Saved route identifier")) -> Response:
    get_route_store().delete(route_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{route_id}/recalculate", response_model=OptimizeRouteResponse)
def recalculate_saved_route(
    route_id: str = Path(..., description="Saved route identifier"),
    round_trip: bool = Query(default=False, alias="roundTrip", description="End the new route at the warehouse."),
) -> OptimizeRouteResponse:
    """Re-optimize a saved route's addresses. The saved snapshot itself is left untouched."""
    try:
        saved = get_route_store().load(route_id)
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return run_optimization(saved.start_address, list(saved.delivery_addresses), round_trip)
